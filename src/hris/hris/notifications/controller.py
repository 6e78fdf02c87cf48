from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import optional_int
from ..common.web import current_user, json_body, login_required, management_required, require_query_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="notifications_list")
    @login_required
    def notifications_list():
        user = current_user()
        if request.args.get("id"):
            return jsonify(container.notification_service.get(user, require_query_id()).to_dict())
        return jsonify([n.to_dict() for n in container.notification_service.list(user)])

    @app.route("/api/notifications", methods=["POST"], endpoint="notifications_create")
    @management_required
    def notifications_create():
        notification = container.notification_service.create(current_user(), json_body())
        return jsonify(notification.to_dict()), 201

    @app.route("/api/notifications", methods=["PUT"], endpoint="notifications_update")
    @management_required
    def notifications_update():
        body = json_body()
        target = optional_int(body.get("id"), "id") or require_query_id()
        notification = container.notification_service.update(current_user(), target, body)
        return jsonify(notification.to_dict())

    @app.route("/api/notifications", methods=["DELETE"], endpoint="notifications_delete")
    @management_required
    def notifications_delete():
        container.notification_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Notification deleted"})
