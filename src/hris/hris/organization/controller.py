from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import optional_int
from ..common.web import current_user, json_body, login_required, management_required, require_query_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _target_id(body: dict) -> int:
        return optional_int(body.get("id"), "id") or require_query_id()

    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @login_required
    def departments_list():
        user = current_user()
        if request.args.get("id"):
            return jsonify(container.department_service.get(user, require_query_id()).to_dict())
        return jsonify([d.to_dict() for d in container.department_service.list(user)])

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @management_required
    def departments_create():
        department = container.department_service.create(current_user(), json_body())
        return jsonify(department.to_dict()), 201

    @app.route("/api/departments", methods=["PUT"], endpoint="departments_update")
    @management_required
    def departments_update():
        body = json_body()
        department = container.department_service.update(current_user(), _target_id(body), body)
        return jsonify(department.to_dict())

    @app.route("/api/departments", methods=["DELETE"], endpoint="departments_delete")
    @management_required
    def departments_delete():
        container.department_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Department deleted"})

    @app.route("/api/positions", methods=["GET"], endpoint="positions_list")
    @login_required
    def positions_list():
        user = current_user()
        if request.args.get("id"):
            return jsonify(container.position_service.get(user, require_query_id()).to_dict())
        department_id = optional_int(request.args.get("departmentId"), "departmentId")
        return jsonify([p.to_dict() for p in container.position_service.list(user, department_id=department_id)])

    @app.route("/api/positions", methods=["POST"], endpoint="positions_create")
    @management_required
    def positions_create():
        position = container.position_service.create(current_user(), json_body())
        return jsonify(position.to_dict()), 201

    @app.route("/api/positions", methods=["PUT"], endpoint="positions_update")
    @management_required
    def positions_update():
        body = json_body()
        position = container.position_service.update(current_user(), _target_id(body), body)
        return jsonify(position.to_dict())

    @app.route("/api/positions", methods=["DELETE"], endpoint="positions_delete")
    @management_required
    def positions_delete():
        container.position_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Position deleted"})
