from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.pagination import PageRequest
from ..common.validators import optional_int
from ..common.web import current_user, login_required, require_query_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/activity-logs", methods=["GET"], endpoint="activity_logs_list")
    @login_required
    def activity_logs_list():
        page = PageRequest.from_args(request.args.get("page"), request.args.get("limit"), default_limit=20)
        result = container.activity_service.list_logs(
            current_user(),
            page=page,
            user_id=optional_int(request.args.get("userId"), "userId"),
        )
        meta = result.metadata()
        return jsonify(
            {
                "logs": [log.to_dict() for log in result.items],
                "pagination": {
                    "page": meta["page"],
                    "limit": meta["limit"],
                    "totalCount": meta["total"],
                    "totalPages": meta["totalPages"],
                },
            }
        )

    @app.route("/api/activity-logs", methods=["DELETE"], endpoint="activity_logs_delete")
    @login_required
    def activity_logs_delete():
        container.activity_service.delete(current_user(), require_query_id())
        return jsonify({"message": "Activity log deleted"})
