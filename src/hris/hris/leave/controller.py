from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.pagination import PageRequest
from ..common.validators import parse_csv_ints, require_choice
from ..common.web import current_user, json_body, login_required, management_required
from ..container import Container
from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveFilters


def _filters_from_args(args) -> LeaveFilters:
    employee_ids = parse_csv_ints(args.get("employeeIds") or args.get("employeeId"), "employeeId")
    return LeaveFilters(
        status=require_choice(args["status"], "status", LeaveStatus) if args.get("status") else None,
        type=require_choice(args["type"], "type", LeaveType) if args.get("type") else None,
        search=(args.get("search") or "").strip() or None,
        start_date=parse_optional_date(args.get("startDate")),
        end_date=parse_optional_date(args.get("endDate")),
        employee_ids=employee_ids,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leave", methods=["GET"], endpoint="leave_list")
    @login_required
    def leave_list():
        page = PageRequest.from_args(request.args.get("page"), request.args.get("limit"))
        result, quota = container.leave_service.list(current_user(), _filters_from_args(request.args), page)
        meta = result.metadata()
        return jsonify(
            {
                "leaves": [leave.to_dict() for leave in result.items],
                "quota": quota.to_dict() if quota else None,
                "pagination": {
                    "page": meta["page"],
                    "limit": meta["limit"],
                    "totalCount": meta["total"],
                    "totalPages": meta["totalPages"],
                },
            }
        )

    @app.route("/api/leave", methods=["POST"], endpoint="leave_create")
    @login_required
    def leave_create():
        leave = container.leave_service.create(current_user(), json_body())
        return jsonify({"message": "Leave request submitted", "leave": leave.to_dict()}), 201

    @app.route("/api/leave/<int:leave_id>", methods=["PUT"], endpoint="leave_decide")
    @management_required
    def leave_decide(leave_id: int):
        leave = container.leave_service.decide(current_user(), leave_id, json_body().get("status"))
        return jsonify({"message": f"Leave request {leave.status.value}", "leave": leave.to_dict()})
