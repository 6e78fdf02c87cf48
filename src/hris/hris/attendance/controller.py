from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.validators import as_bool, optional_number, parse_csv, parse_csv_ints, require_choice
from ..common.web import current_user, json_body, login_required, management_required
from ..container import Container
from ..core.enums import Role
from .model import HistoryFilters

CSV_FIELDS = [
    "date",
    "employeeName",
    "department",
    "role",
    "checkIn",
    "checkOut",
    "checkInStatus",
    "checkOutType",
    "address",
]


def _filters_from_args(args) -> HistoryFilters:
    return HistoryFilters(
        search=(args.get("search") or "").strip() or None,
        employee_ids=parse_csv_ints(args.get("employeeIds"), "employeeIds"),
        roles=[require_choice(r, "roles", Role) for r in parse_csv(args.get("roles"))],
        start_date=parse_optional_date(args.get("startDate")),
        end_date=parse_optional_date(args.get("endDate")),
        show_all=as_bool(args.get("all")),
    )


def register(app: Flask, container: Container) -> None:
    def _write_history_csv(rows, *, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row.to_dict())

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        rows, today = container.attendance_service.history(current_user(), _filters_from_args(request.args))
        return jsonify(
            {
                "history": [r.to_dict() for r in rows],
                "todayDateAttendance": today.to_dict() if today else None,
            }
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        body = json_body()
        record = container.attendance_service.check_in(
            current_user(),
            latitude=optional_number(body.get("latitude"), "latitude"),
            longitude=optional_number(body.get("longitude"), "longitude"),
            address=body.get("address"),
        )
        return jsonify({"message": "Checked in", "attendance": record.to_dict()}), 201

    @app.route("/api/attendance/checkout", methods=["POST", "PUT"], endpoint="attendance_check_out_today")
    @login_required
    def attendance_check_out_today():
        record = container.attendance_service.check_out_today(current_user())
        return jsonify({"message": "Checked out", "attendance": record.to_dict()})

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out(attendance_id: int):
        record = container.attendance_service.check_out(current_user(), attendance_id)
        return jsonify({"message": "Checked out", "attendance": record.to_dict()})

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @management_required
    def attendance_delete(attendance_id: int):
        container.attendance_service.delete(current_user(), attendance_id)
        return jsonify({"message": "Attendance deleted"})

    @app.route("/api/attendance/export.csv", methods=["GET"], endpoint="attendance_export_csv")
    @login_required
    def attendance_export_csv():
        filters = _filters_from_args(request.args)
        rows, _ = container.attendance_service.history(current_user(), filters)
        start = filters.start_date.strftime("%Y%m%d") if filters.start_date else "all"
        end = filters.end_date.strftime("%Y%m%d") if filters.end_date else "latest"
        return _write_history_csv(rows, filename=f"attendance_{start}_{end}.csv")
