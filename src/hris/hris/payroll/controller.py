from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.web import current_user, json_body, login_required, management_required
from ..container import Container
from .export import EXCEL_MIMETYPE, payroll_workbook


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    @login_required
    def payroll_list():
        rows = container.payroll_service.list(
            current_user(), month=request.args.get("month"), year=request.args.get("year")
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/payroll", methods=["POST"], endpoint="payroll_generate")
    @login_required
    def payroll_generate():
        body = json_body()
        result = container.payroll_service.generate(current_user(), body.get("month"), body.get("year"))
        return jsonify(result.to_dict())

    @app.route("/api/payroll/<int:payroll_id>/pay", methods=["POST"], endpoint="payroll_mark_paid")
    @management_required
    def payroll_mark_paid(payroll_id: int):
        payroll = container.payroll_service.mark_paid(current_user(), payroll_id)
        return jsonify(payroll.to_dict())

    @app.route("/api/payroll/export.xlsx", methods=["GET"], endpoint="payroll_export_excel")
    @management_required
    def payroll_export_excel():
        month = request.args.get("month")
        year = request.args.get("year")
        rows = container.payroll_service.list(current_user(), month=month, year=year)
        suffix = f"{year}_{int(month):02d}" if month and year and month.isdigit() else "all"
        return send_file(
            payroll_workbook(rows),
            download_name=f"payroll_{suffix}.xlsx",
            as_attachment=True,
            mimetype=EXCEL_MIMETYPE,
        )
