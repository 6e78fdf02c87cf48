from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user, json_body, login_required, management_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/system/settings", methods=["GET"], endpoint="system_settings_get")
    @login_required
    def system_settings_get():
        user = current_user()
        return jsonify(container.system_settings_service.get(user.company_id))

    @app.route("/api/system/settings", methods=["POST", "PUT"], endpoint="system_settings_save")
    @management_required
    def system_settings_save():
        saved = container.system_settings_service.save(current_user(), json_body())
        return jsonify({"message": "Settings saved", "settings": saved})

    @app.route("/api/payroll/settings", methods=["GET"], endpoint="payroll_settings_get")
    @login_required
    def payroll_settings_get():
        user = current_user()
        return jsonify(container.payroll_settings_service.get(user.company_id))

    @app.route("/api/payroll/settings", methods=["POST"], endpoint="payroll_settings_save")
    @management_required
    def payroll_settings_save():
        body = json_body()
        written = container.payroll_settings_service.save(current_user(), body.get("settings"))
        return jsonify({"message": "Payroll settings saved", "count": written})
