from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_choice
from ..common.web import current_user, login_required
from ..container import Container
from .model import ChartRange


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @login_required
    def dashboard_stats():
        chart_range = require_choice(request.args.get("range") or ChartRange.WEEK.value, "range", ChartRange)
        return jsonify(container.dashboard_service.summary(current_user(), chart_range).to_dict())
