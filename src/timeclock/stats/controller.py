from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user_id, login_required, to_json
from ..container import Container
from ..core.enums import StatsPeriod


def register(app: Flask, container: Container) -> None:
    service = container.stats_service

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def stats():
        period = request.args.get("period") or StatsPeriod.MONTH.value
        return jsonify({"stats": to_json(service.user_statistics(current_user_id(), period))})

    @app.route("/api/attendance/today/counts", methods=["GET"], endpoint="attendance_today_counts")
    @login_required
    def today_counts():
        return jsonify(to_json(service.today_counts(current_user_id())))
