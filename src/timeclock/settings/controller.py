from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, json_body, login_required, to_json
from ..container import Container
from .model import SettingsUpdate


def register(app: Flask, container: Container) -> None:
    service = container.settings_service

    @app.route("/api/attendance/settings", methods=["GET"], endpoint="attendance_settings")
    @login_required
    def get_settings():
        return jsonify({"settings": to_json(service.get_for_user(current_user_id()))})

    @app.route("/api/attendance/settings", methods=["PATCH"], endpoint="update_attendance_settings")
    @login_required
    def update_settings():
        user_id = current_user_id()
        data = json_body()
        current = service.get_for_user(user_id)
        work_days = data.get("workDays", current.work_days)
        if isinstance(work_days, (list, tuple)):
            work_days = ",".join(str(day) for day in work_days)
        update = SettingsUpdate(
            work_hours_per_day=data.get("workHoursPerDay", current.work_hours_per_day),
            work_days=work_days,
            reminder_enabled=data.get("reminderEnabled", current.reminder_enabled),
            auto_checkout_enabled=data.get("autoCheckoutEnabled", current.auto_checkout_enabled),
            reminder_time=data.get("reminderTime", current.reminder_time),
            auto_checkout_time=data.get("autoCheckoutTime", current.auto_checkout_time),
        )
        updated = service.update_for_user(user_id, update)
        return jsonify({"message": "Settings updated successfully", "settings": to_json(updated)})
