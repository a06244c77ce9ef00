from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_optional_datetime
from ..common.http import current_user_id, json_body, login_required, provenance_from_request, to_json
from ..common.validators import require_positive_int
from ..container import Container
from ..core import constants
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _date_window(args) -> tuple[Optional[datetime], Optional[datetime]]:
    """``startDate``/``endDate`` query args (YYYY-MM-DD) as an inclusive instant window."""
    start = end = None
    if args.get("startDate"):
        start = datetime.combine(parse_iso_date(args["startDate"]), time.min)
    if args.get("endDate"):
        end = datetime.combine(parse_iso_date(args["endDate"]), time.max)
    return start, end


def _paging(args, default_limit: int) -> tuple[int, int]:
    page = require_positive_int(args.get("page", 1), "page")
    limit = require_positive_int(args.get("limit", default_limit), "limit")
    return page, limit


def _optional_attendance_id(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_int(value, "attendanceId")


def _optional_flag(value, field_name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        data = json_body()
        result = service.check_in(
            current_user_id(),
            provenance_from_request(data),
            project_id=data.get("projectId"),
            task_id=data.get("taskId"),
            notes=data.get("notes"),
        )
        return jsonify({
            "message": "Checked in successfully",
            "attendance": to_json(result.record),
            "status": result.status.value,
        }), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        data = json_body()
        result = service.check_out(
            current_user_id(),
            provenance_from_request(data),
            attendance_id=_optional_attendance_id(data.get("attendanceId")),
            explicit_checkout_time=parse_optional_datetime(data.get("checkOutTime")),
            notes=data.get("notes"),
        )
        if result.is_auto_checkout:
            message = f"Auto checked out for a check-in from {result.days_since_check_in} day(s) ago"
        else:
            message = "Checked out successfully"
        return jsonify({
            "message": message,
            "attendance": to_json(result.record),
            "isAutoCheckout": result.is_auto_checkout,
            "daysSinceCheckIn": result.days_since_check_in,
        })

    @app.route("/api/attendance/auto-checkout", methods=["POST"], endpoint="attendance_auto_checkout")
    @login_required
    def auto_checkout():
        data = json_body()
        result = service.auto_checkout_sweep(
            current_user_id(),
            force_checkout=_optional_flag(data.get("forceCheckout"), "forceCheckout"),
            provenance=provenance_from_request(data),
        )
        return jsonify({
            "checkedOut": result.checked_out,
            "message": result.message,
            "attendance": to_json(result.record),
            "nextCheckout": to_json(result.next_checkout),
        })

    @app.route("/api/attendance/current", methods=["GET"], endpoint="attendance_current")
    @login_required
    def current():
        state = service.get_current(current_user_id())
        return jsonify({"checkedIn": state.checked_in, "attendance": to_json(state.record)})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def history():
        start, end = _date_window(request.args)
        page, limit = _paging(request.args, constants.DEFAULT_HISTORY_LIMIT)
        group_by = request.args.get("groupBy")
        if group_by:
            groups = container.stats_service.grouped_history(
                current_user_id(), group_by, start=start, end=end, page=page, limit=limit
            )
            return jsonify(to_json(groups))

        return jsonify(to_json(service.get_history(current_user_id(), start=start, end=end, page=page, limit=limit)))

    @app.route("/api/attendance/admin/records", methods=["GET"], endpoint="attendance_admin_records")
    @login_required
    def admin_records():
        start, end = _date_window(request.args)
        page, limit = _paging(request.args, constants.DEFAULT_PAGE_SIZE)
        records = service.list_records(
            current_user_id(),
            user_id=request.args.get("userId") or None,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        return jsonify(to_json(records))
