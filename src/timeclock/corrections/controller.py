from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_datetime
from ..common.http import current_user_id, json_body, login_required, to_json
from ..common.validators import require_positive_int
from ..container import Container
from ..core import constants


def register(app: Flask, container: Container) -> None:
    service = container.correction_service

    @app.route("/api/attendance/correction-request", methods=["POST"], endpoint="correction_request")
    @login_required
    def correction_request():
        data = json_body()
        created = service.request_correction(
            require_positive_int(data.get("attendanceId"), "attendanceId"),
            current_user_id(),
            requested_check_in_time=parse_optional_datetime(data.get("requestedCheckInTime")),
            requested_check_out_time=parse_optional_datetime(data.get("requestedCheckOutTime")),
            reason=data.get("reason") or "",
        )
        return jsonify({
            "message": "Correction request submitted successfully",
            "correctionRequest": to_json(created),
        }), 201

    @app.route("/api/attendance/correction-request", methods=["GET"], endpoint="my_correction_requests")
    @login_required
    def my_correction_requests():
        items = service.list_mine(current_user_id(), status=request.args.get("status"))
        return jsonify({"correctionRequests": to_json(items)})

    @app.route("/api/attendance/admin/correction-requests", methods=["GET"], endpoint="admin_correction_requests")
    @login_required
    def admin_correction_requests():
        page = require_positive_int(request.args.get("page", 1), "page")
        limit = require_positive_int(request.args.get("limit", constants.DEFAULT_PAGE_SIZE), "limit")
        result = service.list_for_reviewer(
            current_user_id(),
            status=request.args.get("status"),
            user_id=request.args.get("userId") or None,
            page=page,
            limit=limit,
        )
        return jsonify(to_json(result))

    @app.route("/api/attendance/admin/correction-requests", methods=["PATCH"], endpoint="review_correction_request")
    @login_required
    def review_correction_request():
        data = json_body()
        result = service.review_correction(
            require_positive_int(data.get("id"), "id"),
            current_user_id(),
            data.get("status"),
            data.get("reviewNotes"),
        )
        return jsonify({
            "message": f"Correction request {result.request.status.value}",
            "correctionRequest": to_json(result.request),
            "attendance": to_json(result.record),
        })
