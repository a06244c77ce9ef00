from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import CorrectionStatus
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set_clause, db_cursor, fetchall, fetchone, translate_write_conflicts
from .model import CorrectionRequest, NewCorrectionRequest, ReviewDecision
from .repository import CorrectionRepository

_COLUMNS = """
    request_id, attendance_id, user_id, original_check_in_time, original_check_out_time,
    requested_check_in_time, requested_check_out_time, reason, status,
    reviewed_by, reviewed_at, review_notes, created_at
"""


def _to_request(r: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        attendance_id=int(r["attendance_id"]),
        user_id=str(r["user_id"]),
        original_check_in_time=r["original_check_in_time"],
        original_check_out_time=r.get("original_check_out_time"),
        requested_check_in_time=r.get("requested_check_in_time"),
        requested_check_out_time=r.get("requested_check_out_time"),
        reason=r["reason"],
        status=CorrectionStatus(r["status"]),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        review_notes=r.get("review_notes"),
        created_at=r.get("created_at"),
    )


def _filters(status: Optional[CorrectionStatus], user_id: Optional[str]) -> tuple[str, list]:
    clauses = ["1=1"]
    params: list[object] = []
    if status is not None:
        clauses.append("status=%s")
        params.append(CorrectionStatus(status).value)
    if user_id is not None:
        clauses.append("user_id=%s")
        params.append(user_id)
    return " AND ".join(clauses), params


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, new: NewCorrectionRequest) -> CorrectionRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_correction_requests(
                    attendance_id, user_id, original_check_in_time, original_check_out_time,
                    requested_check_in_time, requested_check_out_time, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.attendance_id),
                    new.user_id,
                    new.original_check_in_time,
                    new.original_check_out_time,
                    new.requested_check_in_time,
                    new.requested_check_out_time,
                    new.reason,
                    CorrectionStatus.PENDING.value,
                ),
            )
            new_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_correction_requests WHERE request_id=%s", (new_id,))
            return _to_request(fetchone(cur))

    def get(self, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_correction_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(self, decision: ReviewDecision) -> CorrectionRequest:
        with translate_write_conflicts("Correction review conflicted with a concurrent change"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE attendance_correction_requests
                    SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s
                    WHERE request_id=%s AND status=%s
                    """,
                    (
                        CorrectionStatus(decision.status).value,
                        decision.reviewed_by,
                        decision.reviewed_at,
                        decision.review_notes,
                        int(decision.request_id),
                        CorrectionStatus.PENDING.value,
                    ),
                )
                if cur.rowcount == 0:
                    cur.execute("SELECT status FROM attendance_correction_requests WHERE request_id=%s", (int(decision.request_id),))
                    if not fetchone(cur):
                        raise NotFoundError("Correction request not found")
                    raise InvalidStateError("Correction request has already been reviewed")

                if decision.attendance_patch:
                    assignments, params = build_set_clause(dict(decision.attendance_patch))
                    cur.execute(
                        f"""
                        UPDATE attendance_records
                        SET {assignments}, version=version+1
                        WHERE attendance_id=%s AND version=%s
                        """,
                        (*params, int(decision.attendance_id), int(decision.expected_version)),
                    )
                    if cur.rowcount == 0:
                        # Raising rolls back the status change as well.
                        raise ConflictError("Attendance record was modified concurrently")

                cur.execute(
                    f"SELECT {_COLUMNS} FROM attendance_correction_requests WHERE request_id=%s",
                    (int(decision.request_id),),
                )
                return _to_request(fetchone(cur))

    def list_requests(
        self,
        *,
        status: Optional[CorrectionStatus] = None,
        user_id: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[CorrectionRequest]:
        where, params = _filters(status, user_id)
        sql = f"SELECT {_COLUMNS} FROM attendance_correction_requests WHERE {where} ORDER BY created_at DESC, request_id DESC"
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params += [int(limit), int(offset)]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_request(r) for r in fetchall(cur)]

    def count_requests(self, *, status: Optional[CorrectionStatus] = None, user_id: Optional[str] = None) -> int:
        where, params = _filters(status, user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_correction_requests WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
