from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set_clause, db_cursor, fetchall, fetchone, translate_write_conflicts
from .model import PATCHABLE_FIELDS, AttendanceRecord, NewAttendance, Provenance, provenance_columns
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, check_in_time, check_out_time, total_hours, auto_checkout,
    check_in_location_name, check_in_ip_address, check_in_device_info, check_in_latitude, check_in_longitude,
    check_out_location_name, check_out_ip_address, check_out_device_info, check_out_latitude, check_out_longitude,
    project_id, task_id, notes, version, created_at, updated_at
"""


def _provenance(r: dict, side: str) -> Provenance:
    return Provenance(
        location_name=r.get(f"{side}_location_name"),
        ip_address=r.get(f"{side}_ip_address"),
        device_info=r.get(f"{side}_device_info"),
        latitude=r.get(f"{side}_latitude"),
        longitude=r.get(f"{side}_longitude"),
    )


def _to_record(r: dict) -> AttendanceRecord:
    total = r.get("total_hours")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=str(r["user_id"]),
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        total_hours=float(total) if total is not None else None,
        auto_checkout=bool(r.get("auto_checkout")),
        check_in=_provenance(r, "check_in"),
        check_out=_provenance(r, "check_out"),
        project_id=r.get("project_id"),
        task_id=r.get("task_id"),
        notes=r.get("notes"),
        version=int(r.get("version") or 1),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _window(user_id: Optional[str], start: Optional[datetime], end: Optional[datetime]) -> tuple[str, list]:
    clauses = ["1=1"]
    params: list[object] = []
    if user_id is not None:
        clauses.append("user_id=%s")
        params.append(user_id)
    if start is not None:
        clauses.append("check_in_time >= %s")
        params.append(start)
    if end is not None:
        clauses.append("check_in_time <= %s")
        params.append(end)
    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_open_by_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND check_out_time IS NULL
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_latest_by_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        columns = {
            "user_id": new.user_id,
            "check_in_time": new.check_in_time,
            **provenance_columns("check_in", new.check_in),
            "project_id": new.project_id,
            "task_id": new.task_id,
            "notes": new.notes,
        }
        placeholders = ",".join(["%s"] * len(columns))

        with translate_write_conflicts("User already has an open attendance record"):
            with db_cursor(self._conn_factory) as (_, cur):
                # uq_attendance_open_user admits one open row per user; the losing insert fails.
                cur.execute(
                    f"INSERT INTO attendance_records({', '.join(columns)}) VALUES({placeholders})",
                    tuple(columns.values()),
                )
                new_id = int(cur.lastrowid)
                cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (new_id,))
                return _to_record(fetchone(cur))

    def update(self, attendance_id: int, patch: Mapping[str, Any], *, expected_version: int) -> AttendanceRecord:
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported attendance fields: {sorted(unknown)}")

        assignments, params = build_set_clause(dict(patch))
        with translate_write_conflicts("Attendance record was modified concurrently"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    UPDATE attendance_records
                    SET {assignments}, version=version+1
                    WHERE attendance_id=%s AND version=%s
                    """,
                    (*params, int(attendance_id), int(expected_version)),
                )
                if cur.rowcount == 0:
                    cur.execute("SELECT version FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
                    if not fetchone(cur):
                        raise NotFoundError("Attendance record not found")
                    raise ConflictError("Attendance record was modified concurrently")

                cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
                return _to_record(fetchone(cur))

    def list_records(
        self,
        *,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = _window(user_id, start, end)
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY check_in_time DESC"
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params += [int(limit), int(offset)]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def count_records(
        self,
        *,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        where, params = _window(user_id, start, end)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
