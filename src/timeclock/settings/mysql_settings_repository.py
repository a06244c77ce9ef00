from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AttendanceSettings
from .repository import SettingsRepository

_SELECT = """
    SELECT settings_id, user_id, work_hours_per_day, work_days, reminder_enabled, reminder_time,
           auto_checkout_enabled, auto_checkout_time, created_at, updated_at
    FROM attendance_settings
    WHERE user_id=%s
"""


def _to_settings(r: dict) -> AttendanceSettings:
    return AttendanceSettings(
        settings_id=int(r["settings_id"]),
        user_id=str(r["user_id"]),
        work_hours_per_day=float(r["work_hours_per_day"]),
        work_days=str(r["work_days"]),
        reminder_enabled=bool(r["reminder_enabled"]),
        reminder_time=r.get("reminder_time"),
        auto_checkout_enabled=bool(r["auto_checkout_enabled"]),
        auto_checkout_time=r.get("auto_checkout_time"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user(self, user_id: str) -> Optional[AttendanceSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT, (user_id,))
            r = fetchone(cur)
            return _to_settings(r) if r else None

    def upsert(self, settings: AttendanceSettings) -> AttendanceSettings:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_settings(
                    user_id, work_hours_per_day, work_days, reminder_enabled, reminder_time,
                    auto_checkout_enabled, auto_checkout_time
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    work_hours_per_day=VALUES(work_hours_per_day),
                    work_days=VALUES(work_days),
                    reminder_enabled=VALUES(reminder_enabled),
                    reminder_time=VALUES(reminder_time),
                    auto_checkout_enabled=VALUES(auto_checkout_enabled),
                    auto_checkout_time=VALUES(auto_checkout_time)
                """,
                (
                    settings.user_id,
                    settings.work_hours_per_day,
                    settings.work_days,
                    int(settings.reminder_enabled),
                    settings.reminder_time,
                    int(settings.auto_checkout_enabled),
                    settings.auto_checkout_time,
                ),
            )
            cur.execute(_SELECT, (settings.user_id,))
            return _to_settings(fetchone(cur))

    def create_default(self, settings: AttendanceSettings) -> AttendanceSettings:
        with db_cursor(self._conn_factory) as (_, cur):
            # A row written concurrently wins; defaults never overwrite it.
            cur.execute(
                """
                INSERT IGNORE INTO attendance_settings(
                    user_id, work_hours_per_day, work_days, reminder_enabled, reminder_time,
                    auto_checkout_enabled, auto_checkout_time
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    settings.user_id,
                    settings.work_hours_per_day,
                    settings.work_days,
                    int(settings.reminder_enabled),
                    settings.reminder_time,
                    int(settings.auto_checkout_enabled),
                    settings.auto_checkout_time,
                ),
            )
            cur.execute(_SELECT, (settings.user_id,))
            return _to_settings(fetchone(cur))
