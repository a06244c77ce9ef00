from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import ActivityEvent
from .repository import AuditSink


class MySQLActivityRepository(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(self, event: ActivityEvent) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(action, entity_type, entity_id, description, user_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (event.action.value, event.entity_type, str(event.entity_id), event.description, event.user_id),
            )
