from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import PermissionRepository


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_role_for_user(self, user_id: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT role_name FROM user_roles WHERE user_id=%s AND active=1", (user_id,))
            r = fetchone(cur)
            return str(r["role_name"]) if r else None

    def get_permissions_for_role(self, role: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT permission FROM role_permissions WHERE role_name=%s ORDER BY permission", (role,))
            return [str(r["permission"]) for r in fetchall(cur)]

    def count_active_users_without(self, permission: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM user_roles ur
                WHERE ur.active=1
                  AND ur.role_name <> 'admin'
                  AND NOT EXISTS (
                      SELECT 1 FROM role_permissions rp
                      WHERE rp.role_name = ur.role_name AND rp.permission = %s
                  )
                """,
                (permission,),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
