from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import DatabaseError

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(err: DatabaseError) -> bool:
    return getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def is_lock_conflict(err: DatabaseError) -> bool:
    """Deadlock victim or lock-wait timeout."""
    return getattr(err, "errno", None) in (errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT)


@contextmanager
def translate_write_conflicts(message: str):
    """Turn a unique-index violation or a lost lock race inside the block into ConflictError."""
    try:
        yield
    except DatabaseError as e:
        if is_duplicate_key(e) or is_lock_conflict(e):
            raise ConflictError(message) from e
        raise


def build_set_clause(patch: Dict[str, Any]) -> tuple[str, list]:
    """Render ``a=%s, b=%s`` for a patch dict (column names are code-controlled)."""
    if not patch:
        raise ValueError("Empty patch")
    assignments = ", ".join(f"{column}=%s" for column in patch)
    return assignments, list(patch.values())
