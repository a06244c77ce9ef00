from __future__ import annotations

from typing import Optional, Protocol, Sequence


class PermissionRepository(Protocol):
    def get_role_for_user(self, user_id: str) -> Optional[str]:
        raise NotImplementedError

    def get_permissions_for_role(self, role: str) -> Sequence[str]:
        raise NotImplementedError

    def count_active_users_without(self, permission: str) -> int:
        """Active users whose role does not hold ``permission`` (the attendance-tracked staff)."""

        raise NotImplementedError


class PermissionOracle(Protocol):
    def has_permission(self, user_id: str, permission: str) -> bool:
        raise NotImplementedError
