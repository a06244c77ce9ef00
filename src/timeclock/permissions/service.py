from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..core import constants
from .repository import PermissionOracle, PermissionRepository

logger = logging.getLogger(__name__)


class PermissionService(PermissionOracle):
    """Resolves user -> role -> permissions, caching role lookups for a short TTL.

    The ``admin`` role holds every permission.
    """

    def __init__(
        self,
        repository: PermissionRepository,
        *,
        ttl_seconds: float = constants.PERMISSION_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._repo = repository
        self._ttl = float(ttl_seconds)
        self._timer = timer
        self._role_permissions: dict[str, frozenset] = {}
        self._cached_at: Optional[float] = None

    def clear_cache(self) -> None:
        self._role_permissions.clear()
        self._cached_at = None

    def _expire_if_stale(self) -> None:
        now = self._timer()
        if self._cached_at is None or now - self._cached_at > self._ttl:
            self._role_permissions.clear()
            self._cached_at = now

    def permissions_for_role(self, role: str) -> frozenset:
        self._expire_if_stale()
        cached = self._role_permissions.get(role)
        if cached is None:
            cached = frozenset(self._repo.get_permissions_for_role(role))
            self._role_permissions[role] = cached
        return cached

    def role_has_permission(self, role: str, permission: str) -> bool:
        if role == constants.ADMIN_ROLE:
            return True
        return permission in self.permissions_for_role(role)

    def has_permission(self, user_id: str, permission: str) -> bool:
        role = self._repo.get_role_for_user(user_id)
        if not role:
            logger.debug("User %s has no active role", user_id)
            return False
        return self.role_has_permission(role, permission)
