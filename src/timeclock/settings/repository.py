from __future__ import annotations

from typing import Optional, Protocol

from .model import AttendanceSettings


class SettingsRepository(Protocol):
    def get_for_user(self, user_id: str) -> Optional[AttendanceSettings]:
        raise NotImplementedError

    def upsert(self, settings: AttendanceSettings) -> AttendanceSettings:
        """Insert or replace the settings row of ``settings.user_id``."""

        raise NotImplementedError

    def create_default(self, settings: AttendanceSettings) -> AttendanceSettings:
        """Insert ``settings`` only if the user has no row yet; return whatever row is stored."""

        raise NotImplementedError
