from __future__ import annotations

from typing import Protocol

from .model import ActivityEvent


class AuditSink(Protocol):
    def record(self, event: ActivityEvent) -> None:
        raise NotImplementedError
