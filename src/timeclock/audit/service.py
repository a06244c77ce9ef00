from __future__ import annotations

import logging

from .model import ActivityEvent
from .repository import AuditSink

logger = logging.getLogger(__name__)


class SafeAuditSink(AuditSink):
    """Fire-and-forget wrapper: a failing audit write is logged, never raised."""

    def __init__(self, inner: AuditSink):
        self._inner = inner

    def record(self, event: ActivityEvent) -> None:
        try:
            self._inner.record(event)
        except Exception:
            logger.exception(
                "Failed to record activity %s for %s %s",
                event.action.value,
                event.entity_type,
                event.entity_id,
            )
