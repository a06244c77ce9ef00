from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ActivityAction


@dataclass(frozen=True)
class ActivityEvent:
    action: ActivityAction
    entity_type: str
    entity_id: str
    description: str
    user_id: str
