from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional


class Action:
    VIEW = "view"
    LIST = "list"
    CHECKOUT = "checkout"
    CORRECT = "correct"
    REVIEW = "review"


@dataclass(frozen=True)
class AccessContext:
    principal_id: str
    action: str
    resource: Optional[Any] = None


@dataclass(frozen=True)
class GrantRule:
    """One independent source of access: grants ``actions`` when ``check`` holds."""

    name: str
    actions: frozenset
    check: Callable[[AccessContext], bool] = field(compare=False)

    def grants(self, ctx: AccessContext) -> bool:
        return ctx.action in self.actions and bool(self.check(ctx))


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    rule: Optional[str] = None
