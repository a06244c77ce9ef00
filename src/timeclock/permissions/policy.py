from __future__ import annotations

from typing import Any, Iterable, Optional

from ..core.constants import ATTENDANCE_MANAGEMENT
from ..core.exceptions import AuthorizationError
from .model import AccessContext, AccessDecision, Action, GrantRule
from .repository import PermissionOracle


class AccessPolicy:
    """Ordered grant rules; the first rule that grants wins, otherwise deny."""

    def __init__(self, rules: Iterable[GrantRule]):
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[GrantRule, ...]:
        return self._rules

    def decide(self, principal_id: str, action: str, resource: Optional[Any] = None) -> AccessDecision:
        ctx = AccessContext(principal_id=principal_id, action=action, resource=resource)
        for rule in self._rules:
            if rule.grants(ctx):
                return AccessDecision(allowed=True, rule=rule.name)
        return AccessDecision(allowed=False)

    def require(self, principal_id: str, action: str, resource: Optional[Any] = None, *, message: str) -> AccessDecision:
        decision = self.decide(principal_id, action, resource)
        if not decision.allowed:
            raise AuthorizationError(message)
        return decision


def _is_owner(ctx: AccessContext) -> bool:
    owner = getattr(ctx.resource, "user_id", None)
    return owner is not None and str(owner) == str(ctx.principal_id)


def attendance_policy(oracle: PermissionOracle) -> AccessPolicy:
    """Owners act on their own records; attendance managers may view, list and review anything."""
    return AccessPolicy(
        [
            GrantRule(
                name="owner",
                actions=frozenset({Action.VIEW, Action.CHECKOUT, Action.CORRECT}),
                check=_is_owner,
            ),
            GrantRule(
                name=ATTENDANCE_MANAGEMENT,
                actions=frozenset({Action.VIEW, Action.LIST, Action.REVIEW}),
                check=lambda ctx: oracle.has_permission(ctx.principal_id, ATTENDANCE_MANAGEMENT),
            ),
        ]
    )
