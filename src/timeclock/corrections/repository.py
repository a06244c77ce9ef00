from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionStatus
from .model import CorrectionRequest, NewCorrectionRequest, ReviewDecision


class CorrectionRepository(Protocol):
    def create(self, new: NewCorrectionRequest) -> CorrectionRequest:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def decide(self, decision: ReviewDecision) -> CorrectionRequest:
        """Move a pending request to its decided status and apply the attendance patch, atomically.

        Raises InvalidStateError when the request is no longer pending (nothing is
        written), NotFoundError when it does not exist, and ConflictError when the
        attendance record's version no longer matches ``expected_version``.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[CorrectionStatus] = None,
        user_id: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[CorrectionRequest]:
        """Newest first."""

        raise NotImplementedError

    def count_requests(self, *, status: Optional[CorrectionStatus] = None, user_id: Optional[str] = None) -> int:
        raise NotImplementedError
