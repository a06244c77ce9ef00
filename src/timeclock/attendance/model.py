from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Provenance:
    """Where a check-in or check-out came from. Every field is optional."""

    location_name: Optional[str] = None
    ip_address: Optional[str] = None
    device_info: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one work session of a user.

    Open while ``check_out_time`` is None. ``version`` increments on every
    write and guards read-modify-write updates.
    """

    attendance_id: int
    user_id: str
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    total_hours: Optional[float] = None
    auto_checkout: bool = False
    check_in: Provenance = Provenance()
    check_out: Provenance = Provenance()
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    notes: Optional[str] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    @property
    def state(self) -> str:
        return "OPEN" if self.is_open else "CLOSED"


@dataclass(frozen=True)
class NewAttendance:
    """Values for a record about to be created by a check-in."""

    user_id: str
    check_in_time: datetime
    check_in: Provenance = Provenance()
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    status: AttendanceStatus


@dataclass(frozen=True)
class CheckOutResult:
    record: AttendanceRecord
    is_auto_checkout: bool
    days_since_check_in: int


@dataclass(frozen=True)
class SweepResult:
    checked_out: bool
    message: str
    record: Optional[AttendanceRecord] = None
    next_checkout: Optional[datetime] = None


@dataclass(frozen=True)
class CurrentAttendance:
    checked_in: bool
    record: Optional[AttendanceRecord]


@dataclass(frozen=True)
class Page:
    items: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


PATCHABLE_FIELDS = frozenset(
    {
        "check_in_time",
        "check_out_time",
        "total_hours",
        "auto_checkout",
        "check_out_location_name",
        "check_out_ip_address",
        "check_out_device_info",
        "check_out_latitude",
        "check_out_longitude",
        "notes",
    }
)


def provenance_columns(side: str, provenance: Provenance) -> dict:
    """Flatten a Provenance into ``check_in_*`` / ``check_out_*`` column values."""
    return {
        f"{side}_location_name": provenance.location_name,
        f"{side}_ip_address": provenance.ip_address,
        f"{side}_device_info": provenance.device_info,
        f"{side}_latitude": provenance.latitude,
        f"{side}_longitude": provenance.longitude,
    }


def apply_patch(record: AttendanceRecord, patch: dict) -> AttendanceRecord:
    """Return ``record`` with a repository patch applied and its version bumped."""
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported attendance fields: {sorted(unknown)}")

    values = {k: v for k, v in patch.items() if not k.startswith("check_out_") or k == "check_out_time"}
    side = {k[len("check_out_"):]: v for k, v in patch.items() if k.startswith("check_out_") and k != "check_out_time"}
    if side:
        values["check_out"] = replace(record.check_out, **side)
    return replace(record, version=record.version + 1, **values)
