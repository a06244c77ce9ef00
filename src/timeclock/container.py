from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.duration import DurationCalculator
from .attendance.factory import CheckoutStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import WorkdayPolicy
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_activity_repository import MySQLActivityRepository
from .audit.repository import AuditSink
from .audit.service import SafeAuditSink
from .common.clock import Clock, SystemClock
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.repository import CorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .permissions.mysql_permission_repository import MySQLPermissionRepository
from .permissions.policy import AccessPolicy, attendance_policy
from .permissions.repository import PermissionRepository
from .permissions.service import PermissionService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .stats.service import StatsService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Clock
    policy: WorkdayPolicy

    attendance_repo: AttendanceRepository
    corrections_repo: CorrectionRepository
    settings_repo: SettingsRepository
    permissions_repo: PermissionRepository
    audit: AuditSink

    permission_service: PermissionService
    access_policy: AccessPolicy
    calculator: DurationCalculator
    settings_service: SettingsService
    attendance_service: AttendanceService
    correction_service: CorrectionService
    stats_service: StatsService


def wire(
    *,
    attendance_repo: AttendanceRepository,
    corrections_repo: CorrectionRepository,
    settings_repo: SettingsRepository,
    permissions_repo: PermissionRepository,
    activity_sink: AuditSink,
    policy: WorkdayPolicy,
    clock: Clock | None = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of already constructed repositories."""
    clock = clock or SystemClock()
    audit = SafeAuditSink(activity_sink)

    permission_service = PermissionService(permissions_repo)
    access_policy = attendance_policy(permission_service)
    calculator = DurationCalculator(policy, strategy_factory=CheckoutStrategyFactory())
    settings_service = SettingsService(settings_repo)

    attendance_service = AttendanceService(
        attendance_repo,
        settings_service,
        calculator,
        audit,
        access_policy,
        clock=clock,
    )
    correction_service = CorrectionService(
        corrections_repo,
        attendance_repo,
        calculator,
        audit,
        access_policy,
        clock=clock,
    )
    stats_service = StatsService(attendance_repo, permissions_repo, policy, access_policy, clock=clock)

    return Container(
        conn=conn,
        clock=clock,
        policy=policy,
        attendance_repo=attendance_repo,
        corrections_repo=corrections_repo,
        settings_repo=settings_repo,
        permissions_repo=permissions_repo,
        audit=audit,
        permission_service=permission_service,
        access_policy=access_policy,
        calculator=calculator,
        settings_service=settings_service,
        attendance_service=attendance_service,
        correction_service=correction_service,
        stats_service=stats_service,
    )


def build_container(*, db_config: Mapping[str, object], workday: Optional[Mapping[str, object]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        attendance_repo=MySQLAttendanceRepository(conn),
        corrections_repo=MySQLCorrectionRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        permissions_repo=MySQLPermissionRepository(conn),
        activity_sink=MySQLActivityRepository(conn),
        policy=WorkdayPolicy.from_settings(workday),
        conn=conn,
    )
