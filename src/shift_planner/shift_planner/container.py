from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .assignments.mysql_assignment_repository import MySQLAssignmentRepository
from .assignments.repository import AssignmentRepository
from .assignments.service import AssignmentService
from .audit.mysql_audit_repository import MySQLAuditLogRepository
from .audit.repository import AuditLogRepository
from .audit.service import AuditService
from .auth.mailer import LoggingMailer, Mailer
from .auth.mysql_auth_repository import MySQLResetTokenRepository, MySQLUserAuthRepository
from .auth.repository import ResetTokenRepository, UserAuthRepository
from .auth.service import AuthService
from .common.datetime_utils import now_local
from .contracts.mysql_contract_repository import MySQLContractRepository
from .contracts.repository import ContractRepository
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .imports.mysql_import_repository import MySQLImportBatchRepository
from .imports.repository import ImportBatchRepository
from .imports.service import ImportService
from .pending.mysql_pending_repository import MySQLPendingRepository
from .pending.repository import PendingRepository
from .pending.service import PendingService
from .presets.mysql_preset_store import MySQLKeyValueStore
from .presets.service import PresetService
from .presets.store import KeyValueStore
from .responsibilities.mysql_responsibility_repository import MySQLResponsibilityRepository
from .responsibilities.repository import ResponsibilityRepository
from .responsibilities.service import ResponsibilityService
from .schedules.mysql_schedule_repository import MySQLAdjustmentRepository
from .schedules.repository import AdjustmentRepository
from .schedules.service import ScheduleService
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository
from .staff.service import StaffService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    staff_repo: StaffRepository
    contracts_repo: ContractRepository
    holidays_repo: HolidayRepository
    adjustments_repo: AdjustmentRepository
    pending_repo: PendingRepository
    users_repo: UserAuthRepository
    reset_tokens_repo: ResetTokenRepository
    audit_repo: AuditLogRepository
    batches_repo: ImportBatchRepository
    assignments_repo: AssignmentRepository
    responsibilities_repo: ResponsibilityRepository
    preset_store: KeyValueStore
    mailer: Mailer

    audit_service: AuditService
    staff_service: StaffService
    holiday_service: HolidayService
    pending_service: PendingService
    schedule_service: ScheduleService
    preset_service: PresetService
    import_service: ImportService
    assignment_service: AssignmentService
    responsibility_service: ResponsibilityService
    auth_service: AuthService


def assemble(
    *,
    staff_repo: StaffRepository,
    contracts_repo: ContractRepository,
    holidays_repo: HolidayRepository,
    adjustments_repo: AdjustmentRepository,
    pending_repo: PendingRepository,
    users_repo: UserAuthRepository,
    reset_tokens_repo: ResetTokenRepository,
    audit_repo: AuditLogRepository,
    batches_repo: ImportBatchRepository,
    assignments_repo: AssignmentRepository,
    responsibilities_repo: ResponsibilityRepository,
    preset_store: KeyValueStore,
    mailer: Mailer,
    jwt_secret: str,
    jwt_expires_hours: int = 24,
    frontend_base_url: str = "http://localhost:5173",
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any repository implementations (MySQL or in-memory)."""

    audit_service = AuditService(audit_repo)
    staff_service = StaffService(staff_repo, contracts_repo)
    holiday_service = HolidayService(holidays_repo)
    pending_service = PendingService(pending_repo, staff_repo, audit_service, clock=clock)
    schedule_service = ScheduleService(staff_repo, contracts_repo, adjustments_repo, holiday_service, pending_service)
    preset_service = PresetService(preset_store, schedule_service, clock=clock)
    import_service = ImportService(
        batches_repo,
        staff_repo,
        contracts_repo,
        adjustments_repo,
        pending_repo,
        audit_service,
        clock=clock,
    )
    assignment_service = AssignmentService(assignments_repo, staff_repo, audit_service)
    responsibility_service = ResponsibilityService(responsibilities_repo, staff_repo)
    auth_service = AuthService(
        users_repo,
        reset_tokens_repo,
        audit_service,
        mailer,
        jwt_secret=jwt_secret,
        jwt_expires_hours=jwt_expires_hours,
        frontend_base_url=frontend_base_url,
        clock=clock,
    )

    return Container(
        conn=conn,
        staff_repo=staff_repo,
        contracts_repo=contracts_repo,
        holidays_repo=holidays_repo,
        adjustments_repo=adjustments_repo,
        pending_repo=pending_repo,
        users_repo=users_repo,
        reset_tokens_repo=reset_tokens_repo,
        audit_repo=audit_repo,
        batches_repo=batches_repo,
        assignments_repo=assignments_repo,
        responsibilities_repo=responsibilities_repo,
        preset_store=preset_store,
        mailer=mailer,
        audit_service=audit_service,
        staff_service=staff_service,
        holiday_service=holiday_service,
        pending_service=pending_service,
        schedule_service=schedule_service,
        preset_service=preset_service,
        import_service=import_service,
        auth_service=auth_service,
        assignment_service=assignment_service,
        responsibility_service=responsibility_service,
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        conn=conn,
        staff_repo=MySQLStaffRepository(conn),
        contracts_repo=MySQLContractRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        adjustments_repo=MySQLAdjustmentRepository(conn),
        pending_repo=MySQLPendingRepository(conn),
        users_repo=MySQLUserAuthRepository(conn),
        reset_tokens_repo=MySQLResetTokenRepository(conn),
        audit_repo=MySQLAuditLogRepository(conn),
        batches_repo=MySQLImportBatchRepository(conn),
        assignments_repo=MySQLAssignmentRepository(conn),
        responsibilities_repo=MySQLResponsibilityRepository(conn),
        preset_store=MySQLKeyValueStore(conn),
        mailer=LoggingMailer(expose_links=bool(getattr(settings, "MAIL_LOG_LINKS", False))),
        jwt_secret=str(getattr(settings, "JWT_SECRET")),
        jwt_expires_hours=int(getattr(settings, "JWT_EXPIRES_HOURS", 24)),
        frontend_base_url=str(getattr(settings, "FRONTEND_BASE_URL", "http://localhost:5173")),
    )
