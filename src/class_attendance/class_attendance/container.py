from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_ADMIN_CODE, DEFAULT_SAVE_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .leaders.mysql_leader_repository import MySQLLeaderRepository
from .leaders.repository import LeaderRepository
from .leaders.service import AuthService, LeaderService
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .members.service import MemberService
from .recent.service import RecentAttendanceService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService


@dataclass(frozen=True)
class Container:
    members_repo: MemberRepository
    attendance_repo: AttendanceRepository
    leaders_repo: LeaderRepository
    settings_repo: SettingsRepository
    reports_repo: ReportRepository

    auth_service: AuthService
    leader_service: LeaderService
    member_service: MemberService
    attendance_service: AttendanceService
    recent_service: RecentAttendanceService
    report_service: ReportService
    settings_service: SettingsService


def wire(
    *,
    members_repo: MemberRepository,
    attendance_repo: AttendanceRepository,
    leaders_repo: LeaderRepository,
    settings_repo: SettingsRepository,
    reports_repo: ReportRepository,
    admin_code: str = DEFAULT_ADMIN_CODE,
    save_timeout_seconds: float = DEFAULT_SAVE_TIMEOUT_SECONDS,
) -> Container:
    """Build the services over any set of repositories (MySQL in the app, in-memory fakes in tests)."""
    return Container(
        members_repo=members_repo,
        attendance_repo=attendance_repo,
        leaders_repo=leaders_repo,
        settings_repo=settings_repo,
        reports_repo=reports_repo,
        auth_service=AuthService(leaders_repo, default_admin_code=admin_code),
        leader_service=LeaderService(leaders_repo),
        member_service=MemberService(members_repo),
        attendance_service=AttendanceService(
            attendance_repo, members_repo, save_timeout_seconds=save_timeout_seconds
        ),
        recent_service=RecentAttendanceService(attendance_repo),
        report_service=ReportService(reports_repo, attendance_repo, members_repo),
        settings_service=SettingsService(settings_repo, members_repo, attendance_repo),
    )


def build_container(
    *,
    db_config: dict,
    admin_code: str = DEFAULT_ADMIN_CODE,
    save_timeout_seconds: float = DEFAULT_SAVE_TIMEOUT_SECONDS,
) -> Container:
    config = DBConfig.from_settings(db_config)
    conn = DatabaseConnection.get_instance(config)

    return wire(
        members_repo=MySQLMemberRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaders_repo=MySQLLeaderRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        admin_code=admin_code,
        save_timeout_seconds=save_timeout_seconds,
    )
