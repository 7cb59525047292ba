from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import today_local
from ..common.validators import require_int_in_range, require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH, RECENT_STATS_DAYS, THRESHOLD_MAX, THRESHOLD_MIN
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..members.repository import MemberRepository
from .model import AppSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Only the administrator can change settings")


class SettingsService:
    """Use case: read and administer the global settings row."""

    def __init__(self, settings: SettingsRepository, members: MemberRepository, attendance: AttendanceRepository):
        self._settings = settings
        self._members = members
        self._attendance = attendance

    def get(self) -> AppSettings:
        return self._settings.get() or AppSettings()

    def change_admin_password(self, *, current_role: Role, new_password: str, confirm_password: str) -> None:
        _require_admin(current_role)
        if not new_password or not confirm_password:
            raise ValidationError("Both password fields are required")
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        self._settings.update(admin_password=new_password)
        logger.info("Admin password changed")

    def update_minister_emails(self, *, current_role: Role, emails: str) -> str:
        _require_admin(current_role)
        entries = [e.strip() for e in (emails or "").split(",") if e.strip()]
        for e in entries:
            if "@" not in e:
                raise ValidationError(f"Invalid email address: {e}")

        normalized = ", ".join(entries)
        self._settings.update(minister_emails=normalized)
        logger.info("Minister emails updated (%d addresses)", len(entries))
        return normalized

    def update_thresholds(self, *, current_role: Role, monthly, quarterly) -> AppSettings:
        _require_admin(current_role)
        monthly = require_int_in_range(monthly, "Monthly absence threshold", THRESHOLD_MIN, THRESHOLD_MAX)
        quarterly = require_int_in_range(quarterly, "Quarterly absence threshold", THRESHOLD_MIN, THRESHOLD_MAX)

        self._settings.update(monthly_absence_threshold=monthly, quarterly_absence_threshold=quarterly)
        logger.info("Absence thresholds set to monthly=%s quarterly=%s", monthly, quarterly)
        return self.get()

    def update_max_classes(self, *, current_role: Role, max_classes) -> int:
        _require_admin(current_role)
        value = require_int_in_range(max_classes, "Max classes", 1, 100)
        self._settings.update(max_classes=value)
        return value

    def stats(self, *, today: Optional[date] = None) -> dict:
        today = today or today_local()
        return {
            "member_count": self._members.count_all(),
            "class_count": self._members.count_classes(),
            "recent_attendance": self._attendance.count_since(today - timedelta(days=RECENT_STATS_DAYS)),
            "recent_days": RECENT_STATS_DAYS,
        }

    def check_connection(self) -> bool:
        return self._settings.ping()
