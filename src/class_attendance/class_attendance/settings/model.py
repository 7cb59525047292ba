from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    DEFAULT_MAX_CLASSES,
    DEFAULT_MONTHLY_ABSENCE_THRESHOLD,
    DEFAULT_QUARTERLY_ABSENCE_THRESHOLD,
)
from ..core.enums import ReportType


@dataclass(frozen=True)
class AppSettings:
    """Global configuration row, passed explicitly to services that need it."""

    admin_password: Optional[str] = None
    minister_emails: str = ""
    monthly_absence_threshold: int = DEFAULT_MONTHLY_ABSENCE_THRESHOLD
    quarterly_absence_threshold: int = DEFAULT_QUARTERLY_ABSENCE_THRESHOLD
    max_classes: int = DEFAULT_MAX_CLASSES
    org_name: Optional[str] = None

    def admin_code(self, fallback: str) -> str:
        return self.admin_password or fallback

    def minister_email_list(self) -> list[str]:
        return [e.strip() for e in (self.minister_emails or "").split(",") if e.strip()]

    def threshold_for(self, report_type: ReportType) -> int:
        if report_type == ReportType.QUARTERLY:
            return self.quarterly_absence_threshold
        return self.monthly_absence_threshold

    def to_dict(self) -> dict:
        return {
            "org_name": self.org_name,
            "minister_emails": self.minister_emails,
            "monthly_absence_threshold": self.monthly_absence_threshold,
            "quarterly_absence_threshold": self.quarterly_absence_threshold,
            "max_classes": self.max_classes,
            "admin_password_set": bool(self.admin_password),
        }
