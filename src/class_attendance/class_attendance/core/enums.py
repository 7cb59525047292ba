from __future__ import annotations

from enum import Enum


class ServiceType(str, Enum):
    """Recurring events attendance is taken for."""

    SUNDAY = "sunday"
    BIBLE_STUDY = "bible-study"

    @property
    def label(self) -> str:
        return "Sunday Service" if self is ServiceType.SUNDAY else "Bible Study"


class MemberStatus(str, Enum):
    """Per-member status stored in member_attendance."""

    PRESENT = "present"
    ABSENT = "absent"
    SICK = "sick"
    TRAVEL = "travel"


class ReportType(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class ReportStatus(str, Enum):
    """Confirmation state of a quarterly class report."""

    DRAFT = "draft"
    SUBMITTED = "submitted"


class Role(str, Enum):
    """Who is signed in."""

    ADMIN = "admin"
    LEADER = "leader"
