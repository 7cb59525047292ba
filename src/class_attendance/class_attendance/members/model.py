from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BirthDate:
    """Canonical date of birth.

    The year is optional: leaders often know only the day and month. Storage
    columns (date_of_birth, dob_day, dob_month) are always derived from this value.
    """

    day: int
    month: int
    year: Optional[int] = None

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationError("Birth month must be between 1 and 12")
        # Without a year, allow Feb 29 by checking against a leap year.
        last_day = calendar.monthrange(self.year or 2000, self.month)[1]
        if not 1 <= self.day <= last_day:
            raise ValidationError("Birth day is not valid for that month")

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["BirthDate"]:
        """Accept 'YYYY-MM-DD', 'MM-DD' or '--MM-DD'; blank means unknown."""
        v = (value or "").strip().lstrip("-")
        if not v:
            return None
        parts = v.split("-")
        try:
            if len(parts) == 3:
                return cls(day=int(parts[2]), month=int(parts[1]), year=int(parts[0]))
            if len(parts) == 2:
                return cls(day=int(parts[1]), month=int(parts[0]))
        except ValueError:
            pass
        raise ValidationError("Date of birth must be YYYY-MM-DD or MM-DD")

    @classmethod
    def from_columns(
        cls,
        date_of_birth: Optional[date],
        dob_day: Optional[int],
        dob_month: Optional[int],
    ) -> Optional["BirthDate"]:
        """Reconcile legacy rows that carry either representation (or both)."""
        if date_of_birth is not None:
            return cls(day=date_of_birth.day, month=date_of_birth.month, year=date_of_birth.year)
        if dob_day and dob_month:
            try:
                return cls(day=int(dob_day), month=int(dob_month))
            except ValidationError:
                # legacy rows stored the day independently of the month (e.g. 31/02)
                logger.warning("Ignoring impossible stored birthday day=%s month=%s", dob_day, dob_month)
        return None

    def as_date(self) -> Optional[date]:
        if self.year is None:
            return None
        return date(self.year, self.month, self.day)

    def iso(self) -> str:
        if self.year is None:
            return f"--{self.month:02d}-{self.day:02d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class Member:
    member_id: Optional[int]
    name: str
    class_number: int
    member_number: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    birth: Optional[BirthDate] = None

    def to_dict(self) -> dict:
        return {
            "id": self.member_id,
            "name": self.name,
            "class_number": self.class_number,
            "member_number": self.member_number,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "province": self.province,
            "date_of_birth": self.birth.iso() if self.birth else None,
        }
