from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Week:
    week_number: int
    label: str
    start_date: date
    end_date: date
    dates: tuple[date, ...] = ()

    def to_dict(self) -> dict:
        return {
            "week_number": self.week_number,
            "label": self.label,
            "start_date": self.start_date.strftime("%Y-%m-%d"),
            "end_date": self.end_date.strftime("%Y-%m-%d"),
            "dates": [d.strftime("%Y-%m-%d") for d in self.dates],
        }


@dataclass(frozen=True)
class RecentView:
    """Filter options plus the counts shown for the selected week."""

    classes: list[int]
    years: list[str]
    months: list[str]
    selected_year: Optional[str]
    selected_month: Optional[str]
    weeks: list[Week]
    selected_week: Optional[int]
    service_filter: str
    count: int = 0
    class_summary: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "classes": self.classes,
            "years": self.years,
            "months": self.months,
            "selected_year": self.selected_year,
            "selected_month": self.selected_month,
            "weeks": [w.to_dict() for w in self.weeks],
            "selected_week": self.selected_week,
            "service_filter": self.service_filter,
            "count": self.count,
            "class_summary": self.class_summary,
        }
