from __future__ import annotations

from datetime import date

import pytest

from src.class_attendance.class_attendance.common.datetime_utils import (
    month_label,
    month_range,
    parse_iso_date,
    quarter_of,
    quarter_range,
    short_label,
    week_number,
    week_range,
)
from src.class_attendance.class_attendance.core.exceptions import ValidationError


def test_week_number_first_week_of_2024():
    assert week_number(date(2024, 1, 4)) == 1


def test_week_number_late_december_can_belong_to_next_year():
    # 2024-12-30 is the Monday of ISO week 1 of 2025
    assert week_number(date(2024, 12, 30)) == 1


def test_week_range_is_monday_to_sunday():
    assert week_range(date(2024, 1, 4)) == (date(2024, 1, 1), date(2024, 1, 7))
    assert week_range(date(2024, 1, 7)) == (date(2024, 1, 1), date(2024, 1, 7))


@pytest.mark.parametrize(
    "year, month, expected_end",
    [
        (2024, 2, date(2024, 2, 29)),
        (2023, 2, date(2023, 2, 28)),
        (2024, 12, date(2024, 12, 31)),
        (2024, 4, date(2024, 4, 30)),
    ],
)
def test_month_range(year, month, expected_end):
    start, end = month_range(year, month)
    assert start == date(year, month, 1)
    assert end == expected_end


def test_quarter_range_boundaries():
    assert quarter_range(2024, 1) == (date(2024, 1, 1), date(2024, 3, 31))
    assert quarter_range(2024, 4) == (date(2024, 10, 1), date(2024, 12, 31))
    assert quarter_of(date(2024, 3, 31)) == 1
    assert quarter_of(date(2024, 4, 1)) == 2


def test_labels():
    assert short_label(date(2024, 1, 4)) == "Jan 4"
    assert month_label("2024-03") == "March 2024"


def test_parse_iso_date_rejects_garbage():
    assert parse_iso_date(" 2024-01-07 ") == date(2024, 1, 7)
    with pytest.raises(ValidationError):
        parse_iso_date("07/01/2024")
