from __future__ import annotations

from datetime import date

import pytest

from src.class_attendance.class_attendance.core.enums import Role, ServiceType
from src.class_attendance.class_attendance.core.exceptions import AuthorizationError, ValidationError
from src.class_attendance.class_attendance.settings.model import AppSettings
from src.class_attendance.class_attendance.settings.service import SettingsService


@pytest.fixture
def service(settings_repo, members_repo, attendance_repo):
    return SettingsService(settings_repo, members_repo, attendance_repo)


def test_defaults_when_row_missing(service):
    settings = service.get()
    assert settings == AppSettings()
    assert (settings.monthly_absence_threshold, settings.quarterly_absence_threshold, settings.max_classes) == (4, 10, 10)


def test_writes_require_admin(service):
    with pytest.raises(AuthorizationError):
        service.update_thresholds(current_role=Role.LEADER, monthly=3, quarterly=8)


@pytest.mark.parametrize("monthly, quarterly", [(0, 10), (4, 101), ("x", 10), (None, 10)])
def test_threshold_bounds(service, monthly, quarterly):
    with pytest.raises(ValidationError):
        service.update_thresholds(current_role=Role.ADMIN, monthly=monthly, quarterly=quarterly)


def test_thresholds_saved(service):
    updated = service.update_thresholds(current_role=Role.ADMIN, monthly="1", quarterly=100)
    assert (updated.monthly_absence_threshold, updated.quarterly_absence_threshold) == (1, 100)


def test_minister_emails_normalized(service):
    stored = service.update_minister_emails(current_role=Role.ADMIN, emails=" a@x.org,b@y.org ,, ")
    assert stored == "a@x.org, b@y.org"
    assert service.get().minister_email_list() == ["a@x.org", "b@y.org"]

    with pytest.raises(ValidationError):
        service.update_minister_emails(current_role=Role.ADMIN, emails="a@x.org, pastor")


def test_admin_password_rules(service):
    with pytest.raises(ValidationError):
        service.change_admin_password(current_role=Role.ADMIN, new_password="abcdef", confirm_password="")
    with pytest.raises(ValidationError):
        service.change_admin_password(current_role=Role.ADMIN, new_password="abcdef", confirm_password="abcdeF")
    with pytest.raises(ValidationError):
        service.change_admin_password(current_role=Role.ADMIN, new_password="abc", confirm_password="abc")

    service.change_admin_password(current_role=Role.ADMIN, new_password="Shepherd7", confirm_password="Shepherd7")
    assert service.get().admin_code("admin123") == "Shepherd7"
    assert service.get().to_dict()["admin_password_set"] is True


def test_max_classes_bounds(service):
    assert service.update_max_classes(current_role=Role.ADMIN, max_classes="12") == 12
    with pytest.raises(ValidationError):
        service.update_max_classes(current_role=Role.ADMIN, max_classes=0)


def test_stats_and_connection(service, members_repo, attendance_repo, settings_repo):
    members_repo.add("Anna", 1)
    members_repo.add("Ben", 2)
    members_repo.add("Cara", 2)
    attendance_repo.add_record(1, date(2024, 3, 10), ServiceType.SUNDAY)
    attendance_repo.add_record(1, date(2024, 3, 1), ServiceType.SUNDAY)

    stats = service.stats(today=date(2024, 3, 12))
    assert stats == {"member_count": 3, "class_count": 2, "recent_attendance": 1, "recent_days": 7}

    assert service.check_connection() is True
    settings_repo.reachable = False
    assert service.check_connection() is False
