from __future__ import annotations

import pytest

from src.class_attendance.class_attendance.core.enums import Role
from src.class_attendance.class_attendance.core.exceptions import AuthenticationError, ValidationError
from src.class_attendance.class_attendance.leaders.service import AuthService
from src.class_attendance.class_attendance.settings.model import AppSettings


@pytest.fixture
def auth(leaders_repo):
    leaders_repo.add(1, "class1", "password123", full_name="John Smith")
    leaders_repo.add(2, "class2", "password456")
    leaders_repo.add(3, "class3", "password789", active=False)
    return AuthService(leaders_repo, default_admin_code="admin123")


@pytest.mark.parametrize("password", ["admin123", "ADMIN123", "  Admin123 "])
def test_admin_login_ignores_case(auth, password):
    user = auth.authenticate("admin", password, AppSettings())
    assert user.role == Role.ADMIN
    assert user.is_admin
    assert user.class_number is None


def test_admin_code_from_settings_overrides_default(auth):
    settings = AppSettings(admin_password="Shepherd7")
    assert auth.authenticate("admin", "shepherd7", settings).is_admin
    with pytest.raises(AuthenticationError):
        auth.authenticate("admin", "admin123", settings)


def test_leader_login(auth):
    user = auth.authenticate("1", "password123", AppSettings())
    assert user.role == Role.LEADER
    assert user.class_number == 1
    assert user.display_name == "John Smith"

    assert auth.authenticate(2, "password456", AppSettings()).display_name == "Class 2 Leader"


@pytest.mark.parametrize(
    "selector, password",
    [
        ("1", "wrong-password"),
        ("3", "password789"),  # inactive
        ("7", "password123"),  # no leader
        ("0", "password123"),
        ("one", "password123"),
    ],
)
def test_invalid_logins(auth, selector, password):
    with pytest.raises(AuthenticationError) as e:
        auth.authenticate(selector, password, AppSettings())
    assert str(e.value) == "Invalid class number or password"


def test_missing_fields(auth):
    with pytest.raises(ValidationError):
        auth.authenticate("", "password123", AppSettings())
    with pytest.raises(ValidationError):
        auth.authenticate("1", "", AppSettings())


def test_corrupt_hash_is_treated_as_mismatch(auth, leaders_repo):
    leaders_repo.update(1, password_hash="CHANGE_ME")
    with pytest.raises(AuthenticationError):
        auth.authenticate("1", "password123", AppSettings())
