from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import parse_bool, require_int_in_range, require_min_length, require_non_empty
from ..core.constants import ADMIN_SELECTOR, DEFAULT_ADMIN_CODE, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..settings.model import AppSettings
from .model import ClassLeader
from .repository import LeaderRepository

logger = logging.getLogger(__name__)

_INVALID_LOGIN = "Invalid class number or password"


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    role: Role
    class_number: Optional[int]
    display_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "class_number": self.class_number,
            "display_name": self.display_name,
            "is_admin": self.is_admin,
        }


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # placeholder or corrupted hash values
        return False


def _optional(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class AuthService:
    """Use case: log in with a class number and its leader password, or the admin code."""

    def __init__(self, leaders: LeaderRepository, *, default_admin_code: str = DEFAULT_ADMIN_CODE):
        self._leaders = leaders
        self._default_admin_code = default_admin_code

    def authenticate(self, class_selector: Any, password: str, settings: AppSettings) -> SessionUser:
        selector = str(class_selector or "").strip()
        password = password or ""

        admin_code = settings.admin_code(self._default_admin_code)
        if selector.lower() == ADMIN_SELECTOR and password.strip().lower() == admin_code.lower():
            logger.info("Administrator logged in")
            return SessionUser(role=Role.ADMIN, class_number=None, display_name="Administrator")

        if not selector or not password:
            raise ValidationError("Class number and password are required")

        try:
            class_number = int(selector)
        except ValueError:
            raise AuthenticationError(_INVALID_LOGIN)
        if class_number <= 0:
            raise AuthenticationError(_INVALID_LOGIN)

        leader = self._leaders.get_by_class(class_number)
        if not leader or not leader.active or not _password_matches(leader.password_hash, password):
            logger.info("Failed login for class %s", class_number)
            raise AuthenticationError(_INVALID_LOGIN)

        logger.info("Class %s leader logged in", class_number)
        return SessionUser(
            role=Role.LEADER,
            class_number=class_number,
            display_name=leader.full_name or f"Class {class_number} Leader",
        )


class LeaderService:
    """Use cases: the leader's own profile, and leader accounts administered by the admin."""

    def __init__(self, leaders: LeaderRepository):
        self._leaders = leaders

    # --- profile ---

    def get_profile(self, class_number: int) -> ClassLeader:
        leader = self._leaders.get_by_class(int(class_number))
        if not leader:
            raise NotFoundError(f"No leader account for class {class_number}")
        return leader

    def update_profile(
        self,
        *,
        class_number: int,
        full_name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> ClassLeader:
        leader = self.get_profile(class_number)
        full_name = require_non_empty(full_name, "Full name")

        self._leaders.update(
            leader.leader_id,
            updated_by=leader.username,
            full_name=full_name,
            email=_optional(email),
            phone=_optional(phone),
        )
        logger.info("Profile updated for class %s", class_number)
        return self.get_profile(class_number)

    def change_password(
        self,
        *,
        class_number: int,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("All password fields are required")

        leader = self.get_profile(class_number)
        if not _password_matches(leader.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        self._leaders.update(
            leader.leader_id,
            updated_by=leader.username,
            password_hash=generate_password_hash(new_password),
        )
        logger.info("Password changed for class %s", class_number)

    # --- admin ---

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only the administrator can manage class leaders")

    def list_leaders(self, *, current_role: Role) -> Sequence[ClassLeader]:
        self._require_admin(current_role)
        return self._leaders.list_all()

    def _check_class_free(self, class_number: int, *, exclude_id: Optional[int] = None) -> None:
        existing = self._leaders.get_by_class(class_number)
        if existing and existing.leader_id != exclude_id:
            raise ValidationError(f"Class {class_number} already has a leader ({existing.username})")

    def _check_username_free(self, username: str, *, exclude_id: Optional[int] = None) -> None:
        existing = self._leaders.get_by_username(username)
        if existing and existing.leader_id != exclude_id:
            raise ValidationError("Username already exists")

    def create_leader(
        self,
        *,
        current_role: Role,
        settings: AppSettings,
        username: str,
        password: str,
        full_name: str,
        class_number: Any,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        created_by: Optional[str] = ADMIN_SELECTOR,
    ) -> int:
        self._require_admin(current_role)
        username = require_non_empty(username, "Username")
        full_name = require_non_empty(full_name, "Full name")
        if not password:
            raise ValidationError("Password is required")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        class_number = require_int_in_range(class_number, "Class number", 1, settings.max_classes)

        self._check_username_free(username)
        self._check_class_free(class_number)

        leader_id = self._leaders.create(
            username=username,
            password_hash=generate_password_hash(password),
            class_number=class_number,
            full_name=full_name,
            email=_optional(email),
            phone=_optional(phone),
            created_by=created_by,
        )
        logger.info("Created leader %s for class %s", username, class_number)
        return leader_id

    def update_leader(
        self,
        *,
        current_role: Role,
        settings: AppSettings,
        leader_id: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        full_name: Optional[str] = None,
        class_number: Any = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        active: Any = None,
        updated_by: Optional[str] = ADMIN_SELECTOR,
    ) -> ClassLeader:
        self._require_admin(current_role)
        leader = self._leaders.get_by_id(int(leader_id))
        if not leader:
            raise NotFoundError("Class leader not found")

        fields: dict[str, Any] = {}
        if username is not None:
            username = require_non_empty(username, "Username")
            self._check_username_free(username, exclude_id=leader.leader_id)
            fields["username"] = username
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            fields["password_hash"] = generate_password_hash(password)
        if full_name is not None:
            fields["full_name"] = require_non_empty(full_name, "Full name")
        if class_number is not None and class_number != "":
            number = require_int_in_range(class_number, "Class number", 1, settings.max_classes)
            self._check_class_free(number, exclude_id=leader.leader_id)
            fields["class_number"] = number
        if email is not None:
            fields["email"] = _optional(email)
        if phone is not None:
            fields["phone"] = _optional(phone)
        if active is not None and active != "":
            fields["active"] = parse_bool(active, "Active")

        if fields:
            self._leaders.update(leader.leader_id, updated_by=updated_by, **fields)
            logger.info("Updated leader %s (%s)", leader.username, ", ".join(sorted(fields)))
        return self._leaders.get_by_id(leader.leader_id) or leader

    def delete_leader(self, *, current_role: Role, leader_id: int) -> None:
        self._require_admin(current_role)
        if not self._leaders.delete_by_id(int(leader_id)):
            raise NotFoundError("Class leader not found")
        logger.info("Deleted leader id=%s", leader_id)
