from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError
from .model import BirthDate, Member
from .repository import MemberRepository

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


class MemberService:
    """Use case: maintain a class's member directory."""

    def __init__(self, members: MemberRepository):
        self._members = members

    def list_for_class(self, class_number: int) -> Sequence[Member]:
        return self._members.list_for_class(int(class_number))

    def get(self, member_id: int) -> Member:
        member = self._members.get_by_id(int(member_id))
        if not member:
            raise NotFoundError("Member not found")
        return member

    @staticmethod
    def search(members: Iterable[Member], text: str) -> list[Member]:
        """Case-insensitive match on name, phone or member number."""
        needle = (text or "").strip().lower()
        if not needle:
            return list(members)
        return [
            m
            for m in members
            if needle in (m.name or "").lower()
            or needle in (m.phone or "").lower()
            or needle in (m.member_number or "").lower()
        ]

    def save(
        self,
        *,
        class_number: int,
        name: str,
        member_id: Optional[int] = None,
        member_number: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        city: Optional[str] = None,
        province: Optional[str] = None,
        date_of_birth: Optional[str] = None,
    ) -> int:
        member = Member(
            member_id=int(member_id) if member_id else None,
            name=require_non_empty(name, "Member name"),
            class_number=int(class_number),
            member_number=_clean(member_number),
            phone=_clean(phone),
            address=_clean(address),
            city=_clean(city),
            province=_clean(province),
            birth=BirthDate.parse(date_of_birth),
        )

        if member.member_id is None:
            new_id = self._members.create(member)
            logger.info("Member %s added to class %s", new_id, member.class_number)
            return new_id

        # MySQL reports 0 affected rows for a no-op update, so check existence first.
        self.get(member.member_id)
        self._members.update(member)
        logger.info("Member %s updated", member.member_id)
        return member.member_id

    def delete(self, member_id: int) -> None:
        if not self._members.delete_by_id(int(member_id)):
            raise NotFoundError("Member not found")
        logger.info("Member %s deleted", member_id)
