from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Member


class MemberRepository(Protocol):
    """Repository interface for class members.

    Services depend on this interface, not on a concrete database.
    """

    def list_for_class(self, class_number: int) -> Sequence[Member]:
        raise NotImplementedError

    def get_by_id(self, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def create(self, member: Member) -> int:
        raise NotImplementedError

    def update(self, member: Member) -> bool:
        raise NotImplementedError

    def delete_by_id(self, member_id: int) -> bool:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def count_classes(self) -> int:
        raise NotImplementedError
