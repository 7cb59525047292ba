from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import ClassLeader


class LeaderRepository(Protocol):
    """Repository interface for class leader accounts."""

    def get_by_id(self, leader_id: int) -> Optional[ClassLeader]:
        raise NotImplementedError

    def get_by_class(self, class_number: int) -> Optional[ClassLeader]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[ClassLeader]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassLeader]:
        raise NotImplementedError

    def create(
        self,
        *,
        username: str,
        password_hash: str,
        class_number: Optional[int],
        full_name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        created_by: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, leader_id: int, *, updated_by: Optional[str] = None, **fields: Any) -> bool:
        raise NotImplementedError

    def delete_by_id(self, leader_id: int) -> bool:
        raise NotImplementedError
