from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ClassLeader:
    """Domain entity: the leader account of one class.

    Note: plain data object (no DB access code).
    """

    leader_id: int
    username: str
    password_hash: str
    class_number: Optional[int]
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    active: bool = True
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.leader_id,
            "username": self.username,
            "class_number": self.class_number,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "active": self.active,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }
