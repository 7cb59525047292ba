from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassLeader
from .repository import LeaderRepository

_COLUMNS = """
    id, username, password_hash, class_number, full_name, email, phone, active,
    created_by, updated_by, last_updated
"""

_UPDATABLE = {"username", "password_hash", "class_number", "full_name", "email", "phone", "active"}


def _to_leader(r: dict) -> ClassLeader:
    return ClassLeader(
        leader_id=int(r["id"]),
        username=r["username"],
        password_hash=r["password_hash"],
        class_number=int(r["class_number"]) if r.get("class_number") is not None else None,
        full_name=r.get("full_name"),
        email=r.get("email"),
        phone=r.get("phone"),
        active=bool(r.get("active", 1)),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        last_updated=r.get("last_updated"),
    )


class MySQLLeaderRepository(LeaderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[ClassLeader]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_leaders WHERE {where} LIMIT 1", params)
            r = fetchone(cur)
            return _to_leader(r) if r else None

    def get_by_id(self, leader_id: int) -> Optional[ClassLeader]:
        return self._get_one("id=%s", (int(leader_id),))

    def get_by_class(self, class_number: int) -> Optional[ClassLeader]:
        return self._get_one("class_number=%s", (int(class_number),))

    def get_by_username(self, username: str) -> Optional[ClassLeader]:
        return self._get_one("username=%s", (username,))

    def list_all(self) -> Sequence[ClassLeader]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_leaders ORDER BY username ASC")
            return [_to_leader(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_leaders(username, password_hash, class_number, full_name, email, phone,
                                          active, created_by, updated_by)
                VALUES(%s,%s,%s,%s,%s,%s,1,%s,%s)
                """,
                (username, password_hash, class_number, full_name, email, phone, created_by, created_by),
            )
            return int(cur.lastrowid)

    def update(self, leader_id: int, *, updated_by: Optional[str] = None, **fields: Any) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown class leader columns: {sorted(unknown)}")

        columns = sorted(fields)
        assignments = ", ".join([f"{c}=%s" for c in columns] + ["updated_by=%s", "last_updated=NOW()"])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE class_leaders SET {assignments} WHERE id=%s",
                (*[fields[c] for c in columns], updated_by, int(leader_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, leader_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_leaders WHERE id=%s", (int(leader_id),))
            return cur.rowcount > 0
