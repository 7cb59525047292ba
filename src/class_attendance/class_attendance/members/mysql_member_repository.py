from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import BirthDate, Member
from .repository import MemberRepository

_COLUMNS = """
    id, name, class_number, member_number, phone, address, city, province,
    date_of_birth, dob_day, dob_month
"""


def _to_member(r: dict) -> Member:
    return Member(
        member_id=int(r["id"]),
        name=r["name"],
        class_number=int(r["class_number"]),
        member_number=r.get("member_number"),
        phone=r.get("phone"),
        address=r.get("address"),
        city=r.get("city"),
        province=r.get("province"),
        birth=BirthDate.from_columns(
            normalize_mysql_date(r.get("date_of_birth")),
            r.get("dob_day"),
            r.get("dob_month"),
        ),
    )


def _write_params(m: Member) -> tuple:
    birth = m.birth
    return (
        m.name,
        int(m.class_number),
        m.member_number,
        m.phone,
        m.address,
        m.city,
        m.province,
        birth.as_date() if birth else None,
        birth.day if birth else None,
        birth.month if birth else None,
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_class(self, class_number: int) -> Sequence[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM members WHERE class_number=%s ORDER BY name ASC",
                (int(class_number),),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def get_by_id(self, member_id: int) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM members WHERE id=%s", (int(member_id),))
            r = fetchone(cur)
            return _to_member(r) if r else None

    def create(self, member: Member) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO members(name, class_number, member_number, phone, address, city, province,
                                    date_of_birth, dob_day, dob_month)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _write_params(member),
            )
            return int(cur.lastrowid)

    def update(self, member: Member) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE members
                SET name=%s, class_number=%s, member_number=%s, phone=%s, address=%s, city=%s, province=%s,
                    date_of_birth=%s, dob_day=%s, dob_month=%s
                WHERE id=%s
                """,
                _write_params(member) + (int(member.member_id),),
            )
            return cur.rowcount > 0

    def delete_by_id(self, member_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM members WHERE id=%s", (int(member_id),))
            return cur.rowcount > 0

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM members")
            return int(fetchone(cur)["n"])

    def count_classes(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(DISTINCT class_number) AS n FROM members")
            return int(fetchone(cur)["n"])
