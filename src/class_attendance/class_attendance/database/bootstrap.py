from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import (
    DEFAULT_MAX_CLASSES,
    DEFAULT_MONTHLY_ABSENCE_THRESHOLD,
    DEFAULT_QUARTERLY_ABSENCE_THRESHOLD,
    SETTINGS_ROW_ID,
)
from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_LEADERS = (
    (1, "class1", "password123", "John Smith", "john@example.com", "555-0101"),
    (2, "class2", "password456", "Jane Doe", "jane@example.com", "555-0102"),
    (3, "class3", "password789", "Mike Johnson", "mike@example.com", "555-0103"),
)

REQUIRED_TABLES = (
    "app_settings",
    "members",
    "attendance",
    "member_attendance",
    "class_leaders",
    "report_member_notes",
    "class_reports",
    "manual_reports",
)


def _as_target(db_config: dict) -> DBConfig:
    return DBConfig.from_settings(db_config)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        charset=target.charset,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql must not pin a database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quoted strings."""
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            buf.pop()
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        cur.execute(
            """
            INSERT IGNORE INTO app_settings
                (id, max_classes, monthly_absence_threshold, quarterly_absence_threshold)
            VALUES (%s, %s, %s, %s)
            """,
            (
                SETTINGS_ROW_ID,
                DEFAULT_MAX_CLASSES,
                DEFAULT_MONTHLY_ABSENCE_THRESHOLD,
                DEFAULT_QUARTERLY_ABSENCE_THRESHOLD,
            ),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_leaders(db_config: dict) -> None:
    """Create sample class leaders 1-3 unless their class already has one."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for class_number, username, password, full_name, email, phone in DEMO_LEADERS:
            cur.execute(
                """
                INSERT IGNORE INTO class_leaders
                    (username, password_hash, class_number, full_name, email, phone, active, created_by)
                VALUES (%s, %s, %s, %s, %s, %s, 1, 'seed')
                """,
                (username, generate_password_hash(password), class_number, full_name, email, phone),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo class leaders ensured")


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def missing_tables(tables: Iterable[str]) -> list[str]:
    """Required tables absent from ``tables`` (names compared case-insensitively)."""
    present = {t.lower() for t in tables}
    return [t for t in REQUIRED_TABLES if t not in present]
