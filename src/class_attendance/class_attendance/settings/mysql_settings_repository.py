from __future__ import annotations

import logging
from typing import Any, Optional

import mysql.connector

from ..core.constants import SETTINGS_ROW_ID
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_int, db_cursor, fetchone
from .model import AppSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "admin_password",
    "minister_emails",
    "monthly_absence_threshold",
    "quarterly_absence_threshold",
    "max_classes",
    "org_name",
}


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[AppSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT admin_password, minister_emails, monthly_absence_threshold,
                       quarterly_absence_threshold, max_classes, org_name
                FROM app_settings
                WHERE id=%s
                """,
                (SETTINGS_ROW_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            defaults = AppSettings()
            return AppSettings(
                admin_password=r.get("admin_password") or None,
                minister_emails=r.get("minister_emails") or "",
                monthly_absence_threshold=as_int(
                    r.get("monthly_absence_threshold"), defaults.monthly_absence_threshold
                ),
                quarterly_absence_threshold=as_int(
                    r.get("quarterly_absence_threshold"), defaults.quarterly_absence_threshold
                ),
                max_classes=as_int(r.get("max_classes"), defaults.max_classes),
                org_name=r.get("org_name"),
            )

    def update(self, **fields: Any) -> None:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown settings columns: {sorted(unknown)}")
        if not fields:
            return

        columns = sorted(fields)
        assignments = ", ".join(f"{c}=VALUES({c})" for c in columns)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO app_settings(id, {", ".join(columns)})
                VALUES(%s, {", ".join(["%s"] * len(columns))})
                ON DUPLICATE KEY UPDATE {assignments}
                """,
                (SETTINGS_ROW_ID, *[fields[c] for c in columns]),
            )

    def ping(self) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT 1 AS ok")
                return fetchone(cur) is not None
        except mysql.connector.Error as e:
            logger.warning("Database connection check failed: %s", e)
            return False
