"""Create the class_attendance database and apply database/schema.sql.

Safe to re-run: every table is created with IF NOT EXISTS and the settings
row is inserted with INSERT IGNORE. Exits with status 1 when a required table
is still missing afterwards.
"""

from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.database.bootstrap import apply_schema, list_tables, missing_tables
from src.class_attendance.class_attendance.database.connection import DBConfig


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = DBConfig.from_settings(db_config)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)

    missing = missing_tables(list_tables(db_config))
    if missing:
        print(f"ERROR: {target.describe()} is missing tables: {', '.join(missing)}", file=sys.stderr)
        return 1
    print(f"OK: class attendance schema ready on {target.describe()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
