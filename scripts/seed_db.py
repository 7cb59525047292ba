"""Create the demo leader accounts for classes 1-3 (class1/password123, class2/password456, class3/password789)."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.database.bootstrap import DEMO_LEADERS, ensure_demo_leaders


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_leaders(db_config)
    classes = ", ".join(str(c[0]) for c in DEMO_LEADERS)
    print(f"OK: Demo class leaders ready for classes {classes} -> {db_config.get('database')}")


if __name__ == "__main__":
    main()
