from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hris.hris.database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from src.hris.hris.database.connection import DBConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the HRIS tables (and optionally seed defaults).")
    parser.add_argument("--seed", action="store_true", help="also load seed.sql and the demo accounts")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    if args.seed:
        apply_seed_sql(db_config)
        ensure_demo_users(db_config)
    tables = list_tables(db_config)
    print(f"OK: Applied schema.sql -> {DBConfig.from_dict(db_config).describe()} (tables={len(tables)})")


if __name__ == "__main__":
    main()
