from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.shift_planner.shift_planner.database.bootstrap import apply_schema, list_tables

# Tables the application reads or writes; schema.sql must create all of them.
EXPECTED_TABLES = (
    "staff",
    "contracts",
    "holidays",
    "adjustments",
    "pending_schedules",
    "pending_approval_logs",
    "user_auth",
    "password_reset_tokens",
    "audit_logs",
    "import_batches",
    "temporary_presets",
    "temporary_assignments",
    "staff_responsibilities",
)


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = set(list_tables(db_config))
    missing = [t for t in EXPECTED_TABLES if t not in tables]

    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    if missing:
        print(f"NG: schema applied to {target} but tables are missing: {', '.join(missing)}")
        return 1
    print(f"OK: schema ready -> {target} (tables={len(tables)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
