"""Database backups with the MySQL client tools.

    python scripts/backup.py create
    python scripts/backup.py list
    python scripts/backup.py restore shift_planner_backup_20250623_090000.sql --yes

`mysqldump` / `mysql` must be on PATH. Restore overwrites the current tables and
is refused under the production settings.
"""

from __future__ import annotations

import argparse
import importlib
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

BACKUP_DIR = REPO_ROOT / "backups"
FILE_PREFIX = "shift_planner_backup_"


def _client_args(db: dict) -> list[str]:
    return [
        f"--host={db['host']}",
        f"--port={db.get('port', 3306)}",
        f"--user={db['user']}",
        "--default-character-set=utf8mb4",
    ]


def _client_env(db: dict) -> dict:
    # Keeps the password off the process list.
    return dict(os.environ, MYSQL_PWD=str(db.get("password") or ""))


def _run(cmd: list[str], *, db: dict, **kwargs) -> None:
    try:
        subprocess.run(cmd, env=_client_env(db), stderr=subprocess.PIPE, check=True, **kwargs)
    except FileNotFoundError:
        raise SystemExit(f"`{cmd[0]}` not found. Install the MySQL client tools.")
    except subprocess.CalledProcessError as e:
        raise SystemExit(f"{cmd[0]} failed: {e.stderr.decode('utf-8', 'replace').strip()}")


def create_backup(db: dict) -> Path:
    BACKUP_DIR.mkdir(parents=True, exist_ok=True)
    out_file = BACKUP_DIR / f"{FILE_PREFIX}{datetime.now().strftime('%Y%m%d_%H%M%S')}.sql"

    cmd = ["mysqldump", *_client_args(db), "--single-transaction", "--routines", db["database"]]
    with out_file.open("wb") as f:
        _run(cmd, db=db, stdout=f)
    return out_file


def list_backups() -> list[Path]:
    if not BACKUP_DIR.exists():
        return []
    files = [p for p in BACKUP_DIR.glob(f"{FILE_PREFIX}*.sql") if p.is_file()]
    return sorted(files, key=lambda p: p.stat().st_mtime, reverse=True)


def restore_backup(db: dict, file_name: str) -> None:
    path = BACKUP_DIR / Path(file_name).name
    if not path.is_file():
        raise SystemExit(f"Backup not found: {path}")
    with path.open("rb") as f:
        _run(["mysql", *_client_args(db), db["database"]], db=db, stdin=f)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Back up or restore the shift planner database.")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("create", help="dump the database into backups/")
    sub.add_parser("list", help="list backups, newest first")
    restore = sub.add_parser("restore", help="load a backup into the configured database")
    restore.add_argument("file", help="file name under backups/")
    restore.add_argument("--yes", action="store_true", help="confirm overwriting the current data")
    args = parser.parse_args(argv)
    args.command = args.command or "create"
    return args


def main(argv: list[str] | None = None) -> None:
    load_dotenv(override=False)
    args = _parse_args(argv)
    settings_module = get_settings_module()
    db = importlib.import_module(settings_module).DB_CONFIG

    if args.command == "list":
        backups = list_backups()
        for p in backups:
            stat = p.stat()
            print(f"{p.name}\t{stat.st_size} bytes\t{datetime.fromtimestamp(stat.st_mtime).isoformat(timespec='seconds')}")
        print(f"{len(backups)} backup(s), {sum(p.stat().st_size for p in backups)} bytes total")
        return

    if args.command == "restore":
        if settings_module.endswith("production"):
            raise SystemExit("Restore is disabled under the production settings.")
        if not args.yes:
            raise SystemExit("Restore overwrites the current data; rerun with --yes to confirm.")
        restore_backup(db, args.file)
        print(f"OK: Restored {args.file} into {db['database']}")
        return

    out_file = create_backup(db)
    print(f"OK: Backup created: {out_file} ({out_file.stat().st_size} bytes)")


if __name__ == "__main__":
    main()
