#!/usr/bin/env python3
"""Set up a local message board and serve it with one command.

Loads `.env`, optionally wipes the SQLite database, applies migrations, seeds
sample users and sections, drops expired bans, and starts the Django
development server.

Examples
--------
python scripts/dev_bootstrap_and_run.py
python scripts/dev_bootstrap_and_run.py --keep-db
python scripts/dev_bootstrap_and_run.py --no-server --seed 7
"""
from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
MANAGE_DIR = ROOT / "message_board"
PYTHON = sys.executable

DEFAULT_RESET = os.getenv("BOARD_RESET", "0").lower() not in {"0", "false", "no"}
DEFAULT_RUNSERVER_ADDR = os.getenv("RUNSERVER_ADDR")


def database_path() -> Path:
    return Path(os.getenv("DATABASE_PATH", str(MANAGE_DIR / "db.sqlite3")))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reset, migrate, seed and launch the message board dev server."
    )
    parser.add_argument(
        "--keep-db",
        action="store_true",
        help="Reuse the existing database even when BOARD_RESET=1.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete the SQLite database before migrating.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed passed to seed_board for deterministic sample data.",
    )
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Perform setup tasks but do not launch the Django development server.",
    )
    parser.add_argument(
        "--runserver-addr",
        default=DEFAULT_RUNSERVER_ADDR,
        help="Host:port passed to runserver (defaults to Django's 127.0.0.1:8000).",
    )
    return parser.parse_args()


def build_commands(args: argparse.Namespace) -> List[List[str]]:
    seed_cmd = [PYTHON, "manage.py", "seed_board"]
    if args.seed is not None:
        seed_cmd.extend(["--seed", str(args.seed)])

    commands: List[List[str]] = [
        [PYTHON, "manage.py", "migrate"],
        seed_cmd,
        [PYTHON, "manage.py", "purge_expired_bans"],
    ]

    if not args.no_server:
        runserver: List[str] = [PYTHON, "manage.py", "runserver"]
        if args.runserver_addr:
            runserver.append(args.runserver_addr)
        commands.append(runserver)
    return commands


def run_command(cmd: Iterable[str]) -> None:
    command_list = list(cmd)
    print(f"\n=== Running: {' '.join(command_list)}\n", flush=True)
    subprocess.run(command_list, cwd=MANAGE_DIR, check=True)


def reset_datastore() -> None:
    db_path = database_path()
    if not db_path.exists():
        print(">>> No SQLite file found; nothing to reset.", flush=True)
        return
    print(f"\n=== Removing {db_path} for a clean reset\n", flush=True)
    db_path.unlink()
    db_path.with_name(db_path.name + "-journal").unlink(missing_ok=True)


def main() -> None:
    load_dotenv(ROOT / ".env")

    if not MANAGE_DIR.exists():
        raise SystemExit(f"Expected manage.py directory at {MANAGE_DIR}")

    args = parse_args()
    if args.reset or (DEFAULT_RESET and not args.keep_db):
        reset_datastore()

    for cmd in build_commands(args):
        try:
            run_command(cmd)
        except subprocess.CalledProcessError as exc:
            print(
                f"Command failed (exit {exc.returncode}): {' '.join(cmd)}",
                file=sys.stderr,
                flush=True,
            )
            raise SystemExit(exc.returncode) from exc


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nAborted by user.\n", flush=True)
