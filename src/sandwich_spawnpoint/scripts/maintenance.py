# src/sandwich_spawnpoint/scripts/maintenance.py
"""
One-shot maintenance for deployments that prefer cron over the in-process worker.

Running it:
1. Creates missing tables and reconciles the declared config keys
2. Prunes expired bruteforce attempts and stale users
"""
from __future__ import annotations

import argparse
import logging

from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.db.session import SessionLocal, create_tables, engine
from sandwich_spawnpoint.services.app_config import ConfigStore
from sandwich_spawnpoint.services.cleanup import run_cleanup

logger = logging.getLogger(__name__)


def prepare_database() -> None:
    """Create tables and make the Config rows match the declared settings."""
    create_tables()
    db = SessionLocal()
    try:
        ConfigStore(db).reconcile()
        logger.info("Config reconciled against %s", engine.url.render_as_string(hide_password=True))
    finally:
        db.close()


def cleanup_once() -> int:
    """Run one cleanup cycle; return 1 if any step failed."""
    db = SessionLocal()
    try:
        report = run_cleanup(db)
    finally:
        db.close()
    failed = report.bruteforce_deleted is None or report.users_deleted is None
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sandwich Spawnpoint maintenance")
    parser.add_argument(
        "task",
        choices=("init-db", "cleanup"),
        help="init-db creates tables and config rows; cleanup prunes old rows",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())
    if args.task == "init-db":
        prepare_database()
        logger.info("Database initialized")
        return 0
    return cleanup_once()


if __name__ == "__main__":
    raise SystemExit(main())
