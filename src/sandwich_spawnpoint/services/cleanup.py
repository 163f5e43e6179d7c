"""Periodic database cleanup.

The worker prunes expired bruteforce attempts and users whose sessions can
no longer be valid. It runs on a fixed interval independent of request
traffic; a failing step is logged and the loop keeps going.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models import User
from sandwich_spawnpoint.services.bruteforce import BruteforceLedger

logger = logging.getLogger(__name__)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def prune_stale_users(db: Session, max_age_seconds: int | None = None) -> int:
    """Delete users created longer ago than one token lifetime."""
    max_age = max_age_seconds if max_age_seconds is not None else settings.token_lifetime_seconds
    cutoff = utcnow() - timedelta(seconds=max_age)
    result = db.execute(
        delete(User)
        .where(User.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return int(result.rowcount or 0)


@dataclass
class CleanupReport:
    """Outcome of one cleanup cycle. ``None`` marks a step that failed."""

    bruteforce_deleted: int | None = None
    users_deleted: int | None = None


def run_cleanup(db: Session) -> CleanupReport:
    """Run every cleanup step once against ``db``."""
    report = CleanupReport()

    try:
        report.bruteforce_deleted = BruteforceLedger(db).cleanup()
        if report.bruteforce_deleted:
            logger.info(
                "Deleted %s", _plural(report.bruteforce_deleted, "bruteforce attempt")
            )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error whilst deleting bruteforce attempts")

    try:
        report.users_deleted = prune_stale_users(db)
        if report.users_deleted:
            logger.info("Deleted %s", _plural(report.users_deleted, "user"))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error when deleting users")

    return report


class CleanupWorker:
    """Runs ``run_cleanup`` every ``interval`` seconds in the background."""

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        interval: float | None = None,
    ) -> None:
        if session_factory is None:
            from sandwich_spawnpoint.db.session import SessionLocal

            session_factory = SessionLocal
        self.session_factory = session_factory
        self.interval = max(
            0.1, float(interval if interval is not None else settings.cleanup_interval_seconds)
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background cleanup loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background cleanup loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    def _cycle(self) -> CleanupReport:
        db = self.session_factory()
        try:
            return run_cleanup(db)
        finally:
            db.close()

    async def run_once(self) -> CleanupReport:
        """Run a single cycle in a worker thread."""
        return await asyncio.to_thread(self._cycle)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                pass
            else:
                break

            try:
                await self.run_once()
            except Exception:  # noqa: BLE001 - one bad cycle must not end the loop
                logger.exception("Cleanup cycle failed")
