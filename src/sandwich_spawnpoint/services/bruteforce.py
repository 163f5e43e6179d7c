"""Bruteforce protection for privileged actions.

Failed attempts are appended to the ``Bruteforce`` table and counted inside a
trailing window, separately per user id and per IP address. The per-IP bound
is looser because many users may share one address behind a proxy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.db.time import utcnow
from sandwich_spawnpoint.models import BruteforceAction, BruteforceAttempt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BruteforcePolicy:
    """Lockout window and the attempt counts that trigger it."""

    window_seconds: int = 60 * 60 * 20
    user_threshold: int = 3
    ip_threshold: int = 21

    @classmethod
    def from_settings(cls) -> BruteforcePolicy:
        return cls(
            window_seconds=settings.bruteforce_window_seconds,
            user_threshold=settings.bruteforce_user_threshold,
            ip_threshold=settings.bruteforce_ip_threshold,
        )

    @property
    def window(self) -> timedelta:
        return timedelta(seconds=self.window_seconds)


class BruteforceLedger:
    """Records failed attempts and decides whether a caller is locked out."""

    def __init__(self, db: Session, policy: BruteforcePolicy | None = None) -> None:
        self.db = db
        self.policy = policy or BruteforcePolicy.from_settings()

    def _window_start(self, now: datetime | None = None) -> datetime:
        return (now or utcnow()) - self.policy.window

    def _count(self, action: BruteforceAction, *criteria) -> int:
        stmt = (
            select(func.count())
            .select_from(BruteforceAttempt)
            .where(
                BruteforceAttempt.action == action,
                BruteforceAttempt.created_at > self._window_start(),
                *criteria,
            )
        )
        return int(self.db.execute(stmt).scalar_one())

    def check(
        self,
        action: BruteforceAction,
        *,
        ip: str | None = None,
        user_id: str | None = None,
    ) -> bool:
        """Return True if ``action`` may be attempted by this caller.

        Raises:
            ValueError: if neither ``ip`` nor ``user_id`` is given.
        """
        if not ip and not user_id:
            raise ValueError("One of ip or user_id must be supplied")

        if user_id:
            attempts = self._count(action, BruteforceAttempt.user_id == user_id)
            if attempts >= self.policy.user_threshold:
                return False

        if ip:
            attempts = self._count(action, BruteforceAttempt.ip == ip)
            if attempts >= self.policy.ip_threshold:
                return False

        return True

    def record(
        self,
        action: BruteforceAction,
        *,
        ip: str,
        user_id: str | None = None,
    ) -> BruteforceAttempt:
        """Append one failed attempt and commit it."""
        attempt = BruteforceAttempt(action=action, ip=ip, user_id=user_id)
        self.db.add(attempt)
        self.db.commit()
        logger.warning(
            "Failed %s attempt recorded (ip=%s, user=%s)", action.value, ip, user_id or "-"
        )
        return attempt

    def cleanup(self) -> int:
        """Delete attempts older than the lockout window and return how many."""
        result = self.db.execute(
            delete(BruteforceAttempt).where(
                BruteforceAttempt.created_at < self._window_start()
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return int(result.rowcount or 0)
