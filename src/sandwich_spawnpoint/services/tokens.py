"""Issuing and validating stateless session tokens.

Sessions are HS256-signed JWTs carrying the user id, display name and role.
Nothing is stored server side; a role upgrade re-issues a token with the
original expiry so the session lifetime never grows.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from sandwich_spawnpoint.core.errors import AuthenticationError, ConfigurationError
from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.models.enums import Role

logger = logging.getLogger(__name__)


class SessionClaim(BaseModel):
    """Decoded session token payload."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    sub: str
    name: str
    role: Role
    iat: int
    exp: int

    @model_validator(mode="before")
    @classmethod
    def _coerce_role(cls, data: object) -> object:
        # Strict mode refuses plain strings for enums; JSON payloads only carry strings.
        if isinstance(data, dict) and isinstance(data.get("role"), str):
            try:
                data = {**data, "role": Role(data["role"])}
            except ValueError:
                pass
        return data

    @model_validator(mode="after")
    def _check_lifetime(self) -> SessionClaim:
        if self.exp <= self.iat:
            raise ValueError("exp must be later than iat")
        return self

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.iat, UTC)

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, UTC)


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token and its remaining lifetime in seconds."""

    token: str
    expires_in: int


class TokenService:
    """Signs and verifies session claims with a single symmetric secret."""

    def __init__(
        self,
        secret: str | None,
        *,
        algorithm: str = "HS256",
        lifetime_seconds: int = 60 * 60 * 18,
    ) -> None:
        if not secret:
            raise ConfigurationError("Supply an app secret first! (APP_SECRET)")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime_seconds = lifetime_seconds

    def issue(
        self,
        user_id: str,
        name: str,
        role: Role,
        expires_at: int | None = None,
    ) -> IssuedToken:
        """Sign a claim for ``user_id``.

        ``expires_at`` keeps the expiry of an existing session when a token is
        re-issued after a role change.
        """
        now = int(time.time())
        try:
            claim = SessionClaim(
                sub=user_id,
                name=name,
                role=Role(role),
                iat=now,
                exp=expires_at if expires_at is not None else now + self.lifetime_seconds,
            )
        except ValidationError as err:
            # The session being re-issued ran out between validation and now.
            raise AuthenticationError(
                "invalid_token", "Session has expired", cause=err
            ) from err
        token: str = jwt.encode(
            claim.model_dump(mode="json"),
            self._secret,
            algorithm=self.algorithm,
        )
        return IssuedToken(token=token, expires_in=claim.exp - claim.iat)

    def validate(self, token: str) -> SessionClaim:
        """Verify signature and expiry and return the decoded claim.

        Raises:
            AuthenticationError: ``invalid_token`` for any signature, expiry or
                payload-shape failure.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as err:
            raise AuthenticationError(
                "invalid_token", "JWT validation failed!", cause=err
            ) from err

        try:
            return SessionClaim.model_validate(payload)
        except ValidationError as err:
            raise AuthenticationError(
                "invalid_token", "JWT payload is malformed", cause=err
            ) from err


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    """Return the process-wide token service built from settings."""
    return TokenService(
        settings.app_secret,
        algorithm=settings.jwt_algorithm,
        lifetime_seconds=settings.token_lifetime_seconds,
    )
