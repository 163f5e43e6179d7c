"""Row-filtered proxy in front of the ElectricSQL shape endpoint.

The sync service has no per-row authorization of its own. Non-admin callers
may only request the tables listed in their allow rules, and only with the
exact row filter each rule names. Admins pass through unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx
from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

from sandwich_spawnpoint.core.errors import ApiError, AuthorizationError
from sandwich_spawnpoint.core.settings import settings
from sandwich_spawnpoint.models.enums import Role
from sandwich_spawnpoint.schemas.sync import ShapeQuery
from sandwich_spawnpoint.services.tokens import SessionClaim

logger = logging.getLogger(__name__)

SHAPE_PATH = "/v1/shape"

# Framing headers that belong to the upstream connection, not the relayed body.
_HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "content-length",
    }
)


@dataclass(frozen=True)
class AllowRule:
    """A table a non-admin may sync and the exact row filter required."""

    table: str
    where: str


def allow_rules_for(claim: SessionClaim) -> dict[str, AllowRule]:
    """Return the allow rules for a session, keyed by table identifier."""
    rules = (
        # The user id comes from a signed token, so interpolating it is safe.
        AllowRule(table='"Order"', where=f"\"userId\"='{claim.sub}'"),
        AllowRule(table='"Ingredient"', where="enabled=true"),
    )
    return {rule.table: rule for rule in rules}


def authorize_shape_query(query: ShapeQuery, claim: SessionClaim) -> None:
    """Raise ``AuthorizationError`` unless ``claim`` may run ``query``."""
    if claim.role is Role.ADMIN:
        return

    rule = allow_rules_for(claim).get(query.table)
    if rule is None:
        raise AuthorizationError("Query is not allowed")

    if query.where != rule.where:
        raise AuthorizationError(
            f"Where does not have the allowed value of `{rule.where}`"
        )


class ShapeProxy:
    """Streams shape responses from the sync service back to the caller."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.electric_url).rstrip("/")
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.sync_http_timeout_seconds
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def forward(self, query: ShapeQuery) -> StreamingResponse:
        """Send ``query`` upstream and relay status, headers and body verbatim."""
        client = await self._ensure_client()
        request = client.build_request("GET", SHAPE_PATH, params=query.to_params())
        try:
            upstream = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise ApiError(
                "Sync service is unavailable",
                status_code=502,
                cause=exc,
            ) from exc

        headers = {
            name: value
            for name, value in upstream.headers.items()
            if name.lower() not in _HOP_BY_HOP_HEADERS
        }
        return StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            headers=headers,
            background=BackgroundTask(upstream.aclose),
        )

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _ShapeProxySingleton:
    """Singleton wrapper for ShapeProxy."""

    _instance: ShapeProxy | None = None

    @classmethod
    def get_instance(cls) -> ShapeProxy:
        if cls._instance is None:
            cls._instance = ShapeProxy()
        return cls._instance


def get_shape_proxy() -> ShapeProxy:
    """Return the process-wide shape proxy."""
    return _ShapeProxySingleton.get_instance()
