"""Shared API dependencies for authentication and common functionality."""

import logging
from collections.abc import Iterable
from typing import Annotated

from fastapi import Depends, Request, status
from sqlalchemy.orm import Session

from sandwich_spawnpoint.core.errors import AuthenticationError
from sandwich_spawnpoint.db.session import get_db
from sandwich_spawnpoint.models.enums import Role
from sandwich_spawnpoint.services.app_config import ConfigStore
from sandwich_spawnpoint.services.bruteforce import BruteforceLedger
from sandwich_spawnpoint.services.sync_proxy import ShapeProxy, get_shape_proxy
from sandwich_spawnpoint.services.tokens import SessionClaim, TokenService, get_token_service

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_token_service_dep() -> TokenService:
    return get_token_service()


def get_shape_proxy_dep() -> ShapeProxy:
    return get_shape_proxy()


def get_config_store(db: SessionDep) -> ConfigStore:
    return ConfigStore(db)


def get_bruteforce_ledger(db: SessionDep) -> BruteforceLedger:
    return BruteforceLedger(db)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service_dep)]
ShapeProxyDep = Annotated[ShapeProxy, Depends(get_shape_proxy_dep)]
ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
BruteforceLedgerDep = Annotated[BruteforceLedger, Depends(get_bruteforce_ledger)]


class RoleGate:
    """Dependency that authenticates a bearer token and enforces a role allowlist.

    With no roles given any valid session passes. The resolved claim is
    returned and also stored on ``request.state.session``.
    """

    def __init__(self, allowed_roles: Iterable[Role] | None = None) -> None:
        self.allowed_roles = frozenset(allowed_roles or ())

    def __call__(
        self,
        request: Request,
        tokens: TokenServiceDep,
    ) -> SessionClaim:
        realm = str(request.url)
        header = request.headers.get("Authorization")
        if not header:
            raise AuthenticationError(
                "invalid_request",
                "No Authorization header included in request",
                realm=realm,
            )

        parts = header.split()
        if len(parts) != 2 or parts[0] != "Bearer":
            raise AuthenticationError(
                "invalid_request",
                "Invalid credentials structure",
                realm=realm,
            )

        try:
            claim = tokens.validate(parts[1])
        except AuthenticationError as err:
            logger.info("Rejected token on %s: %s", request.url.path, err.cause or err.message)
            raise AuthenticationError(
                "invalid_token",
                err.message,
                realm=realm,
                cause=err.cause,
            ) from err

        if self.allowed_roles and claim.role not in self.allowed_roles:
            raise AuthenticationError(
                "insufficient_scope",
                "You don't have access to this resource",
                realm=realm,
                status_code=status.HTTP_403_FORBIDDEN,
            )

        request.state.session = claim
        return claim


# Any authenticated session
CurrentSessionDep = Annotated[SessionClaim, Depends(RoleGate())]
AdminSessionDep = Annotated[SessionClaim, Depends(RoleGate([Role.ADMIN]))]


def optional_session(request: Request, tokens: TokenServiceDep) -> SessionClaim | None:
    """Session claim for public routes; None when no Authorization header is sent.

    A header that is present but invalid is still rejected.
    """
    if not request.headers.get("Authorization"):
        return None
    return RoleGate()(request, tokens)


OptionalSessionDep = Annotated[SessionClaim | None, Depends(optional_session)]


def client_ip(request: Request) -> str:
    """Peer address of the request.

    Behind a reverse proxy run uvicorn with ``--proxy-headers`` so this is the
    real client rather than the proxy; raw forwarding headers are not trusted.
    """
    if request.client is not None:
        return request.client.host
    return "unknown"


ClientIpDep = Annotated[str, Depends(client_ip)]
