# src/sandwich_spawnpoint/api/endpoints/users.py
"""User session, listing and role upgrade endpoints."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from sandwich_spawnpoint.api.dependencies import (
    AdminSessionDep,
    BruteforceLedgerDep,
    ClientIpDep,
    ConfigStoreDep,
    CurrentSessionDep,
    RoleGate,
    SessionDep,
    TokenServiceDep,
)
from sandwich_spawnpoint.core.errors import AuthorizationError, NotFoundError
from sandwich_spawnpoint.models import BruteforceAction, Role, User
from sandwich_spawnpoint.schemas.order import OrderOut
from sandwich_spawnpoint.schemas.user import (
    OtpOut,
    OtpRequest,
    SessionOut,
    SessionTokenOut,
    UpgradeAdminRequest,
    UserListItem,
    UserNewRequest,
)
from sandwich_spawnpoint.services.tokens import SessionClaim, TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])

ADMIN_PASSWORD_KEY = "adminUpgradePassword"

LOCKED_OUT_MESSAGE = "Too many failed attempts. Try again later"


def _session_token(user: User, tokens: TokenService, expires_at: int | None = None) -> SessionTokenOut:
    issued = tokens.issue(user.id, user.name, user.role, expires_at)
    return SessionTokenOut(
        id=user.id,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
        token=issued.token,
        expires_in=issued.expires_in,
    )


def _session_user(db: Session, claim: SessionClaim) -> User:
    user = db.get(User, claim.sub)
    if user is None:
        raise NotFoundError("User does not exist")
    return user


def _promote(db: Session, user: User, role: Role) -> User:
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("User %s promoted to %s", user.id, role.value)
    return user


@router.post(
    "/new",
    summary="Create a user and start a session",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionTokenOut,
)
def create_user(payload: UserNewRequest, db: SessionDep, tokens: TokenServiceDep) -> SessionTokenOut:
    user = User(name=payload.name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return _session_token(user, tokens)


@router.get("/me", summary="Decode the caller's session", response_model=SessionOut)
def read_session(claim: CurrentSessionDep) -> SessionOut:
    return SessionOut(
        **claim.model_dump(),
        created_at=claim.created_at,
        expires_at=claim.expires_at,
    )


@router.get(
    "/list",
    summary="List users",
    response_model=list[UserListItem],
    response_model_exclude_none=True,
)
def list_users(
    _: AdminSessionDep,
    db: SessionDep,
    role: Role | None = None,
    user_id: Annotated[UUID | None, Query(alias="id")] = None,
    orders: Annotated[bool, Query(description="Include each user's orders")] = False,
) -> list[UserListItem]:
    stmt = select(User).order_by(User.created_at)
    if role is not None:
        stmt = stmt.where(User.role == role)
    if user_id is not None:
        stmt = stmt.where(User.id == str(user_id))
    if orders:
        stmt = stmt.options(selectinload(User.orders))

    return [
        UserListItem(
            id=user.id,
            name=user.name,
            role=user.role,
            created_at=user.created_at,
            orders=[OrderOut.model_validate(order) for order in user.orders] if orders else None,
        )
        for user in db.execute(stmt).scalars()
    ]


@router.delete(
    "/delete/{user_id}",
    summary="Delete a user and their orders",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_user(user_id: UUID, _: AdminSessionDep, db: SessionDep) -> Response:
    user = db.get(User, str(user_id))
    if user is None:
        raise NotFoundError("User does not exist")
    db.delete(user)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/upgrade/admin",
    summary="Upgrade the caller to admin with the admin password",
    response_model=SessionTokenOut,
)
def upgrade_admin(
    payload: UpgradeAdminRequest,
    claim: Annotated[SessionClaim, Depends(RoleGate([Role.USER, Role.VIP]))],
    ip: ClientIpDep,
    db: SessionDep,
    config: ConfigStoreDep,
    ledger: BruteforceLedgerDep,
    tokens: TokenServiceDep,
) -> SessionTokenOut:
    """Check the lockout first so a blocked caller never learns if a guess was right."""
    if not ledger.check(BruteforceAction.ADMINPROMOTE, ip=ip, user_id=claim.sub):
        raise AuthorizationError(LOCKED_OUT_MESSAGE)

    user = _session_user(db, claim)
    if not config.validate_password(ADMIN_PASSWORD_KEY, payload.password):
        ledger.record(BruteforceAction.ADMINPROMOTE, ip=ip, user_id=claim.sub)
        raise AuthorizationError("Invalid password")

    user = _promote(db, user, Role.ADMIN)
    return _session_token(user, tokens, expires_at=claim.exp)


@router.post(
    "/upgrade/vip",
    summary="Upgrade the caller to VIP by redeeming a one-time code",
    response_model=SessionTokenOut,
)
def upgrade_vip(
    payload: OtpRequest,
    claim: Annotated[SessionClaim, Depends(RoleGate([Role.USER]))],
    ip: ClientIpDep,
    db: SessionDep,
    config: ConfigStoreDep,
    ledger: BruteforceLedgerDep,
    tokens: TokenServiceDep,
) -> SessionTokenOut:
    if not ledger.check(BruteforceAction.VIPPROMOTE, ip=ip, user_id=claim.sub):
        raise AuthorizationError(LOCKED_OUT_MESSAGE)

    # Look the user up first so a deleted account never burns a code.
    user = _session_user(db, claim)
    if not config.consume_otp(payload.otp):
        ledger.record(BruteforceAction.VIPPROMOTE, ip=ip, user_id=claim.sub)
        raise AuthorizationError("Invalid code")

    user = _promote(db, user, Role.VIP)
    return _session_token(user, tokens, expires_at=claim.exp)


@router.post(
    "/vip/new",
    summary="Create a VIP one-time code",
    status_code=status.HTTP_201_CREATED,
    response_model=OtpOut,
)
def create_vip_code(_: AdminSessionDep, config: ConfigStoreDep) -> OtpOut:
    return OtpOut(otp=config.create_otp())


@router.delete(
    "/vip/delete",
    summary="Revoke a VIP one-time code",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_vip_code(payload: OtpRequest, _: AdminSessionDep, config: ConfigStoreDep) -> Response:
    if not config.consume_otp(payload.otp):
        raise NotFoundError("Code does not exist")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
