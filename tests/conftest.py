# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass, field

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("APP_SECRET", "test-secret-do-not-deploy")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_UPGRADE_PASSWORD", "let-me-cook")
os.environ.setdefault("CLEANUP_INTERVAL_SECONDS", "3600")

from sandwich_spawnpoint.api.dependencies import get_shape_proxy_dep
from sandwich_spawnpoint.db.session import Base
from sandwich_spawnpoint.db.session import get_db as app_get_session
from sandwich_spawnpoint.main import app as fastapi_app
from sandwich_spawnpoint.models import Ingredient, IngredientType, Role, User
from sandwich_spawnpoint.services.app_config import ConfigStore
from sandwich_spawnpoint.services.sync_proxy import ShapeProxy
from sandwich_spawnpoint.services.tokens import TokenService, get_token_service

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Handlers commit, so wipe every table to keep tests independent.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def app_config(db_session: Session) -> ConfigStore:
    """Declared config rows, as the app creates them at boot."""
    store = ConfigStore(db_session)
    store.reconcile()
    return store


@pytest.fixture()
def admin_password() -> str:
    """Plain-text admin upgrade password the config was seeded with."""
    return os.environ["ADMIN_UPGRADE_PASSWORD"]


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def token_service() -> TokenService:
    return get_token_service()


@dataclass
class SessionUser:
    """A persisted user together with a bearer token for them."""

    user: User
    token: str
    headers: dict[str, str] = field(default_factory=dict)


@pytest.fixture()
def make_session(
    db_session: Session, token_service: TokenService
) -> Callable[..., SessionUser]:
    """Create a user with ``role`` and return it with a signed session token."""

    def _make(name: str = "Test User", role: Role = Role.USER) -> SessionUser:
        user = User(name=name, role=role)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        token = token_service.issue(user.id, user.name, user.role).token
        return SessionUser(user=user, token=token, headers={"Authorization": f"Bearer {token}"})

    return _make


@pytest.fixture()
def customer(make_session: Callable[..., SessionUser]) -> SessionUser:
    return make_session("Customer")


@pytest.fixture()
def other_customer(make_session: Callable[..., SessionUser]) -> SessionUser:
    return make_session("Other Customer")


@pytest.fixture()
def admin(make_session: Callable[..., SessionUser]) -> SessionUser:
    return make_session("Kitchen", Role.ADMIN)


@pytest.fixture()
def ingredients(db_session: Session) -> dict[str, Ingredient]:
    """A small catalogue with one disabled ingredient."""
    rows = {
        "bread": Ingredient(name="Sourdough", type=IngredientType.BREAD),
        "cheese": Ingredient(name="Gouda", type=IngredientType.CHEESE),
        "salami": Ingredient(name="Salami", type=IngredientType.MEAT, enabled=False),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    for row in rows.values():
        db_session.refresh(row)
    return rows


@dataclass
class ShapeUpstream:
    """Records requests sent to the fake sync service."""

    requests: list[httpx.Request] = field(default_factory=list)
    fail: bool = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        # A stream, not content=, so the body is still unread when the proxy relays it.
        return httpx.Response(
            200,
            stream=httpx.ByteStream(b'[{"headers":{"control":"up-to-date"}}]'),
            headers={
                "content-type": "application/json",
                "electric-handle": "shape-1",
                "electric-offset": "0_0",
            },
        )


@pytest.fixture()
def shape_upstream(app: FastAPI) -> Iterator[ShapeUpstream]:
    upstream = ShapeUpstream()
    proxy = ShapeProxy(
        "http://electric.test",
        timeout_seconds=5,
        transport=httpx.MockTransport(upstream.handler),
    )
    app.dependency_overrides[get_shape_proxy_dep] = lambda: proxy
    try:
        yield upstream
    finally:
        app.dependency_overrides.pop(get_shape_proxy_dep, None)
