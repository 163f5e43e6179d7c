"""Tests for shape query authorization and the upstream proxy."""

from __future__ import annotations

import httpx
import pytest

from sandwich_spawnpoint.core.errors import ApiError, AuthorizationError
from sandwich_spawnpoint.models import Role
from sandwich_spawnpoint.schemas.sync import ShapeQuery
from sandwich_spawnpoint.services.sync_proxy import (
    ShapeProxy,
    allow_rules_for,
    authorize_shape_query,
)
from sandwich_spawnpoint.services.tokens import SessionClaim


def _claim(role: Role = Role.USER) -> SessionClaim:
    return SessionClaim(sub="4b7c", name="Ada", role=role, iat=1, exp=2)


def test_allow_rules_bind_the_caller() -> None:
    rules = allow_rules_for(_claim())

    assert set(rules) == {'"Order"', '"Ingredient"'}
    assert rules['"Order"'].where == "\"userId\"='4b7c'"
    assert rules['"Ingredient"'].where == "enabled=true"


@pytest.mark.parametrize(
    ("table", "where", "message"),
    [
        ('"User"', None, "Query is not allowed"),
        ('"Order"', None, "Where does not have the allowed value of `\"userId\"='4b7c'`"),
        ('"Order"', "\"userId\"='4b7c' OR 1=1", "Where does not have the allowed value of `\"userId\"='4b7c'`"),
        ('"Ingredient"', "enabled = true", "Where does not have the allowed value of `enabled=true`"),
    ],
)
def test_non_admin_queries_must_match_exactly(table: str, where: str | None, message: str) -> None:
    query = ShapeQuery(table=table, offset="-1", where=where)

    with pytest.raises(AuthorizationError) as excinfo:
        authorize_shape_query(query, _claim())

    assert excinfo.value.message == message


def test_matching_and_admin_queries_pass() -> None:
    authorize_shape_query(ShapeQuery(table='"Ingredient"', offset="-1", where="enabled=true"), _claim())
    authorize_shape_query(ShapeQuery(table='"Bruteforce"', offset="-1"), _claim(Role.ADMIN))


def test_query_params_drop_unset_fields() -> None:
    query = ShapeQuery(table='"Order"', offset="0_0", cursor="12", unknown="x")

    assert query.to_params() == {"table": '"Order"', "offset": "0_0", "cursor": "12"}


async def test_forward_relays_status_headers_and_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["offset"] == "-1"
        return httpx.Response(
            409,
            stream=httpx.ByteStream(b'[{"headers":{"control":"must-refetch"}}]'),
            headers={"electric-handle": "h2", "content-type": "application/json"},
        )

    proxy = ShapeProxy("http://electric.test/", transport=httpx.MockTransport(handler))
    try:
        response = await proxy.forward(ShapeQuery(table='"Ingredient"', offset="-1"))
        body = b"".join([chunk async for chunk in response.body_iterator])
        await response.background()
    finally:
        await proxy.close()

    assert response.status_code == 409
    assert response.headers["electric-handle"] == "h2"
    assert body == b'[{"headers":{"control":"must-refetch"}}]'


async def test_forward_reports_unreachable_upstream() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    proxy = ShapeProxy("http://electric.test", transport=httpx.MockTransport(handler))
    try:
        with pytest.raises(ApiError) as excinfo:
            await proxy.forward(ShapeQuery(table='"Order"', offset="-1"))
    finally:
        await proxy.close()

    assert excinfo.value.status_code == 502


def test_repeated_columns_are_joined() -> None:
    query = ShapeQuery(table='"Order"', offset="-1", columns=["id", "status"])

    assert query.to_params()["columns"] == "id,status"
