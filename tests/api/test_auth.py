"""Tests for bearer authentication and role gating."""

from fastapi import status


def test_missing_header(client) -> None:
    r = client.get("/api/user/me")

    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json() == {"code": 401, "message": "No Authorization header included in request"}
    challenge = r.headers["www-authenticate"]
    assert challenge.startswith('Bearer realm="http://test/api/user/me"')
    assert 'error="invalid_request"' in challenge


def test_wrong_scheme(client, customer) -> None:
    r = client.get("/api/user/me", headers={"Authorization": f"Token {customer.token}"})

    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["message"] == "Invalid credentials structure"
    assert 'error="invalid_request"' in r.headers["www-authenticate"]


def test_garbage_token(client) -> None:
    r = client.get("/api/user/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["message"] == "JWT validation failed!"
    assert 'error="invalid_token"' in r.headers["www-authenticate"]


def test_role_not_allowed(client, customer) -> None:
    r = client.get("/api/user/list", headers=customer.headers)

    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["message"] == "You don't have access to this resource"
    assert 'error="insufficient_scope"' in r.headers["www-authenticate"]


def test_admin_cannot_upgrade_again(client, admin, admin_password) -> None:
    r = client.post(
        "/api/user/upgrade/admin",
        json={"password": admin_password},
        headers=admin.headers,
    )

    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert 'error="insufficient_scope"' in r.headers["www-authenticate"]


def test_session_is_decoded(client, customer) -> None:
    r = client.get("/api/user/me", headers=customer.headers)

    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["sub"] == customer.user.id
    assert body["name"] == "Customer"
    assert body["role"] == "USER"
    assert body["exp"] > body["iat"]
    assert "expiresAt" in body and "createdAt" in body
