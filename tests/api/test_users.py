"""Tests for user creation, listing and role upgrades."""

from __future__ import annotations

from fastapi import status
from sqlalchemy import func, select

from sandwich_spawnpoint.models import BruteforceAttempt, Order, Role, User


def test_create_user_starts_a_session(client, token_service) -> None:
    r = client.post("/api/user/new", json={"name": "Alice"})

    assert r.status_code == status.HTTP_201_CREATED
    body = r.json()
    assert body["name"] == "Alice"
    assert body["role"] == "USER"
    assert body["expiresIn"] == 64800
    claim = token_service.validate(body["token"])
    assert claim.sub == body["id"]

    me = client.get("/api/user/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == status.HTTP_200_OK


def test_create_user_rejects_empty_name(client) -> None:
    r = client.post("/api/user/new", json={"name": ""})

    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["message"].startswith("Issue with request body")


def test_admin_upgrade_keeps_expiry(client, db_session, customer, admin_password, token_service) -> None:
    original = token_service.validate(customer.token)

    r = client.post(
        "/api/user/upgrade/admin",
        json={"password": admin_password},
        headers=customer.headers,
    )

    assert r.status_code == status.HTTP_200_OK
    claim = token_service.validate(r.json()["token"])
    assert claim.role is Role.ADMIN
    assert claim.exp == original.exp
    db_session.expire_all()
    assert db_session.get(User, customer.user.id).role is Role.ADMIN


def test_admin_upgrade_locks_after_three_failures(client, db_session, customer, admin_password) -> None:
    for _ in range(3):
        r = client.post(
            "/api/user/upgrade/admin",
            json={"password": "guess"},
            headers=customer.headers,
        )
        assert r.status_code == status.HTTP_403_FORBIDDEN
        assert r.json()["message"] == "Invalid password"

    r = client.post(
        "/api/user/upgrade/admin",
        json={"password": admin_password},
        headers=customer.headers,
    )

    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["message"] == "Too many failed attempts. Try again later"
    attempts = db_session.execute(
        select(func.count()).select_from(BruteforceAttempt).where(BruteforceAttempt.ip == "testclient")
    ).scalar_one()
    assert attempts == 3


def test_vip_code_flow(client, admin, customer, other_customer, token_service) -> None:
    created = client.post("/api/user/vip/new", headers=admin.headers)
    assert created.status_code == status.HTTP_201_CREATED
    code = created.json()["otp"]
    original = token_service.validate(customer.token)

    r = client.post("/api/user/upgrade/vip", json={"otp": code}, headers=customer.headers)

    assert r.status_code == status.HTTP_200_OK
    claim = token_service.validate(r.json()["token"])
    assert claim.role is Role.VIP
    assert claim.exp == original.exp

    # Single use: nobody else can redeem it.
    again = client.post("/api/user/upgrade/vip", json={"otp": code}, headers=other_customer.headers)
    assert again.status_code == status.HTTP_403_FORBIDDEN
    assert again.json()["message"] == "Invalid code"

    # A VIP session is outside the allowed roles for redeeming.
    vip_headers = {"Authorization": f"Bearer {r.json()['token']}"}
    repeat = client.post("/api/user/upgrade/vip", json={"otp": code}, headers=vip_headers)
    assert repeat.status_code == status.HTTP_403_FORBIDDEN


def test_vip_code_must_be_six_digits(client, customer) -> None:
    r = client.post("/api/user/upgrade/vip", json={"otp": "12ab"}, headers=customer.headers)

    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_vip_code_survives_deleted_user(client, db_session, customer, app_config) -> None:
    code = app_config.create_otp()
    db_session.delete(customer.user)
    db_session.commit()

    r = client.post("/api/user/upgrade/vip", json={"otp": code}, headers=customer.headers)

    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert app_config.list_otps() == [code]


def test_vip_code_revocation(client, admin, app_config) -> None:
    code = app_config.create_otp()

    r = client.request("DELETE", "/api/user/vip/delete", json={"otp": code}, headers=admin.headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert app_config.list_otps() == []

    r = client.request("DELETE", "/api/user/vip/delete", json={"otp": code}, headers=admin.headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_list_users(client, db_session, admin, customer) -> None:
    db_session.add(Order(user_id=customer.user.id))
    db_session.commit()

    r = client.get("/api/user/list", headers=admin.headers)
    assert r.status_code == status.HTTP_200_OK
    assert {row["name"] for row in r.json()} == {"Kitchen", "Customer"}
    assert all("orders" not in row for row in r.json())

    r = client.get(
        "/api/user/list",
        params={"role": "USER", "orders": "true"},
        headers=admin.headers,
    )
    rows = r.json()
    assert [row["id"] for row in rows] == [customer.user.id]
    assert len(rows[0]["orders"]) == 1
    assert rows[0]["orders"][0]["status"] == "INQUEUE"


def test_delete_user_removes_orders(client, db_session, admin, customer) -> None:
    db_session.add(Order(user_id=customer.user.id))
    db_session.commit()
    user_id = customer.user.id

    r = client.delete(f"/api/user/delete/{user_id}", headers=admin.headers)

    assert r.status_code == status.HTTP_204_NO_CONTENT
    db_session.expire_all()
    assert db_session.get(User, user_id) is None
    assert db_session.execute(select(func.count()).select_from(Order)).scalar_one() == 0


def test_delete_user_needs_uuid(client, admin) -> None:
    r = client.delete("/api/user/delete/not-a-uuid", headers=admin.headers)

    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["message"].startswith("Issue with request path")
