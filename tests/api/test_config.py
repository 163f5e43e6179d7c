"""Tests for the config endpoints."""

from fastapi import status


def test_public_config_hides_secrets(client, app_config) -> None:
    app_config.create_otp()

    r = client.get("/api/config/get")

    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"enabled": True, "allowOrders": False}


def test_admin_reads_outstanding_codes(client, admin, customer) -> None:
    created = client.post("/api/user/vip/new", headers=admin.headers)
    assert created.status_code == status.HTTP_201_CREATED
    code = created.json()["otp"]

    as_admin = client.get("/api/config/get", headers=admin.headers)
    as_customer = client.get("/api/config/get", headers=customer.headers)

    assert as_admin.status_code == status.HTTP_200_OK
    assert as_admin.json() == {"enabled": True, "allowOrders": False, "vipOtps": [code]}
    assert as_customer.json() == {"enabled": True, "allowOrders": False}


def test_config_read_rejects_bad_token(client) -> None:
    r = client.get("/api/config/get", headers={"Authorization": "Bearer not-a-jwt"})

    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_admin_modifies_config(client, admin) -> None:
    r = client.patch(
        "/api/config/modify",
        json={"object": "allowOrders", "value": True},
        headers=admin.headers,
    )

    assert r.status_code == status.HTTP_200_OK
    assert r.json()["allowOrders"] is True
    assert client.get("/api/config/get").json()["allowOrders"] is True


def test_modify_rejections(client, admin, customer) -> None:
    def modify(payload, headers):
        return client.patch("/api/config/modify", json=payload, headers=headers)

    assert modify({"object": "enabled", "value": False}, customer.headers).status_code == 403
    assert modify({"object": "nope", "value": 1}, admin.headers).status_code == 404
    assert modify({"object": "vipOtps", "value": "123456"}, admin.headers).status_code == 403
    assert modify({"object": "enabled", "value": "maybe"}, admin.headers).status_code == 400


def test_changed_password_unlocks_upgrade(client, admin, customer) -> None:
    r = client.patch(
        "/api/config/modify",
        json={"object": "adminUpgradePassword", "value": "fresh-bread"},
        headers=admin.headers,
    )
    assert r.status_code == status.HTTP_200_OK
    assert "adminUpgradePassword" not in r.json()

    upgraded = client.post(
        "/api/user/upgrade/admin",
        json={"password": "fresh-bread"},
        headers=customer.headers,
    )
    assert upgraded.status_code == status.HTTP_200_OK
    assert upgraded.json()["role"] == "ADMIN"
