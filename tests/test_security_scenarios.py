"""
tests.test_security_scenarios

End-to-end abuse scenarios against the HTTP surface.

Responsibilities:
- Cross-user profile writes, forged tokens, spoofed payment signatures.
- Operator injection at login and mass assignment of privileged fields.
"""

from __future__ import annotations

import json

import httpx
import pytest

from chefbook_gate.auth.jwt import JwtConfig, issue_token
from chefbook_gate.auth.models import Role
from tests.conftest import PASSWORD, bearer


@pytest.mark.asyncio
async def test_profile_write_with_foreign_token_is_refused(
    client: httpx.AsyncClient, signup
) -> None:
    alice = await signup("Alice")
    bob = await signup("Bob")

    r = await client.put(
        "/profile/507f1f77bcf86cd799439011", headers=alice["headers"], json={"name": "Mallory"}
    )
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Access denied"}

    r = await client.put(
        f"/profile/{bob['id']}", headers=alice["headers"], json={"name": "Mallory"}
    )
    assert r.status_code == 403

    r = await client.get(f"/profile/{bob['id']}")
    assert r.json()["user"]["name"] == "Bob"


@pytest.mark.asyncio
async def test_profile_write_by_owner(client: httpx.AsyncClient, signup) -> None:
    alice = await signup("Alice")
    r = await client.put(
        f"/profile/{alice['id']}",
        headers=alice["headers"],
        json={"name": "Alice B", "phone": "+919876543210"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["user"]["name"] == "Alice B"
    assert r.json()["user"]["phone"] == "+919876543210"


@pytest.mark.asyncio
async def test_admin_may_edit_any_profile(client: httpx.AsyncClient, signup, set_role) -> None:
    admin = await signup("Admin")
    bob = await signup("Bob")
    await set_role(admin["id"], Role.admin)

    r = await client.put(f"/profile/{bob['id']}", headers=admin["headers"], json={"name": "Robert"})
    assert r.status_code == 200

    r = await client.put(
        "/profile/507f1f77bcf86cd799439011", headers=admin["headers"], json={"name": "Nobody"}
    )
    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer not.a.token"},
        {"Authorization": "Basic dXNlcjpwYXNz"},
    ],
    ids=["missing", "empty", "garbage", "wrong-scheme"],
)
async def test_missing_or_malformed_token(client: httpx.AsyncClient, headers) -> None:
    r = await client.get("/auth/me", headers=headers)
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Authentication required"}


@pytest.mark.asyncio
async def test_forged_token_is_rejected(client: httpx.AsyncClient, signup, settings) -> None:
    alice = await signup("Alice")
    forged_cfg = JwtConfig(
        alg="HS256",
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret="attacker-chosen-secret-0123456789abcdef",
    )
    forged = issue_token(cfg=forged_cfg, subject=alice["id"])

    r = await client.put(f"/profile/{alice['id']}", headers=bearer(forged), json={"name": "Eve"})
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"
    assert r.json()["message"] == "Authentication required"


@pytest.mark.asyncio
async def test_spoofed_payment_signature_is_rejected(
    client: httpx.AsyncClient, signup, make_chef, make_booking
) -> None:
    customer = await signup("Customer")
    chef_id = await make_chef(await signup("Chef"))
    booking_id = await make_booking(customer, chef_id)

    r = await client.post(
        "/payments/create-order", headers=customer["headers"], json={"bookingId": booking_id}
    )
    order_id = r.json()["data"]["orderId"]

    r = await client.post(
        "/payments/verify",
        headers=customer["headers"],
        json={
            "bookingId": booking_id,
            "orderId": order_id,
            "paymentId": "pay_123",
            "signature": "spoofed_sig",
        },
    )
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Payment verification failed"}

    r = await client.get(f"/payments/status/{booking_id}", headers=customer["headers"])
    assert r.json()["data"]["paymentStatus"] == "pending"
    assert r.json()["data"]["status"] == "pending"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": {"$gt": ""}, "password": PASSWORD},
        {"email": "user1@example.com", "password": {"$ne": None}},
        {"email": ["user1@example.com"], "password": PASSWORD},
        {"password": PASSWORD},
    ],
    ids=["email-gt", "password-ne", "email-list", "email-missing"],
)
async def test_login_rejects_operator_payloads(client: httpx.AsyncClient, signup, payload) -> None:
    await signup("Alice")
    r = await client.post("/auth/login", json=payload)
    assert r.status_code == 422
    assert "token" not in r.json()
    assert r.json()["message"] == "Invalid input"


@pytest.mark.asyncio
async def test_login_errors_do_not_reveal_accounts(client: httpx.AsyncClient, signup) -> None:
    alice = await signup("Alice")

    unknown = await client.post(
        "/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
    )
    wrong = await client.post(
        "/auth/login", json={"email": alice["email"], "password": "wrong-pass-1"}
    )
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {
        "success": False,
        "message": "Invalid email or password",
    }


@pytest.mark.asyncio
async def test_register_ignores_privileged_fields(client: httpx.AsyncClient) -> None:
    r = await client.post(
        "/auth/register",
        json={"name": "Eve", "email": "eve@example.com", "password": PASSWORD, "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "user"
    assert "password" not in r.json()["user"]
    assert "passwordHash" not in r.json()["user"]


@pytest.mark.asyncio
async def test_profile_update_rejects_unknown_fields(client: httpx.AsyncClient, signup) -> None:
    alice = await signup("Alice")
    r = await client.put(
        f"/profile/{alice['id']}", headers=alice["headers"], json={"role": "admin"}
    )
    assert r.status_code == 422

    r = await client.get("/auth/me", headers=alice["headers"])
    assert r.json()["user"]["role"] == "user"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "A", "email": "a@example.com", "password": PASSWORD},
        {"name": "Alice", "email": "not-an-email", "password": PASSWORD},
        {"name": "Alice", "email": "a@example.com", "password": "short1"},
        {"name": "Alice", "email": "a@example.com", "password": "lettersonly"},
        {"name": "Alice", "email": {"$gt": ""}, "password": PASSWORD},
    ],
    ids=["short-name", "bad-email", "short-password", "no-digit", "structured-email"],
)
async def test_register_validation(client: httpx.AsyncClient, payload) -> None:
    r = await client.post("/auth/register", json=payload)
    assert r.status_code == 422
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_register_duplicate_email(client: httpx.AsyncClient, signup) -> None:
    alice = await signup("Alice")
    r = await client.post(
        "/auth/register",
        json={"name": "Alice", "email": alice["email"].upper(), "password": PASSWORD},
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_role_change_takes_effect_immediately(
    client: httpx.AsyncClient, signup, set_role
) -> None:
    alice = await signup("Alice")
    r = await client.get("/bookings/admin/stats", headers=alice["headers"])
    assert r.status_code == 403

    await set_role(alice["id"], Role.admin)
    r = await client.get("/bookings/admin/stats", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["totalBookings"] == 0


@pytest.mark.asyncio
async def test_unencodable_payment_signature_is_rejected(
    client: httpx.AsyncClient, signup, make_chef, make_booking
) -> None:
    customer = await signup("Customer")
    booking_id = await make_booking(customer, await make_chef(await signup("Chef")))

    # json.dumps escapes the lone surrogate as \ud800, which is valid JSON text.
    body = json.dumps(
        {"bookingId": booking_id, "orderId": "order_1", "paymentId": "pay_1", "signature": "\ud800"}
    )
    r = await client.post(
        "/payments/verify",
        headers={**customer["headers"], "Content-Type": "application/json"},
        content=body.encode("ascii"),
    )
    assert r.status_code == 403
    assert r.json() == {"success": False, "message": "Payment verification failed"}


@pytest.mark.asyncio
async def test_unencodable_password_is_invalid_input(client: httpx.AsyncClient) -> None:
    body = json.dumps({"name": "Eve", "email": "eve@example.com", "password": "abc12345\ud800"})
    r = await client.post(
        "/auth/register", headers={"Content-Type": "application/json"}, content=body.encode("ascii")
    )
    assert r.status_code == 422
