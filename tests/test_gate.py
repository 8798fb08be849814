"""
tests.test_gate

Unit tests for `AuthzGate` against in-memory lookups (no app, no database).
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from chefbook_gate.auth.jwt import JwtConfig, issue_token
from chefbook_gate.auth.models import Principal, Role
from chefbook_gate.gate.authz import AuthzGate, GateConfig, ResourceType, sign_payment
from chefbook_gate.gate.errors import (
    Forbidden,
    InvalidInput,
    InvalidSignature,
    InvalidToken,
    ResourceNotFound,
    StoreUnavailable,
)

_GOOD_SIG = sign_payment(secret="pay-secret", order_id="order_1", payment_id="pay_1")

ALICE = "a" * 24
BOB = "b" * 24
ADMIN = "c" * 24
CHEF = "d" * 24
BOOKING = "e" * 24
CHEF_PROFILE = "f" * 24

JWT = JwtConfig(alg="HS256", issuer="chefbook", audience="chefbook-api", secret="k" * 40)
CONFIG = GateConfig(jwt=JWT, payment_secret="pay-secret")


class FakeUsers:
    def __init__(self, roles: dict[str, str]) -> None:
        self.roles = roles

    async def role_of(self, user_id: str) -> str | None:
        return self.roles.get(user_id)


class FakeOwnership:
    def __init__(self, owners: dict[tuple[ResourceType, str], str]) -> None:
        self.owners = owners
        self.calls: list[tuple[ResourceType, str]] = []

    async def owner_of(self, resource_type: ResourceType, resource_id: str) -> str | None:
        self.calls.append((resource_type, resource_id))
        return self.owners.get((resource_type, resource_id))


class BrokenOwnership:
    async def owner_of(self, resource_type: ResourceType, resource_id: str) -> str | None:
        raise StoreUnavailable("connection refused")


def make_gate(ownership=None) -> AuthzGate:
    users = FakeUsers({ALICE: "user", BOB: "user", ADMIN: "admin", CHEF: "chef"})
    if ownership is None:
        ownership = FakeOwnership(
            {
                (ResourceType.profile, ALICE): ALICE,
                (ResourceType.profile, BOB): BOB,
                (ResourceType.chef, CHEF_PROFILE): CHEF,
                (ResourceType.booking, BOOKING): ALICE,
                (ResourceType.booked_chef, BOOKING): CHEF,
            }
        )
    return AuthzGate(config=CONFIG, users=users, ownership=ownership)


async def principal_for(gate: AuthzGate, subject: str) -> Principal:
    return await gate.authenticate(issue_token(cfg=JWT, subject=subject))


@pytest.mark.asyncio
async def test_authenticate_resolves_role_from_store() -> None:
    gate = make_gate()
    p = await principal_for(gate, ADMIN)
    assert p.subject == ADMIN
    assert p.role == Role.admin
    assert p.is_admin
    assert p.expires_at > p.issued_at


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "token",
    [
        None,
        "",
        {"$gt": ""},
        "garbage.token.value",
        issue_token(cfg=JwtConfig("HS256", "chefbook", "chefbook-api", "z" * 40), subject=ALICE),
        issue_token(cfg=JWT, subject=ALICE, ttl=timedelta(seconds=-30)),
        issue_token(cfg=JWT, subject="9" * 24),
    ],
    ids=["none", "empty", "structured", "garbage", "wrong-key", "expired", "unknown-subject"],
)
async def test_authenticate_rejects_uniformly(token) -> None:
    with pytest.raises(InvalidToken) as ei:
        await make_gate().authenticate(token)
    assert ei.value.public_message == "Authentication required"
    assert ei.value.status_code == 401


@pytest.mark.asyncio
async def test_owner_and_admin_pass() -> None:
    gate = make_gate()
    alice = await principal_for(gate, ALICE)
    admin = await principal_for(gate, ADMIN)
    await gate.authorize_ownership(alice, ResourceType.booking, BOOKING)
    await gate.authorize_ownership(admin, ResourceType.booking, BOOKING)
    await gate.authorize_ownership(admin, ResourceType.profile, BOB)


@pytest.mark.asyncio
async def test_foreign_chef_is_forbidden() -> None:
    gate = make_gate()
    alice = await principal_for(gate, ALICE)
    with pytest.raises(Forbidden):
        await gate.authorize_ownership(alice, ResourceType.chef, CHEF_PROFILE)


@pytest.mark.asyncio
async def test_foreign_profile_is_forbidden_even_when_missing() -> None:
    ownership = FakeOwnership({(ResourceType.profile, BOB): BOB})
    gate = make_gate(ownership)
    alice = await principal_for(gate, ALICE)
    with pytest.raises(Forbidden):
        await gate.authorize_ownership(alice, ResourceType.profile, BOB)
    with pytest.raises(Forbidden):
        await gate.authorize_ownership(alice, ResourceType.profile, "507f1f77bcf86cd799439011")
    assert ownership.calls == []


@pytest.mark.asyncio
async def test_foreign_booking_looks_missing() -> None:
    gate = make_gate()
    bob = await principal_for(gate, BOB)
    with pytest.raises(ResourceNotFound) as foreign:
        await gate.authorize_ownership(bob, ResourceType.booking, BOOKING)
    with pytest.raises(ResourceNotFound) as missing:
        await gate.authorize_ownership(bob, ResourceType.booking, "0" * 24)
    assert foreign.value.public_message == missing.value.public_message == "Booking not found"


@pytest.mark.asyncio
async def test_missing_resource_is_not_found_for_admin() -> None:
    gate = make_gate()
    admin = await principal_for(gate, ADMIN)
    with pytest.raises(ResourceNotFound):
        await gate.authorize_ownership(admin, ResourceType.chef, "0" * 24)


@pytest.mark.asyncio
async def test_delegate_relation_grants_access() -> None:
    gate = make_gate()
    chef = await principal_for(gate, CHEF)
    with pytest.raises(ResourceNotFound):
        await gate.authorize_ownership(chef, ResourceType.booking, BOOKING)
    await gate.authorize_ownership(
        chef, ResourceType.booking, BOOKING, delegates=(ResourceType.booked_chef,)
    )


@pytest.mark.asyncio
async def test_ownership_is_read_on_every_check() -> None:
    ownership = FakeOwnership({(ResourceType.booking, BOOKING): ALICE})
    gate = make_gate(ownership)
    alice = await principal_for(gate, ALICE)
    await gate.authorize_ownership(alice, ResourceType.booking, BOOKING)

    ownership.owners[(ResourceType.booking, BOOKING)] = BOB
    with pytest.raises(ResourceNotFound):
        await gate.authorize_ownership(alice, ResourceType.booking, BOOKING)
    assert len(ownership.calls) == 2


@pytest.mark.asyncio
async def test_store_failure_is_not_an_authorization_outcome() -> None:
    gate = make_gate(BrokenOwnership())
    alice = await principal_for(gate, ALICE)
    with pytest.raises(StoreUnavailable) as ei:
        await gate.authorize_ownership(alice, ResourceType.booking, BOOKING)
    assert ei.value.status_code == 503


def test_payment_signature_round_trip() -> None:
    gate = make_gate()
    sig = gate.sign_payment("order_1", "pay_1")
    assert sig == sign_payment(secret="pay-secret", order_id="order_1", payment_id="pay_1")
    gate.verify_payment_signature("order_1", "pay_1", sig)


@pytest.mark.parametrize(
    ("order_id", "payment_id", "signature"),
    [
        ("order_1", "pay_1", "spoofed_sig"),
        ("order_1", "pay_2", _GOOD_SIG),
        ("order_1", "pay_1", sign_payment(secret="other", order_id="order_1", payment_id="pay_1")),
        ("order_1", "pay_1", ""),
        ("order_1", "pay_1", None),
        (None, "pay_1", "sig"),
        ("order_1", {"$ne": ""}, "sig"),
        ("order_1", "pay_1", "\ud800"),
        ("order_\udfff", "pay_1", "sig"),
    ],
    ids=[
        "spoofed",
        "swapped-payment",
        "wrong-secret",
        "empty",
        "missing",
        "no-order",
        "structured",
        "lone-surrogate-signature",
        "lone-surrogate-order",
    ],
)
def test_payment_signature_rejections(order_id, payment_id, signature) -> None:
    with pytest.raises(InvalidSignature) as ei:
        make_gate().verify_payment_signature(order_id, payment_id, signature)
    assert ei.value.status_code == 403


def test_reject_injection_operators() -> None:
    gate = make_gate()
    assert gate.reject_injection_operators("a@example.com", field="email") == "a@example.com"
    with pytest.raises(InvalidInput):
        gate.reject_injection_operators({"$gt": ""}, field="email")
    with pytest.raises(InvalidInput):
        gate.reject_injection_operators(None, field="email")
