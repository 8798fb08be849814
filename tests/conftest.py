from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import date, timedelta
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from chefbook_gate.api.app import create_app
from chefbook_gate.auth.models import Role
from chefbook_gate.db.repositories.users import UserRepo
from chefbook_gate.settings import Settings

PASSWORD = "s3cret-pass"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'chefbook-test.db'}",
        jwt_secret="test-jwt-secret-with-enough-entropy-0123456789",
        payment_secret="test-payment-secret",
        bcrypt_rounds=4,
        login_rate_limit=50,
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


Account = dict[str, Any]


@pytest.fixture
def signup(client: httpx.AsyncClient) -> Callable[..., Awaitable[Account]]:
    """
    Register and log in a fresh account. Returns `{"id", "email", "token", "headers"}`.
    """

    counter = {"n": 0}

    async def _signup(name: str = "Test User") -> Account:
        counter["n"] += 1
        email = f"user{counter['n']}@example.com"
        r = await client.post(
            "/auth/register", json={"name": name, "email": email, "password": PASSWORD}
        )
        assert r.status_code == 201, r.text
        r = await client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        body = r.json()
        token = body["token"]
        return {
            "id": body["user"]["id"],
            "email": email,
            "token": token,
            "headers": bearer(token),
        }

    return _signup


@pytest.fixture
def set_role(app: FastAPI) -> Callable[[str, Role], Awaitable[None]]:
    async def _set_role(user_id: str, role: Role) -> None:
        async with app.state.sessionmaker() as session:
            await UserRepo(session).set_role(user_id, role)
            await session.commit()

    return _set_role


@pytest.fixture
def make_chef(client: httpx.AsyncClient) -> Callable[[Account], Awaitable[str]]:
    async def _make_chef(account: Account) -> str:
        r = await client.post(
            "/chefs",
            headers=account["headers"],
            json={"name": "Chef Ana", "bio": "Home cooking", "pricePerHour": 500},
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]["id"]

    return _make_chef


def booking_payload(chef_id: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "chefId": chef_id,
        "eventDate": (date.today() + timedelta(days=7)).isoformat(),
        "eventTime": "18:30",
        "durationHours": 3,
        "guestCount": 12,
        "location": "12 Park Street, Kolkata",
        "serviceType": "birthday",
        "totalPrice": 1500.0,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_booking(client: httpx.AsyncClient) -> Callable[[Account, str], Awaitable[str]]:
    async def _make_booking(account: Account, chef_id: str) -> str:
        r = await client.post(
            "/bookings", headers=account["headers"], json=booking_payload(chef_id)
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]["id"]

    return _make_booking
