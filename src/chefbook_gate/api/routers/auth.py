"""
chefbook_gate.api.routers.auth

Registration, login and identity endpoints.

Responsibilities:
- Register accounts with a password policy.
- Issue bearer tokens at login without revealing whether an email is registered.
- Reject operator-bearing identity fields before any query runs.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_409_CONFLICT

from chefbook_gate.api.deps import db_session, settings_dep
from chefbook_gate.api.ratelimit import login_rate_limit
from chefbook_gate.api.schemas import (
    UserOut,
    dump,
    is_valid_email,
    normalize_email,
    password_problem,
)
from chefbook_gate.auth.jwt import issue_token
from chefbook_gate.auth.models import Principal
from chefbook_gate.auth.passwords import (
    MAX_PASSWORD_BYTES,
    hash_password_async,
    verify_password_async,
)
from chefbook_gate.db.repositories.users import UserRepo
from chefbook_gate.gate.authz import AuthzGate
from chefbook_gate.gate.deps import get_gate, get_principal, jwt_config
from chefbook_gate.gate.errors import InvalidInput, InvalidToken
from chefbook_gate.gate.shapes import scalar_fields
from chefbook_gate.observability.logging import get_logger
from chefbook_gate.settings import Settings

router = APIRouter(prefix="/auth", tags=["auth"])
log = get_logger(__name__)

# Same message for unknown email and wrong password.
_BAD_CREDENTIALS = "Invalid email or password"


@router.post("/register", status_code=HTTP_201_CREATED)
async def register(
    payload: dict[str, Any] = Body(...),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    fields = scalar_fields(payload, "name", "email", "password")
    name = fields["name"].strip()
    email = normalize_email(fields["email"])
    password = fields["password"]

    if not 2 <= len(name) <= 100:
        raise InvalidInput("name length")
    if not is_valid_email(email):
        raise InvalidInput("email format")
    problem = password_problem(password, max_bytes=MAX_PASSWORD_BYTES)
    if problem is not None:
        raise InvalidInput(
            f"password {problem}",
            public_message=(
                "Password must be at least 8 characters and contain a letter and a number"
            ),
        )

    users = UserRepo(session)
    if await users.get_by_email(email) is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="User already exists")

    user = await users.create(
        name=name,
        email=email,
        password_hash=await hash_password_async(password, rounds=settings.bcrypt_rounds),
    )
    await session.commit()
    log.info("user_registered", user_id=user.id)
    return {"success": True, "message": "User registered successfully", "user": dump(UserOut, user)}


@router.post("/login", dependencies=[Depends(login_rate_limit)])
async def login(
    payload: dict[str, Any] = Body(...),
    gate: AuthzGate = Depends(get_gate),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    # Shape checks run before the email is allowed anywhere near a query.
    email = normalize_email(gate.reject_injection_operators(payload.get("email"), field="email"))
    password = gate.reject_injection_operators(payload.get("password"), field="password")

    user = await UserRepo(session).get_by_email(email)
    ok = await verify_password_async(password, user.password_hash if user else None)
    if user is None or not ok:
        raise InvalidToken("bad credentials", public_message=_BAD_CREDENTIALS)

    token = issue_token(
        cfg=jwt_config(settings),
        subject=user.id,
        ttl=timedelta(minutes=settings.access_token_ttl_minutes),
    )
    log.info("login_succeeded", user_id=user.id)
    return {"success": True, "token": token, "user": dump(UserOut, user)}


@router.get("/me")
async def me(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    user = await UserRepo(session).get(principal.subject)
    if user is None:
        raise InvalidToken("principal vanished mid-request")
    return {
        "success": True,
        "user": dump(UserOut, user),
        "expiresAt": principal.expires_at.isoformat(),
    }


# --- Module Notes -----------------------------------------------------------
# There is deliberately no `/user/login`; the legacy route answers 404.
