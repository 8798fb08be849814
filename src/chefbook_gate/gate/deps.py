"""
chefbook_gate.gate.deps

FastAPI dependency functions that run the gate in the request pipeline.

Responsibilities:
- Build a per-request `AuthzGate` from injected settings and the request's DB session.
- Convert a bearer token into a typed `Principal`.
- Enforce ownership and role requirements via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from chefbook_gate.api.deps import db_session, settings_dep
from chefbook_gate.auth.jwt import JwtConfig
from chefbook_gate.auth.models import Principal, Role
from chefbook_gate.db.repositories.ownership import OwnershipRepo
from chefbook_gate.db.repositories.users import UserRepo
from chefbook_gate.gate.authz import AuthzGate, GateConfig, ResourceType
from chefbook_gate.gate.errors import Forbidden, InvalidToken
from chefbook_gate.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret,
    )


def gate_config(settings: Settings) -> GateConfig:
    return GateConfig(jwt=jwt_config(settings), payment_secret=settings.payment_secret)


def get_gate(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> AuthzGate:
    return AuthzGate(
        config=gate_config(settings),
        users=UserRepo(session),
        ownership=OwnershipRepo(session),
    )


async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    gate: AuthzGate = Depends(get_gate),
) -> Principal:
    if creds is None or not creds.credentials:
        raise InvalidToken("missing bearer token")
    return await gate.authenticate(creds.credentials)


def require_owner(
    resource_type: ResourceType,
    *,
    param: str,
    delegates: tuple[ResourceType, ...] = (),
):
    """
    Dependency factory: the resource named by path parameter `param` must be
    owned by the caller (or one of the `delegates` relations, or caller is admin).
    """

    async def _dep(
        request: Request,
        principal: Principal = Depends(get_principal),
        gate: AuthzGate = Depends(get_gate),
    ) -> Principal:
        resource_id = request.path_params[param]
        await gate.authorize_ownership(principal, resource_type, resource_id, delegates=delegates)
        return principal

    return _dep


def require_roles(*required: Role):
    required_set = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.is_admin or principal.role in required_set:
            return principal
        raise Forbidden(f"{principal.subject} lacks role {sorted(required_set)}")

    return _dep


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so a handler that also asks for
# `get_gate` or `get_principal` receives the same instances the filter used.
