"""
chefbook_gate.auth.jwt

Bearer token issuing and validation.

Responsibilities:
- Issue access tokens at login.
- Decode tokens with strict claim requirements (iss/aud/exp/iat/sub) and return
  them as typed `TokenClaims`.

Note:
- Tokens carry only the subject and registered claims. Roles are resolved from
  the user record on every request so a role change takes effect immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from jwt import InvalidTokenError

REQUIRED_CLAIMS = ("exp", "iat", "iss", "aud", "sub")


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    ttl: timedelta = timedelta(days=1),
    now: datetime | None = None,
) -> str:
    issued = int((now or datetime.now(tz=UTC)).timestamp())
    return jwt.encode(
        {
            "iss": cfg.issuer,
            "aud": cfg.audience,
            "sub": subject,
            "iat": issued,
            "exp": issued + int(ttl.total_seconds()),
        },
        cfg.secret,
        algorithm=cfg.alg,
    )


def decode_and_validate(*, cfg: JwtConfig, token: str) -> TokenClaims:
    try:
        # Pinning `algorithms` rejects "none" and HS/RS confusion tokens.
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": list(REQUIRED_CLAIMS)},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    subject, iat, exp = payload["sub"], payload["iat"], payload["exp"]
    if not isinstance(subject, str) or not subject:
        raise JwtValidationError("sub is not a non-empty string")
    if isinstance(iat, bool) or not isinstance(iat, int | float):
        raise JwtValidationError("iat is not numeric")
    return TokenClaims(
        subject=subject,
        issued_at=datetime.fromtimestamp(iat, tz=UTC),
        expires_at=datetime.fromtimestamp(exp, tz=UTC),
    )


# --- Module Notes -----------------------------------------------------------
# `JwtValidationError` carries the PyJWT reason for logs only; the gate maps it to
# a uniform `InvalidToken` so clients cannot tell expired from forged tokens.
