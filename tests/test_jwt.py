from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from chefbook_gate.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, issue_token

CFG = JwtConfig(alg="HS256", issuer="chefbook", audience="chefbook-api", secret="k" * 40)


def test_issue_and_decode() -> None:
    token = issue_token(cfg=CFG, subject="a" * 24)
    claims = decode_and_validate(cfg=CFG, token=token)
    assert claims.subject == "a" * 24
    assert claims.expires_at - claims.issued_at == timedelta(days=1)

    raw = jwt.decode(token, options={"verify_signature": False})
    assert raw["iss"] == "chefbook"
    assert raw["aud"] == "chefbook-api"
    assert set(raw) == {"iss", "aud", "sub", "iat", "exp"}


def test_ttl_is_applied() -> None:
    now = datetime(2030, 1, 1, tzinfo=UTC)
    token = issue_token(cfg=CFG, subject="u", ttl=timedelta(minutes=5), now=now)
    claims = jwt.decode(token, options={"verify_signature": False})
    assert claims["exp"] - claims["iat"] == 300


@pytest.mark.parametrize(
    "token",
    [
        issue_token(cfg=JwtConfig("HS256", "chefbook", "chefbook-api", "x" * 40), subject="u"),
        issue_token(cfg=JwtConfig("HS256", "someone-else", "chefbook-api", "k" * 40), subject="u"),
        issue_token(cfg=JwtConfig("HS256", "chefbook", "other-api", "k" * 40), subject="u"),
        issue_token(cfg=CFG, subject="u", ttl=timedelta(seconds=-60)),
        "not-a-jwt",
    ],
    ids=["wrong-key", "wrong-issuer", "wrong-audience", "expired", "garbage"],
)
def test_rejects_bad_tokens(token: str) -> None:
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)


def test_rejects_missing_subject() -> None:
    now = int(datetime.now(tz=UTC).timestamp())
    token = jwt.encode(
        {"iss": "chefbook", "aud": "chefbook-api", "iat": now, "exp": now + 60},
        CFG.secret,
        algorithm="HS256",
    )
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)


def test_rejects_unsigned_token() -> None:
    now = int(datetime.now(tz=UTC).timestamp())
    claims = {"iss": "chefbook", "aud": "chefbook-api", "sub": "u", "iat": now, "exp": now + 60}
    token = jwt.encode(claims, None, algorithm="none")
    with pytest.raises(JwtValidationError):
        decode_and_validate(cfg=CFG, token=token)
