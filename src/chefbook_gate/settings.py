"""
chefbook_gate.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets (JWT signing key, payment secret) from repr/logging.
- Refuse to boot in prod with the development secrets.
- Offer a cached settings instance for the process entrypoint.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEV_JWT_SECRET = "dev-secret-change-me"
_DEV_PAYMENT_SECRET = "dev-payment-secret-change-me"


class Settings(BaseSettings):
    """
    Every layer receives this object explicitly (app factory -> app.state ->
    dependencies); nothing reads secrets from ambient process state at request time.
    """

    model_config = SettingsConfigDict(env_prefix="CHEFBOOK_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "chefbook-gate"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 5000
    # Proxies whose X-Forwarded-For is trusted (uvicorn `forwarded_allow_ips`).
    forwarded_allow_ips: str = "127.0.0.1"

    # Bearer tokens
    jwt_alg: str = "HS256"
    jwt_issuer: str = "chefbook"
    jwt_audience: str = "chefbook-api"
    jwt_secret: str = Field(default=_DEV_JWT_SECRET, repr=False)
    access_token_ttl_minutes: int = Field(default=24 * 60, ge=1)

    # Shared with the payment provider; signs (order_id|payment_id) assertions.
    payment_secret: str = Field(default=_DEV_PAYMENT_SECRET, repr=False)
    payment_currency: str = "INR"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./chefbook.db"

    # Passwords
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    # Login throttling (per client address)
    login_rate_limit: int = Field(default=5, ge=1)
    login_rate_window_seconds: int = Field(default=15 * 60, ge=1)

    @model_validator(mode="after")
    def _no_dev_secrets_in_prod(self) -> Settings:
        if self.env == "prod" and (
            self.jwt_secret == _DEV_JWT_SECRET or self.payment_secret == _DEV_PAYMENT_SECRET
        ):
            raise ValueError("jwt_secret and payment_secret must be set in prod")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars when the entrypoint and tooling both ask for settings.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Request handlers read settings from `app.state.settings` (see `api.deps`), so
# tests can build an app from an explicit Settings instance without env vars.
