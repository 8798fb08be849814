"""
chefbook_gate.gate.authz

The authorization gate placed in front of every state-mutating handler.

Responsibilities:
- Turn a bearer token into a `Principal` (signature, expiry, subject exists).
- Enforce resource ownership against the durable store, per request.
- Verify payment assertions with a server-side HMAC and constant-time compare.
- Reject operator-bearing values where a scalar identity field is expected.

The gate holds no mutable state. Secrets arrive through `GateConfig` and store
access through the two lookup protocols, both injected at construction.
"""

from __future__ import annotations

import enum
import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Protocol

from chefbook_gate.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from chefbook_gate.auth.models import Principal, Role
from chefbook_gate.gate.errors import Forbidden, InvalidSignature, InvalidToken, ResourceNotFound
from chefbook_gate.gate.shapes import Scalar, classify, is_utf8, require_scalar
from chefbook_gate.observability.logging import get_logger

log = get_logger(__name__)


class ResourceType(enum.StrEnum):
    profile = "profile"
    chef = "chef"
    booking = "booking"
    # The chef account a booking is addressed to.
    booked_chef = "booked_chef"


@dataclass(frozen=True, slots=True)
class OwnershipPolicy:
    label: str
    # When True a foreign resource is reported as missing rather than forbidden.
    hide_existence: bool
    # The resource id is the owner's user id; strangers are refused without a lookup.
    self_owned: bool = False


POLICIES: dict[ResourceType, OwnershipPolicy] = {
    ResourceType.profile: OwnershipPolicy(label="User", hide_existence=False, self_owned=True),
    ResourceType.chef: OwnershipPolicy(label="Chef", hide_existence=False),
    ResourceType.booking: OwnershipPolicy(label="Booking", hide_existence=True),
    ResourceType.booked_chef: OwnershipPolicy(label="Booking", hide_existence=True),
}


class UserLookup(Protocol):
    async def role_of(self, user_id: str) -> str | None: ...


class OwnershipLookup(Protocol):
    async def owner_of(self, resource_type: ResourceType, resource_id: str) -> str | None: ...


@dataclass(frozen=True, slots=True)
class GateConfig:
    jwt: JwtConfig
    payment_secret: str


def sign_payment(*, secret: str, order_id: str, payment_id: str) -> str:
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class AuthzGate:
    def __init__(
        self,
        *,
        config: GateConfig,
        users: UserLookup,
        ownership: OwnershipLookup,
    ) -> None:
        self._config = config
        self._users = users
        self._ownership = ownership

    async def authenticate(self, token: Any) -> Principal:
        if not isinstance(classify(token), Scalar) or not token:
            raise InvalidToken("missing bearer token")

        try:
            claims = decode_and_validate(cfg=self._config.jwt, token=token)
        except JwtValidationError as e:
            raise InvalidToken(f"token rejected: {e}") from e

        # Subject must still resolve; deleted users lose access with their record.
        role = await self._users.role_of(claims.subject)
        if role is None:
            raise InvalidToken("token subject does not resolve to a user")

        return Principal(
            subject=claims.subject,
            role=Role(role),
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
        )

    async def authorize_ownership(
        self,
        principal: Principal,
        resource_type: ResourceType,
        resource_id: str,
        *,
        delegates: tuple[ResourceType, ...] = (),
    ) -> None:
        """
        Allow iff the principal owns the resource, owns it through one of the
        `delegates` relations, or is an admin.

        Missing resources raise `ResourceNotFound`, except self-owned types, where
        a stranger is refused before the store is consulted.
        """

        policy = POLICIES[resource_type]
        if policy.self_owned and not principal.is_admin and resource_id != principal.subject:
            raise Forbidden(f"{principal.subject} does not own {resource_type} {resource_id}")

        owner = await self._ownership.owner_of(resource_type, resource_id)
        if owner is None:
            raise ResourceNotFound(policy.label, f"{resource_type} {resource_id} does not exist")

        if principal.is_admin or owner == principal.subject:
            return

        for delegate in delegates:
            if await self._ownership.owner_of(delegate, resource_id) == principal.subject:
                return

        reason = f"{principal.subject} does not own {resource_type} {resource_id}"
        if policy.hide_existence:
            raise ResourceNotFound(policy.label, reason)
        raise Forbidden(reason)

    def sign_payment(self, order_id: str, payment_id: str) -> str:
        return sign_payment(
            secret=self._config.payment_secret, order_id=order_id, payment_id=payment_id
        )

    def verify_payment_signature(self, order_id: Any, payment_id: Any, signature: Any) -> None:
        fields = {"orderId": order_id, "paymentId": payment_id, "signature": signature}
        for name, value in fields.items():
            shape = classify(value)
            if not isinstance(shape, Scalar) or not shape.value or not is_utf8(shape.value):
                raise InvalidSignature(f"{name} missing or not a UTF-8 string")

        expected = self.sign_payment(order_id, payment_id)
        # Constant-time: compare_digest does not short-circuit on the first differing byte.
        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            log.info("payment_signature_mismatch", order_id=order_id)
            raise InvalidSignature(f"signature mismatch for order {order_id}")

    def reject_injection_operators(self, value: Any, *, field: str = "value") -> str:
        return require_scalar(value, field=field)


# --- Module Notes -----------------------------------------------------------
# Ownership is looked up on every call and never cached: a booking reassigned a
# moment ago must not remain reachable by its previous owner.
