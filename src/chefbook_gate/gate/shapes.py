"""
chefbook_gate.gate.shapes

Shape classification for untrusted request fields.

Responsibilities:
- Classify a raw JSON value as `Scalar`, `Structured` or `Missing`.
- Extract scalar identity fields, rejecting operator-bearing structures
  (e.g. `{"$gt": ""}`) before they can reach a query.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from chefbook_gate.gate.errors import InvalidInput


@dataclass(frozen=True, slots=True)
class Scalar:
    value: str


@dataclass(frozen=True, slots=True)
class Structured:
    value: Any


@dataclass(frozen=True, slots=True)
class Missing:
    pass


FieldShape = Scalar | Structured | Missing

MISSING = Missing()


def classify(value: Any) -> FieldShape:
    if value is None or isinstance(value, Missing):
        return MISSING
    if isinstance(value, str):
        return Scalar(value)
    # bool is an int subclass; neither is an acceptable identity string.
    return Structured(value)


def is_utf8(value: str) -> bool:
    # JSON can carry lone surrogates (e.g. "\ud800"), which have no UTF-8 encoding.
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def require_scalar(value: Any, *, field: str) -> str:
    shape = classify(value)
    if isinstance(shape, Scalar):
        if not is_utf8(shape.value):
            raise InvalidInput(f"{field}: string is not encodable as UTF-8")
        return shape.value
    kind = "missing" if isinstance(shape, Missing) else type(shape.value).__name__
    raise InvalidInput(f"{field}: expected string, got {kind}")


def scalar_fields(payload: Any, *fields: str) -> dict[str, str]:
    """
    Pull the named fields out of a raw JSON body as strings.

    Any field that is missing, null or non-string rejects the whole payload.
    """

    if not isinstance(payload, Mapping):
        raise InvalidInput("payload: expected object")
    return {name: require_scalar(payload.get(name), field=name) for name in fields}


# --- Module Notes -----------------------------------------------------------
# Request schemas in `api.schemas` use StrictStr for the same purpose; these helpers
# cover raw bodies and query strings that never pass through a model.
