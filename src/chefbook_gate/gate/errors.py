"""
chefbook_gate.gate.errors

Rejection taxonomy for the authorization gate.

Responsibilities:
- One exception type per rejection class, each carrying its HTTP status and a
  generic public message.
- Keep the internal reason (for logs) separate from what the caller sees.
"""

from __future__ import annotations

from starlette import status
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_503_SERVICE_UNAVAILABLE,
)

# Renamed in newer Starlette releases; the old name warns on access.
HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class GateError(Exception):
    """
    Base class for terminal request rejections.

    `reason` is logged server-side and never rendered; `public_message` is the
    only text a caller ever receives.
    """

    status_code: int = HTTP_403_FORBIDDEN
    code: str = "rejected"
    public_message: str = "Request rejected"

    def __init__(self, reason: str = "", *, public_message: str | None = None) -> None:
        super().__init__(reason or self.code)
        self.reason = reason
        if public_message is not None:
            self.public_message = public_message


class InvalidToken(GateError):
    # Missing, malformed, expired, forged, or unknown-subject credentials all look the same.
    status_code = HTTP_401_UNAUTHORIZED
    code = "invalid_token"
    public_message = "Authentication required"


class Forbidden(GateError):
    status_code = HTTP_403_FORBIDDEN
    code = "forbidden"
    public_message = "Access denied"


class InvalidSignature(GateError):
    status_code = HTTP_403_FORBIDDEN
    code = "invalid_signature"
    public_message = "Payment verification failed"


class InvalidInput(GateError):
    status_code = HTTP_422_UNPROCESSABLE
    code = "invalid_input"
    public_message = "Invalid input"


class ResourceNotFound(GateError):
    status_code = HTTP_404_NOT_FOUND
    code = "not_found"
    public_message = "Not found"

    def __init__(self, resource: str = "Resource", reason: str = "") -> None:
        super().__init__(reason, public_message=f"{resource} not found")
        self.resource = resource


class StoreUnavailable(GateError):
    """
    The durable store could not answer. Not an authorization outcome.
    """

    status_code = HTTP_503_SERVICE_UNAVAILABLE
    code = "store_unavailable"
    public_message = "Service temporarily unavailable"


# --- Module Notes -----------------------------------------------------------
# Rendering lives in `chefbook_gate.api.errors`; this module has no FastAPI imports
# beyond status constants so the gate can be exercised without an app.
