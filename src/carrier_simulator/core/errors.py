"""Domain error kinds surfaced by the quote engine and policy lifecycle.

Errors are values, not exceptions: services wrap them in ``Err`` and the API
layer renders them as ``{"success": false, "error": {...}}``.
"""

from enum import Enum
from typing import Any

from beartype import beartype
from pydantic import Field

from ..models.base import BaseModelConfig


class ErrorCode(str, Enum):
    """Stable machine-readable error codes."""

    CARRIER_NOT_FOUND = "CARRIER_NOT_FOUND"
    QUOTE_NOT_FOUND = "NOT_FOUND"
    QUOTE_EXPIRED = "QUOTE_EXPIRED"
    POLICY_NOT_FOUND = "POLICY_NOT_FOUND"


# HTTP status per error kind; the transport layer owns the mapping but the
# table lives next to the codes so both change together.
HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.CARRIER_NOT_FOUND: 404,
    ErrorCode.QUOTE_NOT_FOUND: 404,
    ErrorCode.QUOTE_EXPIRED: 400,
    ErrorCode.POLICY_NOT_FOUND: 404,
}


@beartype
class ServiceError(BaseModelConfig):
    """Terminal business failure returned by a service operation."""

    code: ErrorCode = Field(..., description="Machine-readable error code")
    message: str = Field(..., min_length=1, description="Human-readable message")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Extra fields merged into the envelope"
    )

    @property
    @beartype
    def http_status(self) -> int:
        """Transport status for this error kind."""
        return HTTP_STATUS_BY_CODE[self.code]

    @beartype
    def to_envelope(self) -> dict[str, Any]:
        """Render the uniform error envelope."""
        return {
            "success": False,
            "error": {"code": self.code.value, "message": self.message, **self.details},
        }


@beartype
def carrier_not_found(carrier_id: str) -> ServiceError:
    """Unknown carrier identifier."""
    return ServiceError(
        code=ErrorCode.CARRIER_NOT_FOUND,
        message=f"Carrier '{carrier_id}' not found",
    )


@beartype
def quote_not_found(quote_id: str) -> ServiceError:
    """No quote indexed under the given id."""
    return ServiceError(
        code=ErrorCode.QUOTE_NOT_FOUND,
        message=f"Quote '{quote_id}' not found",
    )


@beartype
def quote_expired(quote_id: str, expired_at: str) -> ServiceError:
    """Quote exists but its validity window has closed."""
    return ServiceError(
        code=ErrorCode.QUOTE_EXPIRED,
        message="Quote has expired and is no longer bindable",
        details={"expired_at": expired_at, "quote_id": quote_id},
    )


@beartype
def policy_not_found(policy_id: str) -> ServiceError:
    """No policy stored under the given id."""
    return ServiceError(
        code=ErrorCode.POLICY_NOT_FOUND,
        message=f"Policy '{policy_id}' not found",
    )
