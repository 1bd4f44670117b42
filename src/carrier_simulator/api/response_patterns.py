"""API response patterns following Result[T, E] + HTTP semantics."""

from typing import Any, TypeVar

from beartype import beartype
from fastapi.responses import JSONResponse

from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.result_types import Result

T = TypeVar("T")

logger = get_logger(__name__)

# Codes for HTTP failures that do not originate from a service error.
STATUS_ERROR_CODES: dict[int, str] = {
    400: "INVALID_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    500: "INTERNAL_ERROR",
}


@beartype
def error_code_for_status(status_code: int) -> str:
    """Machine-readable code for a bare HTTP status."""
    return STATUS_ERROR_CODES.get(status_code, "ERROR")


@beartype
def error_envelope(code: str, message: str, **details: Any) -> dict[str, Any]:
    """Build the uniform ``{"success": false, "error": {...}}`` body."""
    return {"success": False, "error": {"code": code, "message": message, **details}}


@beartype
def error_response(error: ServiceError) -> JSONResponse:
    """Render a service error with its mapped status code."""
    logger.warning("Service error %s: %s", error.code.value, error.message)
    return JSONResponse(status_code=error.http_status, content=error.to_envelope())


@beartype
def handle_result(result: Result[T, ServiceError]) -> T | JSONResponse:
    """Unwrap a successful result or turn its error into an envelope response.

    Success status codes are declared on the route itself.
    """
    if result.is_err():
        return error_response(result.unwrap_err())
    return result.unwrap()
