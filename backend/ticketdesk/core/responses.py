"""Response envelope models.

Success responses return the resource itself (a ticket, a list of
tickets, a public user). Every failure uses the same flat error body so
clients can always read a string from "error".
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response body.

    Attributes:
        error: Human-readable error message.
        code: Machine-readable error code (e.g., "NOT_FOUND").
        details: Optional list of field-level errors (for validation).

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message, code=exc.code).model_dump(),
        )
    """

    error: str
    code: str
    details: list[dict] | None = None
