"""API error classes.

Every failure a service can raise maps to one HTTP status and one
machine-readable code. The exception handlers in ticketdesk.main render
them as {"error": message, "code": code, "details": [...]}.
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Details carry one {"field": ..., "message": ...} entry per failing field.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class EmailExistsError(APIError):
    """Registration with an email that is already taken (400)."""

    def __init__(self, message: str = "Email already exists") -> None:
        super().__init__(
            code="EMAIL_EXISTS",
            message=message,
            status_code=400,
        )


class InvalidCredentialsError(APIError):
    """Unknown email or wrong password (401).

    The message is identical for both causes so callers cannot tell
    which one failed.
    """

    def __init__(self) -> None:
        super().__init__(
            code="INVALID_CREDENTIALS",
            message="Invalid credentials",
            status_code=401,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when the token is missing, unknown, or expired.
    """

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ForbiddenError(APIError):
    """Not allowed to access resource (403).

    Use when auth is valid but the record belongs to another user.
    """

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class StorageError(APIError):
    """Backing store write failed (500).

    Read failures never raise; the store falls back to an empty snapshot.
    """

    def __init__(self, message: str = "Failed to persist data") -> None:
        super().__init__(
            code="STORAGE_ERROR",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
