"""Shared dependencies for API endpoints.

Bearer token authentication and service wiring. Every protected endpoint
resolves its user through the same full token lookup and expiry check.

Tests override get_record_store and get_clock via app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request

from ticketdesk.core.config import settings
from ticketdesk.models import AuthToken
from ticketdesk.services.auth_service import AuthService, Clock, utc_now
from ticketdesk.services.ticket_service import TicketService
from ticketdesk.storage import RecordStore, get_record_store

_BEARER_PREFIX = "bearer "


def get_clock() -> Clock:
    """Time source for services."""
    return utc_now


def get_auth_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AuthService:
    return AuthService(store, clock=clock)


def get_ticket_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> TicketService:
    return TicketService(store, clock=clock)


def get_request_token(request: Request) -> str | None:
    """Extract the bearer token from the request.

    The Authorization header wins; browser clients fall back to the
    session cookie set at login.

    Args:
        request: HTTP request (injected by FastAPI).

    Returns:
        Token string, or None if the request carries none.
    """
    header = request.headers.get("Authorization", "")
    if header[: len(_BEARER_PREFIX)].lower() == _BEARER_PREFIX:
        token = header[len(_BEARER_PREFIX) :].strip()
        return token or None
    return request.cookies.get(settings.auth_cookie_name) or None


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
RequestToken = Annotated[str | None, Depends(get_request_token)]


def get_current_token(token: RequestToken, auth: AuthServiceDep) -> AuthToken:
    """Resolve the request's token to its stored record.

    Raises:
        UnauthorizedError: 401 if the token is missing, unknown, or expired.
    """
    return auth.authenticate(token)


def get_current_user_id(
    current: Annotated[AuthToken, Depends(get_current_token)],
) -> str:
    """Get the authenticated user's id."""
    return current.user.id


# Reusable type aliases for dependency injection
CurrentToken = Annotated[AuthToken, Depends(get_current_token)]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
