"""Users API router.

POST /users registers an account; GET /users?email= looks one up.
The lookup is public and meant for internal tooling and tests, not as a
login check.
"""

from typing import Annotated

from fastapi import APIRouter, Query

from ticketdesk.api.deps import AuthServiceDep
from ticketdesk.api.v1.auth import register
from ticketdesk.core.errors import ValidationError

router = APIRouter()


EmailQuery = Annotated[str | None, Query(description="Exact email to look up")]


@router.get("")
async def lookup_users(auth: AuthServiceDep, email: EmailQuery = None) -> list[dict]:
    """Find users by exact email.

    Returns:
        [user] without password, or [] if no user has this email.

    Raises:
        ValidationError: If the email query parameter is missing.
    """
    if not email:
        raise ValidationError(
            "Invalid query",
            details=[{"field": "email", "message": "Email query parameter is required"}],
        )
    return [u.to_json_dict() for u in auth.lookup_by_email(email)]


# Registration shares its handler (and rate limit) with POST /auth/register
router.add_api_route("", register, methods=["POST"], status_code=201)
