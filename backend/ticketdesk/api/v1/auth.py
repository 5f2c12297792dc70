"""Authentication endpoints: login, logout, session info, registration.

Security considerations:
- login: identical 401 for unknown email and wrong password
- login: token returned in the body and as an httpOnly cookie
- logout: revokes the token server-side and clears the cookie
"""

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ticketdesk.api.deps import AuthServiceDep, CurrentToken, RequestToken
from ticketdesk.core.auth import clear_auth_cookie, set_auth_cookie
from ticketdesk.core.config import settings
from ticketdesk.core.rate_limiting import limiter

router = APIRouter()

# Unprefixed /login and /logout, served alongside /auth/login and /auth/logout
session_router = APIRouter()


# ===================================================================
# Request models
# ===================================================================


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    model_config = ConfigDict(extra="forbid")

    email: str | None = None
    password: str | None = None


class RegisterRequest(BaseModel):
    """Request body for POST /users and POST /auth/register."""

    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    email: str | None = None
    password: str | None = None
    name: str | None = None
    confirm_password: str | None = None


# ===================================================================
# POST /login
# ===================================================================


@limiter.limit(lambda: settings.rate_limit_login)
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    response: Response,
    auth: AuthServiceDep,
) -> dict:
    """Verify email + password and issue a bearer token.

    Returns {token, expiresAt, user: {id, email, name}} and sets the
    session cookie.
    """
    token = auth.login(body.email, body.password)
    set_auth_cookie(response, token.token)
    return token.to_json_dict()


# ===================================================================
# POST /logout
# ===================================================================


async def logout(token: RequestToken, auth: AuthServiceDep) -> Response:
    """Revoke the presented token and clear the session cookie.

    Succeeds even without a token so clients can always reset state.
    """
    auth.logout(token)
    response = Response(status_code=204)
    clear_auth_cookie(response)
    return response


# ===================================================================
# POST /auth/register
# ===================================================================


@limiter.limit(lambda: settings.rate_limit_register)
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    auth: AuthServiceDep,
) -> dict:
    """Register a new user.

    Returns {id, email, name}; the password is never echoed.
    """
    user = auth.register(
        body.email, body.password, body.name, confirm_password=body.confirm_password
    )
    return user.to_json_dict()


# ===================================================================
# GET /auth/me
# ===================================================================


async def me(current: CurrentToken) -> dict:
    """Return the user snapshot stored with the current token."""
    return current.user.to_json_dict()


router.add_api_route("/login", login, methods=["POST"])
router.add_api_route("/logout", logout, methods=["POST"], status_code=204)
router.add_api_route("/register", register, methods=["POST"], status_code=201)
router.add_api_route("/me", me, methods=["GET"])

session_router.add_api_route("/login", login, methods=["POST"])
session_router.add_api_route("/logout", logout, methods=["POST"], status_code=204)
