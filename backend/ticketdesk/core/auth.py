"""Authentication helpers for tokens, cookies, and password handling.

Shared utilities used by the auth service and auth endpoints.

Pipeline:
- generate_token / token_expiry: opaque bearer token issuance
- validate_registration: format rules for email, password, name
- hash_password / verify_password: plaintext or bcrypt, per settings
- set_auth_cookie / clear_auth_cookie: session cookie for browser clients
- DUMMY_HASH: Timing-safe constant for user enumeration defense
"""

import re
import secrets
from datetime import datetime, timedelta

import bcrypt
from fastapi import Response

from ticketdesk.core.config import settings
from ticketdesk.core.errors import ValidationError

# Simple x@y.z shape; deliverability is not checked
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 6

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"


def generate_token() -> str:
    """Create a random opaque bearer token."""
    return secrets.token_urlsafe(32)


def token_expiry(now: datetime) -> datetime:
    """Absolute expiry for a token minted at now."""
    return now + timedelta(hours=settings.auth_token_ttl_hours)


def validate_registration(
    email: str | None,
    password: str | None,
    name: str | None,
    confirm_password: str | None = None,
) -> None:
    """Validate registration fields.

    All failing fields are reported together.

    Args:
        email: Login email.
        password: Plain-text password.
        name: Display name.
        confirm_password: Optional repeat of password; checked only when given.

    Raises:
        ValidationError: With one {"field", "message"} detail per failing field.
    """
    errors: list[dict] = []

    if not email:
        errors.append({"field": "email", "message": "Email is required"})
    elif not _EMAIL_PATTERN.match(email):
        errors.append({"field": "email", "message": "Email is invalid"})

    if not password:
        errors.append({"field": "password", "message": "Password is required"})
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            {
                "field": "password",
                "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            }
        )

    stripped_name = (name or "").strip()
    if not stripped_name:
        errors.append({"field": "name", "message": "Name is required"})
    elif len(stripped_name) < settings.min_name_length:
        errors.append(
            {
                "field": "name",
                "message": f"Name must be at least {settings.min_name_length} characters",
            }
        )

    if confirm_password is not None and confirm_password != password:
        errors.append(
            {"field": "confirm_password", "message": "Passwords do not match"}
        )

    if errors:
        raise ValidationError("Registration validation failed", details=errors)


def hash_password(password: str) -> str:
    """Prepare a password for storage.

    Returns the password unchanged unless settings.password_hashing is on,
    in which case it returns a bcrypt hash.
    """
    if not settings.password_hashing:
        return password
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    ).decode()


def verify_password(password: str, stored: str | None) -> bool:
    """Check a supplied password against the stored value.

    Plain string equality unless settings.password_hashing is on. With
    hashing, a missing stored value still costs one bcrypt comparison.

    Args:
        password: Password supplied at login.
        stored: Stored password or hash; None when the user does not exist.

    Returns:
        True if the password matches.
    """
    if not settings.password_hashing:
        return stored is not None and stored == password

    if stored is None:
        bcrypt.checkpw(password.encode(), DUMMY_HASH)
        return False
    try:
        return bcrypt.checkpw(password.encode(), stored.encode())
    except ValueError:
        # Stored value is not a bcrypt hash (e.g., seeded before hashing was on)
        return False


def set_auth_cookie(response: Response, token: str) -> None:
    """Set httpOnly session cookie carrying the bearer token.

    Security: httpOnly prevents XSS cookie theft. Secure flag and SameSite
    are configured via settings for environment-appropriate security.

    Args:
        response: FastAPI response object.
        token: Opaque token string.
    """
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite=settings.auth_cookie_samesite,
        path="/",
        max_age=settings.auth_token_ttl_hours * 3600,
        domain=settings.auth_cookie_domain or None,
    )


def clear_auth_cookie(response: Response) -> None:
    """Remove the session cookie."""
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        domain=settings.auth_cookie_domain or None,
        secure=settings.auth_cookie_secure,
        httponly=True,
        samesite=settings.auth_cookie_samesite,
    )
