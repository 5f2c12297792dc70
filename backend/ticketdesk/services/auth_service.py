"""Registration, login, and bearer token validation.

Tokens are opaque random strings stored server-side in the record store,
keyed by token string. A token lives for a fixed TTL from login and is
checked lazily on every use: no refresh, no rotation, no background
sweep.
"""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime

from ticketdesk.core.auth import (
    generate_token,
    hash_password,
    token_expiry,
    validate_registration,
    verify_password,
)
from ticketdesk.core.errors import (
    EmailExistsError,
    InvalidCredentialsError,
    UnauthorizedError,
    ValidationError,
)
from ticketdesk.models import AuthToken, PublicUser, Snapshot, User
from ticketdesk.storage import RecordStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _drop_expired(snapshot: Snapshot, now: datetime) -> int:
    expired = [t for t, rec in snapshot.tokens.items() if rec.is_expired(now)]
    for token in expired:
        del snapshot.tokens[token]
    return len(expired)


class AuthService:
    """Stateless auth operations over a record store.

    Every call works on the store's current snapshot; nothing is cached
    between calls.
    """

    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        """Initialize the service.

        Args:
            store: Record store holding users and tokens.
            clock: Returns the current aware UTC time. Injected for tests.
        """
        self._store = store
        self._clock = clock

    def register(
        self,
        email: str | None,
        password: str | None,
        name: str | None,
        confirm_password: str | None = None,
    ) -> PublicUser:
        """Create a user account.

        Args:
            email: Login email, unique and case-sensitive.
            password: Password (at least 6 characters).
            name: Display name.
            confirm_password: Optional repeat of password.

        Returns:
            The new user without its password.

        Raises:
            ValidationError: If any field is missing or malformed.
            EmailExistsError: If a user with this email already exists.
        """
        validate_registration(email, password, name, confirm_password)

        with self._store.transaction() as snapshot:
            if snapshot.find_user_by_email(email) is not None:
                logger.info("Registration rejected: email already exists")
                raise EmailExistsError()

            existing_ids = {u.id for u in snapshot.users}
            user_id = secrets.token_hex(8)
            while user_id in existing_ids:
                user_id = secrets.token_hex(8)

            user = User(
                id=user_id,
                email=email,
                password=hash_password(password),
                name=name.strip(),
            )
            snapshot.users.append(user)

        logger.info("User registered (user_id=%s)", user.id)
        return user.to_public()

    def login(self, email: str | None, password: str | None) -> AuthToken:
        """Check credentials and mint a bearer token.

        Args:
            email: Login email (exact match).
            password: Password to compare against the stored one.

        Returns:
            The new token, including its expiry and a user snapshot.

        Raises:
            ValidationError: If email or password is missing.
            InvalidCredentialsError: If the email is unknown or the password
                is wrong. Both cases produce the same error.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        now = self._clock()
        with self._store.transaction() as snapshot:
            user = snapshot.find_user_by_email(email)
            stored = user.password if user is not None else None
            if not verify_password(password, stored):
                logger.info("Login failed: invalid credentials")
                raise InvalidCredentialsError()

            token = AuthToken(
                token=generate_token(),
                expires_at=token_expiry(now),
                user=user.to_public(),
            )
            # Dead tokens are swept here so the document does not grow per login
            _drop_expired(snapshot, now)
            snapshot.tokens[token.token] = token

        logger.info("Login succeeded (user_id=%s)", user.id)
        return token

    def _live_token(self, token: str | None) -> AuthToken | None:
        if not token:
            return None
        with self._store.read() as snapshot:
            record = snapshot.tokens.get(token)
        if record is None or record.is_expired(self._clock()):
            return None
        return record

    def validate(self, token: str | None) -> str | None:
        """Resolve a bearer token to a user id.

        Args:
            token: Bearer token string.

        Returns:
            The owning user's id, or None if the token is unknown or its
            expiry is before the current time.
        """
        record = self._live_token(token)
        return record.user.id if record is not None else None

    def authenticate(self, token: str | None) -> AuthToken:
        """Resolve a bearer token to its full record.

        Same rules as validate().

        Raises:
            UnauthorizedError: If the token is missing, unknown, or expired.
        """
        record = self._live_token(token)
        if record is None:
            raise UnauthorizedError()
        return record

    def logout(self, token: str | None) -> bool:
        """Revoke a token server-side.

        Returns:
            True if a stored token was removed.
        """
        if not token:
            return False
        with self._store.transaction() as snapshot:
            removed = snapshot.tokens.pop(token, None)
        if removed is not None:
            logger.info("Logout (user_id=%s)", removed.user.id)
        return removed is not None

    def lookup_by_email(self, email: str) -> list[PublicUser]:
        """Find users by exact email.

        Returns:
            A one-element list with the password-free user, or [].
        """
        with self._store.read() as snapshot:
            user = snapshot.find_user_by_email(email)
        return [user.to_public()] if user is not None else []

    def purge_expired(self) -> int:
        """Delete every expired token.

        Returns:
            Number of tokens removed.
        """
        with self._store.transaction() as snapshot:
            removed = _drop_expired(snapshot, self._clock())
        if removed:
            logger.info("Purged expired tokens (count=%d)", removed)
        return removed
