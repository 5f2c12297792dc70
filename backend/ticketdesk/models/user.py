"""User and auth token models."""

from datetime import datetime

from ticketdesk.models.base import CamelModel


class PublicUser(CamelModel):
    """User fields safe to return to callers (never the password).

    Attributes:
        id: User id.
        email: Login email, compared case-sensitively.
        name: Display name.
    """

    id: str
    email: str
    name: str


class User(PublicUser):
    """Stored user record.

    Attributes:
        password: Plaintext password, or a bcrypt hash when hashing is enabled.
    """

    password: str

    def to_public(self) -> PublicUser:
        """Project to the password-free view."""
        return PublicUser(id=self.id, email=self.email, name=self.name)


class AuthToken(CamelModel):
    """Opaque bearer token minted at login.

    Attributes:
        token: Random opaque string.
        expires_at: Absolute expiry (creation time + TTL).
        user: Snapshot of the user at login time. Not refreshed if the
            user record changes later.
    """

    token: str
    expires_at: datetime
    user: PublicUser

    def is_expired(self, now: datetime) -> bool:
        """Return True once expires_at is strictly before now."""
        return self.expires_at < now
