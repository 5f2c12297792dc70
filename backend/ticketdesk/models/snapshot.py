"""Whole-document snapshot of everything the record store holds."""

import logging

from pydantic import BaseModel, Field, PrivateAttr
from pydantic import ValidationError as PydanticValidationError

from ticketdesk.models.base import CamelModel
from ticketdesk.models.ticket import Ticket
from ticketdesk.models.user import AuthToken, User

logger = logging.getLogger(__name__)


def _parse_records(
    section: str, raw_records: object, model: type[CamelModel]
) -> tuple[list, list]:
    """Validate records one at a time.

    Returns:
        (parsed models, raw records that failed validation).

    Raises:
        TypeError: If the section is not a list.
    """
    if raw_records is None:
        return [], []
    if not isinstance(raw_records, list):
        raise TypeError(f"Section '{section}' must be a list")

    parsed, unparsed = [], []
    for index, raw in enumerate(raw_records):
        try:
            parsed.append(model.model_validate(raw))
        except PydanticValidationError:
            logger.warning(
                "Skipping unreadable record (section=%s, index=%d)", section, index
            )
            unparsed.append(raw)
    return parsed, unparsed


class Snapshot(BaseModel):
    """Users, tickets and live auth tokens, loaded and saved as one unit.

    Tokens are keyed by token string in memory; the stored document keeps
    them as a list under auth.tokens.

    Records that do not match their model are kept aside as raw dicts and
    written back unchanged, so one malformed row never erases the others.
    """

    users: list[User] = Field(default_factory=list)
    tickets: list[Ticket] = Field(default_factory=list)
    tokens: dict[str, AuthToken] = Field(default_factory=dict)

    _unparsed: dict[str, list] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_document(cls, document: dict) -> "Snapshot":
        """Build a snapshot from the stored JSON document.

        Missing sections load as empty. Individual malformed records are
        skipped and preserved.

        Raises:
            TypeError: If the document or a section has the wrong shape.
        """
        if not isinstance(document, dict):
            raise TypeError("Document must be a JSON object")

        auth = document.get("auth") or {}
        if not isinstance(auth, dict):
            raise TypeError("Section 'auth' must be an object")

        users, bad_users = _parse_records("users", document.get("users"), User)
        tickets, bad_tickets = _parse_records(
            "tickets", document.get("tickets"), Ticket
        )
        tokens, bad_tokens = _parse_records(
            "auth.tokens", auth.get("tokens"), AuthToken
        )

        snapshot = cls(users=users, tickets=tickets, tokens={t.token: t for t in tokens})
        snapshot._unparsed = {
            "users": bad_users,
            "tickets": bad_tickets,
            "tokens": bad_tokens,
        }
        return snapshot

    @property
    def unparsed_count(self) -> int:
        """Number of stored records that failed validation on load."""
        return sum(len(records) for records in self._unparsed.values())

    def to_document(self) -> dict:
        """Serialize to the stored layout {users, tickets, auth: {tokens}}."""
        unparsed = self._unparsed
        return {
            "users": [u.to_json_dict() for u in self.users] + unparsed.get("users", []),
            "tickets": [t.to_json_dict() for t in self.tickets]
            + unparsed.get("tickets", []),
            "auth": {
                "tokens": [t.to_json_dict() for t in self.tokens.values()]
                + unparsed.get("tokens", [])
            },
        }

    def find_user_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive email match."""
        return next((u for u in self.users if u.email == email), None)

    def find_ticket(self, ticket_id: str) -> Ticket | None:
        return next((t for t in self.tickets if t.id == ticket_id), None)
