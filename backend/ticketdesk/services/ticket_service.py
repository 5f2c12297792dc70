"""Owner-scoped ticket CRUD and dashboard statistics.

Every operation takes the authenticated user's id. A ticket is visible
to, and changeable by, only the user recorded as its owner.
"""

import logging
import secrets
from collections import Counter

from ticketdesk.core.config import settings
from ticketdesk.core.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ticketdesk.models import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    Snapshot,
    Ticket,
    TicketStats,
)
from ticketdesk.services.auth_service import Clock, utc_now
from ticketdesk.services.ticket_validation import (
    check_status,
    validate_new_ticket,
    validate_ticket_changes,
)
from ticketdesk.storage import RecordStore

logger = logging.getLogger(__name__)

_STATUS_FILTER_ALL = "all"


def _require_owner(owner_id: str | None) -> str:
    if not owner_id:
        raise UnauthorizedError()
    return owner_id


def _owned_ticket(snapshot: Snapshot, owner_id: str, ticket_id: str) -> Ticket:
    """Find a ticket and check ownership.

    Raises:
        NotFoundError: If no ticket has this id.
        ForbiddenError: If the ticket belongs to another user.
    """
    ticket = snapshot.find_ticket(ticket_id)
    if ticket is None:
        raise NotFoundError("Ticket", ticket_id)
    if ticket.user_id != owner_id:
        logger.warning(
            "Ticket access denied (ticket_id=%s, user_id=%s)", ticket_id, owner_id
        )
        raise ForbiddenError()
    return ticket


def _tickets_word(count: int) -> str:
    return "ticket" if count == 1 else "tickets"


def build_status_summary(stats: TicketStats) -> str:
    """Describe the status counts in one sentence fragment.

    Returns:
        E.g. "2 open tickets, 1 in progress, and 1 resolved ticket",
        or "" when there are no tickets.
    """
    parts = []
    if stats.open:
        parts.append(f"{stats.open} open {_tickets_word(stats.open)}")
    if stats.in_progress:
        parts.append(f"{stats.in_progress} in progress")
    if stats.closed:
        parts.append(f"{stats.closed} resolved {_tickets_word(stats.closed)}")

    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return f"{parts[0]} and {parts[1]}"
    return f"{', '.join(parts[:-1])}, and {parts[-1]}"


class TicketService:
    """Stateless ticket operations over a record store."""

    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        """Initialize the service.

        Args:
            store: Record store holding tickets.
            clock: Returns the current aware UTC time. Injected for tests.
        """
        self._store = store
        self._clock = clock

    def list(self, owner_id: str | None, status: str | None = None) -> list[Ticket]:
        """List the owner's tickets in insertion order.

        Args:
            owner_id: Authenticated user id.
            status: Optional status filter; None or "all" returns every ticket.

        Raises:
            UnauthorizedError: If owner_id is missing.
            ValidationError: If status is not a known status.
        """
        owner_id = _require_owner(owner_id)
        if status == _STATUS_FILTER_ALL:
            status = None
        if status is not None:
            errors: list[dict] = []
            check_status(status, errors, required=True)
            if errors:
                raise ValidationError("Invalid status filter", details=errors)

        with self._store.read() as snapshot:
            return [
                t
                for t in snapshot.tickets
                if t.user_id == owner_id and (status is None or t.status == status)
            ]

    def get(self, owner_id: str | None, ticket_id: str) -> Ticket:
        """Fetch one of the owner's tickets.

        Raises:
            UnauthorizedError: If owner_id is missing.
            NotFoundError: If no ticket has this id.
            ForbiddenError: If the ticket belongs to another user.
        """
        owner_id = _require_owner(owner_id)
        with self._store.read() as snapshot:
            return _owned_ticket(snapshot, owner_id, ticket_id)

    def create(
        self,
        owner_id: str | None,
        title: str | None,
        description: str | None = None,
        status: str | None = None,
        priority: str | None = None,
    ) -> Ticket:
        """Create a ticket owned by owner_id.

        Args:
            owner_id: Authenticated user id.
            title: 3-100 characters after trimming.
            description: Optional, up to 500 characters. Defaults to "".
            status: Required unless settings.require_ticket_status is off,
                in which case it defaults to "open".
            priority: Optional. Defaults to "medium".

        Returns:
            The stored ticket.

        Raises:
            UnauthorizedError: If owner_id is missing.
            ValidationError: If any field is invalid.
        """
        owner_id = _require_owner(owner_id)
        validate_new_ticket(
            title,
            description,
            status,
            priority,
            status_required=settings.require_ticket_status,
        )

        now = self._clock()
        with self._store.transaction() as snapshot:
            existing_ids = {t.id for t in snapshot.tickets}
            ticket_id = secrets.token_hex(4)
            while ticket_id in existing_ids:
                ticket_id = secrets.token_hex(4)

            ticket = Ticket(
                id=ticket_id,
                title=title.strip(),
                description=(description or "").strip(),
                status=status or DEFAULT_STATUS,
                priority=priority or DEFAULT_PRIORITY,
                user_id=owner_id,
                created_at=now,
                updated_at=now,
            )
            snapshot.tickets.append(ticket)

        logger.info("Ticket created (ticket_id=%s, user_id=%s)", ticket.id, owner_id)
        return ticket

    def update(self, owner_id: str | None, ticket_id: str, fields: dict) -> Ticket:
        """Merge fields over an existing ticket.

        updated_at is always refreshed, even if no visible field changes,
        and never moves backwards.

        Args:
            owner_id: Authenticated user id.
            ticket_id: Ticket to update.
            fields: Any of title, description, status, priority.

        Returns:
            The updated ticket.

        Raises:
            UnauthorizedError: If owner_id is missing.
            NotFoundError: If no ticket has this id.
            ForbiddenError: If the ticket belongs to another user.
            ValidationError: If a field is invalid or not updatable.
        """
        owner_id = _require_owner(owner_id)

        with self._store.transaction() as snapshot:
            current = _owned_ticket(snapshot, owner_id, ticket_id)
            validate_ticket_changes(fields)

            changes = dict(fields)
            if "title" in changes:
                changes["title"] = changes["title"].strip()
            if "description" in changes:
                changes["description"] = (changes["description"] or "").strip()
            if "priority" in changes:
                changes["priority"] = changes["priority"] or DEFAULT_PRIORITY
            changes["updated_at"] = max(self._clock(), current.updated_at)

            updated = current.model_copy(update=changes)
            index = snapshot.tickets.index(current)
            snapshot.tickets[index] = updated

        logger.info("Ticket updated (ticket_id=%s, user_id=%s)", ticket_id, owner_id)
        return updated

    def delete(self, owner_id: str | None, ticket_id: str) -> bool:
        """Remove one of the owner's tickets.

        Returns:
            True once removed.

        Raises:
            UnauthorizedError: If owner_id is missing.
            NotFoundError: If no ticket has this id.
            ForbiddenError: If the ticket belongs to another user.
        """
        owner_id = _require_owner(owner_id)
        with self._store.transaction() as snapshot:
            ticket = _owned_ticket(snapshot, owner_id, ticket_id)
            snapshot.tickets.remove(ticket)

        logger.info("Ticket deleted (ticket_id=%s, user_id=%s)", ticket_id, owner_id)
        return True

    def stats(self, owner_id: str | None) -> TicketStats:
        """Count the owner's tickets by status.

        Raises:
            UnauthorizedError: If owner_id is missing.
        """
        tickets = self.list(owner_id)
        counts = Counter(t.status for t in tickets)
        stats = TicketStats(
            total=len(tickets),
            open=counts["open"],
            in_progress=counts["in_progress"],
            closed=counts["closed"],
        )
        stats.summary = build_status_summary(stats)
        return stats
