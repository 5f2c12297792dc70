"""Pydantic models for ticketdesk.

All models are exported from this module for convenient imports:
    from ticketdesk.models import Ticket, User, Snapshot, ...

- base.py: CamelModel (camelCase aliases)
- user.py: PublicUser, User, AuthToken
- ticket.py: Ticket, TicketStats, status and priority vocabularies
- snapshot.py: Snapshot (whole-document store contents)
"""

from ticketdesk.models.base import CamelModel
from ticketdesk.models.snapshot import Snapshot
from ticketdesk.models.ticket import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    TICKET_PRIORITIES,
    TICKET_STATUSES,
    Ticket,
    TicketPriority,
    TicketStats,
    TicketStatus,
)
from ticketdesk.models.user import AuthToken, PublicUser, User

__all__ = [
    "DEFAULT_PRIORITY",
    "DEFAULT_STATUS",
    "TICKET_PRIORITIES",
    "TICKET_STATUSES",
    "AuthToken",
    "CamelModel",
    "PublicUser",
    "Snapshot",
    "Ticket",
    "TicketPriority",
    "TicketStats",
    "TicketStatus",
    "User",
]
