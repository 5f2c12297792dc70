"""Ticket model and status/priority vocabularies."""

from datetime import datetime
from typing import Literal, get_args

from ticketdesk.models.base import CamelModel

TicketStatus = Literal["open", "in_progress", "closed"]
TicketPriority = Literal["low", "medium", "high"]

TICKET_STATUSES: tuple[str, ...] = get_args(TicketStatus)
TICKET_PRIORITIES: tuple[str, ...] = get_args(TicketPriority)

DEFAULT_STATUS: TicketStatus = "open"
DEFAULT_PRIORITY: TicketPriority = "medium"


class Ticket(CamelModel):
    """Support ticket owned by exactly one user.

    Attributes:
        id: Short random id, unique within the store.
        title: 3-100 characters.
        description: Up to 500 characters, empty by default.
        status: open, in_progress or closed.
        priority: low, medium or high.
        user_id: Owner. Only this user may see or change the ticket.
        created_at: Creation time, never changes.
        updated_at: Last mutation time.
    """

    id: str
    title: str
    description: str = ""
    status: TicketStatus = DEFAULT_STATUS
    priority: TicketPriority = DEFAULT_PRIORITY
    user_id: str
    created_at: datetime
    updated_at: datetime


class TicketStats(CamelModel):
    """Per-owner status counts for the dashboard.

    open + in_progress + closed always equals total.
    """

    total: int = 0
    open: int = 0
    in_progress: int = 0
    closed: int = 0
    summary: str = ""
