"""Tickets API router.

All endpoints require a valid bearer token and only ever touch the
caller's own tickets. Another user's ticket id yields 403, an unknown
id 404.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, ConfigDict

from ticketdesk.api.deps import CurrentUserId, TicketServiceDep

router = APIRouter()


# =============================================================================
# Request Schemas
# =============================================================================


class CreateTicketRequest(BaseModel):
    """Request body for POST /tickets.

    Field rules (title length, status and priority values) are enforced
    by the ticket service so every failing field is reported together.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None


class UpdateTicketRequest(BaseModel):
    """Request body for PATCH /tickets/{ticket_id}.

    Only supplied fields are merged. id, userId and timestamps are not
    accepted.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None


StatusFilter = Annotated[
    str | None,
    Query(description="Filter by status (open, in_progress, closed, or all)"),
]


# =============================================================================
# Endpoints
# =============================================================================


@router.get("")
async def list_tickets(
    user_id: CurrentUserId,
    tickets: TicketServiceDep,
    status: StatusFilter = None,
) -> list[dict]:
    """List the caller's tickets, optionally filtered by status."""
    return [t.to_json_dict() for t in tickets.list(user_id, status=status)]


@router.post("", status_code=201)
async def create_ticket(
    body: CreateTicketRequest,
    user_id: CurrentUserId,
    tickets: TicketServiceDep,
) -> dict:
    """Create a ticket owned by the caller.

    description defaults to "" and priority to "medium".
    """
    ticket = tickets.create(
        user_id,
        title=body.title,
        description=body.description,
        status=body.status,
        priority=body.priority,
    )
    return ticket.to_json_dict()


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    user_id: CurrentUserId,
    tickets: TicketServiceDep,
) -> dict:
    """Get one of the caller's tickets."""
    return tickets.get(user_id, ticket_id).to_json_dict()


@router.patch("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    body: UpdateTicketRequest,
    user_id: CurrentUserId,
    tickets: TicketServiceDep,
) -> dict:
    """Merge the supplied fields into one of the caller's tickets.

    updatedAt is refreshed on every call.
    """
    ticket = tickets.update(user_id, ticket_id, body.model_dump(exclude_unset=True))
    return ticket.to_json_dict()


@router.delete("/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: str,
    user_id: CurrentUserId,
    tickets: TicketServiceDep,
) -> Response:
    """Delete one of the caller's tickets."""
    tickets.delete(user_id, ticket_id)
    return Response(status_code=204)
