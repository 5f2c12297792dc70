"""Dashboard API router: per-user ticket status counts."""

from fastapi import APIRouter

from ticketdesk.api.deps import CurrentUserId, TicketServiceDep

router = APIRouter()


@router.get("/stats")
async def get_stats(user_id: CurrentUserId, tickets: TicketServiceDep) -> dict:
    """Return {total, open, inProgress, closed, summary} for the caller."""
    return tickets.stats(user_id).to_json_dict()
