"""Field rules for ticket create and update.

Each check appends {"field", "message"} entries to a shared error list
so one request reports every failing field at once.
"""

from ticketdesk.core.errors import ValidationError
from ticketdesk.models import TICKET_PRIORITIES, TICKET_STATUSES

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

# Fields a caller may change on an existing ticket.
# Never add 'id', 'userId', 'createdAt' or 'updatedAt'.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "status", "priority"}
)


def check_title(title: object, errors: list[dict]) -> None:
    if not isinstance(title, str) or not title.strip():
        errors.append({"field": "title", "message": "Title is required"})
        return
    length = len(title.strip())
    if length < TITLE_MIN_LENGTH:
        errors.append(
            {
                "field": "title",
                "message": f"Title must be at least {TITLE_MIN_LENGTH} characters",
            }
        )
    elif length > TITLE_MAX_LENGTH:
        errors.append(
            {
                "field": "title",
                "message": f"Title must not exceed {TITLE_MAX_LENGTH} characters",
            }
        )


def check_description(description: object, errors: list[dict]) -> None:
    if description is None:
        return
    if not isinstance(description, str):
        errors.append({"field": "description", "message": "Description must be text"})
    elif len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        errors.append(
            {
                "field": "description",
                "message": f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters",
            }
        )


def check_status(status: object, errors: list[dict], *, required: bool) -> None:
    if status is None or status == "":
        if required:
            errors.append({"field": "status", "message": "Status is required"})
        return
    if status not in TICKET_STATUSES:
        errors.append(
            {
                "field": "status",
                "message": f"Status must be one of: {', '.join(TICKET_STATUSES)}",
            }
        )


def check_priority(priority: object, errors: list[dict]) -> None:
    if priority is None or priority == "":
        return
    if priority not in TICKET_PRIORITIES:
        errors.append(
            {
                "field": "priority",
                "message": f"Priority must be one of: {', '.join(TICKET_PRIORITIES)}",
            }
        )


def validate_new_ticket(
    title: object,
    description: object,
    status: object,
    priority: object,
    *,
    status_required: bool,
) -> None:
    """Validate fields for a new ticket.

    Raises:
        ValidationError: With one detail per failing field.
    """
    errors: list[dict] = []
    check_title(title, errors)
    check_description(description, errors)
    check_status(status, errors, required=status_required)
    check_priority(priority, errors)
    if errors:
        raise ValidationError("Ticket validation failed", details=errors)


def validate_ticket_changes(fields: dict) -> None:
    """Validate a partial update.

    Only keys in UPDATABLE_FIELDS are accepted. A supplied title or status
    must be valid; they cannot be cleared.

    Raises:
        ValidationError: With one detail per failing field.
    """
    errors: list[dict] = [
        {"field": key, "message": f"Field '{key}' cannot be updated"}
        for key in sorted(set(fields) - UPDATABLE_FIELDS)
    ]
    if "title" in fields:
        check_title(fields["title"], errors)
    if "description" in fields:
        check_description(fields["description"], errors)
    if "status" in fields:
        check_status(fields["status"], errors, required=True)
    if "priority" in fields:
        check_priority(fields["priority"], errors)
    if errors:
        raise ValidationError("Ticket validation failed", details=errors)
