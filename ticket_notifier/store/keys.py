"""Redis key layout shared by producers and the worker."""

# Ordered list of pending job keys (RPUSH on enqueue, LPOP on drain)
TICKET_UPDATES_QUEUE = "ticket:updates"

# Global subscriber sets, one per notification kind
TICKET_SUBSCRIBER_SET = "ticket:subscribers"
PROJECT_SUBSCRIBER_SET = "project:subscribers"

TICKET_SUBSCRIBER_SET_TEMPLATE = "ticket:subscribers:{ticket_id}:"
TICKET_UPDATE_KEY_TEMPLATE = "ticket:update:{ticket_id}:{timestamp_ms}"


def _require_ticket_id(ticket_id: int) -> int:
    if isinstance(ticket_id, bool) or not isinstance(ticket_id, int):
        raise ValueError(f"Ticket id must be an integer, got {ticket_id!r}")
    if ticket_id < 0:
        raise ValueError(f"Ticket id must be non-negative, got {ticket_id}")
    return ticket_id


def ticket_subscriber_set(ticket_id: int) -> str:
    """Name of the per-ticket subscriber set.

    >>> ticket_subscriber_set(42)
    'ticket:subscribers:42:'
    """
    return TICKET_SUBSCRIBER_SET_TEMPLATE.format(ticket_id=_require_ticket_id(ticket_id))


def ticket_update_key(ticket_id: int, timestamp_ms: int) -> str:
    """Job hash key for one update of a ticket.

    >>> ticket_update_key(42, 1700000000000)
    'ticket:update:42:1700000000000'
    """
    return TICKET_UPDATE_KEY_TEMPLATE.format(
        ticket_id=_require_ticket_id(ticket_id),
        timestamp_ms=int(timestamp_ms),
    )
