"""Recipient resolution by set intersection."""

from typing import List

import redis

from ticket_notifier.logging import get_logger
from ticket_notifier.store.connection import translate_store_errors

logger = get_logger(__name__, component="fanout")


class FanoutResolver:
    """Turns a job's subscriber set into a concrete recipient list.

    A recipient must be opted in globally and associated with the ticket, so
    the result is the intersection of the two sets. A missing or empty
    per-ticket set yields no recipients.
    """

    def __init__(self, client: redis.Redis):
        self.client = client

    def resolve(self, global_set: str, per_ticket_set: str) -> List[str]:
        """
        Addresses present in both sets.

        Args:
            global_set: Global subscriber set (e.g. ticket:subscribers)
            per_ticket_set: Per-ticket subscriber set (e.g. ticket:subscribers:42:)

        Returns:
            Recipients, sorted only to keep logs stable; callers must not
            depend on the order

        Raises:
            StoreDataError: If either key holds something other than a set
            StoreConnectionError: If Redis cannot be reached
        """
        with translate_store_errors("sinter"):
            recipients = self.client.sinter([global_set, per_ticket_set])

        resolved = sorted(recipients)
        logger.debug(
            f"Resolved {len(resolved)} recipient(s) for {per_ticket_set}",
            extra={
                "event": "fanout.resolved",
                "global_set": global_set,
                "per_ticket_set": per_ticket_set,
                "recipient_count": len(resolved),
            },
        )
        return resolved
