"""Subscriber set membership."""

from typing import Set

import redis

from ticket_notifier.logging import get_logger
from ticket_notifier.store.connection import translate_store_errors

from .models import SubscriberSetKind

logger = get_logger(__name__, component="subscriptions")


class SubscriptionStore:
    """Named sets of subscriber addresses kept in Redis.

    Sets are created by the first add and may drain to empty; an absent set
    reads as empty. Adding a present address or removing an absent one is a
    no-op, never an error.
    """

    def __init__(self, client: redis.Redis):
        self.client = client

    def set_membership(self, set_name: str, address: str, wanted: bool) -> bool:
        """
        Add ``address`` to ``set_name`` when wanted, otherwise remove it.

        Args:
            set_name: Redis key of the subscriber set
            address: Subscriber address (email-like string)
            wanted: True to subscribe, False to unsubscribe

        Returns:
            True if membership changed, False if it already matched

        Raises:
            ValueError: If set_name or address is empty
            StoreConnectionError: If Redis cannot be reached
        """
        _require_text("set_name", set_name)
        _require_text("address", address)

        if wanted:
            with translate_store_errors("sadd"):
                changed = self.client.sadd(set_name, address)
        else:
            with translate_store_errors("srem"):
                changed = self.client.srem(set_name, address)

        logger.debug(
            f"{'Added' if wanted else 'Removed'} {address} {'to' if wanted else 'from'} {set_name}",
            extra={
                "event": "subscription.membership.updated",
                "set_name": set_name,
                "wanted": wanted,
                "changed": bool(changed),
            },
        )
        return bool(changed)

    def set_kind_membership(self, kind: SubscriberSetKind, address: str, wanted: bool) -> bool:
        """set_membership() addressed by global set kind."""
        return self.set_membership(SubscriberSetKind(kind).set_name, address, wanted)

    def members(self, set_name: str) -> Set[str]:
        """
        Snapshot of a set's members.

        Raises:
            StoreConnectionError: If Redis cannot be reached
        """
        _require_text("set_name", set_name)
        with translate_store_errors("smembers"):
            return set(self.client.smembers(set_name))

    def is_member(self, set_name: str, address: str) -> bool:
        _require_text("set_name", set_name)
        with translate_store_errors("sismember"):
            return bool(self.client.sismember(set_name, address))


def _require_text(name: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string, got {value!r}")
