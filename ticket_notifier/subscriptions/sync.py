"""Detached subscriber-set updates driven by preference changes.

Saving notification preferences must not wait on, or fail because of, the
store. Each membership change is submitted to a background executor; its
failure is logged and reported through the returned future, never raised to
the caller. Failed changes are not retried, so the stored preference and the
set membership can drift until the user saves again.
"""

import contextvars
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List

from ticket_notifier.logging import get_logger
from ticket_notifier.store.exceptions import StoreError

from .models import SubscriberSetKind
from .store import SubscriptionStore

logger = get_logger(__name__, component="subscriptions")


class MembershipSync:
    """Background executor for fire-and-forget membership changes."""

    def __init__(self, store: SubscriptionStore, max_workers: int = 4):
        self.store = store
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="membership-sync",
        )

    def submit(self, kind: SubscriberSetKind, address: str, wanted: bool) -> Future:
        """
        Schedule a membership change without waiting for it.

        Args:
            kind: Global subscriber set to update
            address: Subscriber address
            wanted: True to subscribe, False to unsubscribe

        Returns:
            Future resolving to True when applied, False when the store failed

        Raises:
            RuntimeError: If the sync has been shut down
        """
        kind = SubscriberSetKind(kind)
        context = contextvars.copy_context()
        return self._executor.submit(context.run, self._apply, kind, address, wanted)

    def apply_preferences(
        self, address: str, ticket_updates: bool, project_updates: bool
    ) -> List[Future]:
        """Mirror a user's saved preferences onto both global sets."""
        return [
            self.submit(SubscriberSetKind.TICKET_UPDATE, address, ticket_updates),
            self.submit(SubscriberSetKind.PROJECT_UPDATE, address, project_updates),
        ]

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for queued changes."""
        self._executor.shutdown(wait=wait)

    def _apply(self, kind: SubscriberSetKind, address: str, wanted: bool) -> bool:
        try:
            self.store.set_kind_membership(kind, address, wanted)
        except (StoreError, ValueError) as e:
            logger.error(
                f"Subscriber set update failed for {kind.set_name}: {e}",
                extra={
                    "event": "subscription.sync.failed",
                    "set_name": kind.set_name,
                    "wanted": wanted,
                    "error_type": type(e).__name__,
                },
            )
            return False

        logger.info(
            f"Subscriber set {kind.set_name} updated",
            extra={
                "event": "subscription.sync.applied",
                "set_name": kind.set_name,
                "wanted": wanted,
            },
        )
        return True
