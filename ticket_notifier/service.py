"""Composition root wiring the store, queue, resolver, dispatcher and worker."""

from concurrent.futures import Future
from typing import Optional

import redis

from ticket_notifier.config.environment import EnvironmentConfig
from ticket_notifier.config.models import AppConfig
from ticket_notifier.fanout.resolver import FanoutResolver
from ticket_notifier.logging import get_logger
from ticket_notifier.notifications.dispatcher import MailDispatcher
from ticket_notifier.notifications.smtp_client import SMTPClient
from ticket_notifier.store.connection import StoreConnection
from ticket_notifier.store.keys import ticket_subscriber_set
from ticket_notifier.subscriptions.models import SubscriberSetKind
from ticket_notifier.subscriptions.store import SubscriptionStore
from ticket_notifier.subscriptions.sync import MembershipSync
from ticket_notifier.updates.queue import UpdateQueue
from ticket_notifier.worker.models import TickResult
from ticket_notifier.worker.runner import BatchWorker

logger = get_logger(__name__, component="service")


class NotificationPipeline:
    """
    The ticket notification subsystem as one object.

    Exposes the two call-ins used by the rest of the application (enqueue a
    ticket update, change a subscription) plus the worker tick run by the
    scheduler. Built once at startup and passed to whoever needs it.
    """

    def __init__(
        self,
        store: StoreConnection,
        queue: UpdateQueue,
        subscriptions: SubscriptionStore,
        membership_sync: MembershipSync,
        worker: BatchWorker,
    ):
        self.store = store
        self.queue = queue
        self.subscriptions = subscriptions
        self.membership_sync = membership_sync
        self.worker = worker

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        client: Optional[redis.Redis] = None,
        smtp_client: Optional[SMTPClient] = None,
    ) -> "NotificationPipeline":
        """
        Build every component from loaded configuration.

        Args:
            app_config: Validated YAML configuration
            env_config: Validated environment configuration
            client: Pre-built Redis client (tests pass a fakeredis instance)
            smtp_client: Pre-built SMTP client (tests pass one with mock factories)
        """
        store = StoreConnection(
            env_config.redis_url,
            socket_timeout=app_config.store.socket_timeout_seconds,
            client=client,
        )
        queue = UpdateQueue(store.client, job_ttl_seconds=app_config.queue.job_ttl_seconds)
        subscriptions = SubscriptionStore(store.client)
        membership_sync = MembershipSync(subscriptions, max_workers=app_config.sync.max_workers)
        dispatcher = MailDispatcher(
            env_config=env_config,
            email_config=app_config.email,
            smtp_client=smtp_client,
        )
        worker = BatchWorker(
            store=store,
            queue=queue,
            resolver=FanoutResolver(store.client),
            dispatcher=dispatcher,
            batch_size=app_config.queue.batch_size,
            discard_processed_jobs=app_config.queue.discard_processed_jobs,
        )

        logger.info(
            "Notification pipeline initialized",
            extra={
                "event": "services.initialized",
                "batch_size": app_config.queue.batch_size,
                "sync_workers": app_config.sync.max_workers,
            },
        )
        return cls(store, queue, subscriptions, membership_sync, worker)

    def enqueue_ticket_update(
        self,
        ticket_id: int,
        subject: str,
        body: str,
        kind: SubscriberSetKind = SubscriberSetKind.TICKET_UPDATE,
        subscriber_set: Optional[str] = None,
    ) -> str:
        """
        Queue a notification for everyone following ``ticket_id``.

        Returns:
            The job key

        Raises:
            StoreConnectionError: If Redis cannot be reached
        """
        return self.queue.enqueue(
            ticket_id=ticket_id,
            subscriber_set=subscriber_set or ticket_subscriber_set(ticket_id),
            subject=subject,
            body=body,
            kind=kind,
        )

    def subscribe_to_ticket(self, ticket_id: int, address: str, wanted: bool = True) -> bool:
        """Add or remove ``address`` on the ticket's own subscriber set."""
        return self.subscriptions.set_membership(ticket_subscriber_set(ticket_id), address, wanted)

    def set_membership(self, kind: SubscriberSetKind, address: str, wanted: bool) -> Future:
        """Detached update of a global subscriber set; see MembershipSync.submit."""
        return self.membership_sync.submit(kind, address, wanted)

    def run_tick(self) -> TickResult:
        return self.worker.run_tick()

    def close(self) -> None:
        """Wait for pending membership changes, then release the store."""
        self.membership_sync.shutdown(wait=True)
        self.store.close()
