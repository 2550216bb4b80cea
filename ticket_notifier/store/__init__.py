"""Redis-backed storage for the update queue and subscriber sets.

Public API:
    - StoreConnection: owns the Redis client, ping()/close()
    - translate_store_errors: maps redis-py errors to store errors
    - Key layout constants and templates (TICKET_UPDATES_QUEUE, ...)
    - StoreError, StoreConnectionError, StoreDataError, MalformedJobError
"""

from .connection import StoreConnection, redact_url, translate_store_errors
from .exceptions import MalformedJobError, StoreConnectionError, StoreDataError, StoreError
from .keys import (
    PROJECT_SUBSCRIBER_SET,
    TICKET_SUBSCRIBER_SET,
    TICKET_UPDATES_QUEUE,
    ticket_subscriber_set,
    ticket_update_key,
)

__all__ = [
    # Connection
    "StoreConnection",
    "translate_store_errors",
    "redact_url",
    # Keys
    "TICKET_UPDATES_QUEUE",
    "TICKET_SUBSCRIBER_SET",
    "PROJECT_SUBSCRIBER_SET",
    "ticket_subscriber_set",
    "ticket_update_key",
    # Exceptions
    "StoreError",
    "StoreConnectionError",
    "StoreDataError",
    "MalformedJobError",
]
