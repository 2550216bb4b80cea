"""Key-value store exceptions.

All store exceptions inherit from StoreError so callers on the request path
can catch them with a single except clause.
"""

from typing import Iterable, Optional


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class StoreConnectionError(StoreError):
    """Raised when Redis is unreachable or a command fails at the transport level.

    Examples:
    - Redis is down or the URL points at the wrong host
    - Socket timeout on a command
    - Authentication rejected
    """

    pass


class MalformedJobError(StoreError):
    """Raised when a popped job hash lacks one of its required fields.

    The job has already been removed from the queue, so it is lost; the worker
    records it as failed and moves on.
    """

    def __init__(self, job_key: str, missing_fields: Iterable[str], message: Optional[str] = None):
        self.job_key = job_key
        self.missing_fields = sorted(missing_fields)
        super().__init__(
            message
            or f"Job '{job_key}' is missing required field(s): {', '.join(self.missing_fields)}"
        )


class StoreDataError(StoreError):
    """Raised when Redis answers but rejects a command against the data it holds.

    Examples:
    - WRONGTYPE: a job key holds a string instead of a hash
    - A job's subscriber set names a key that is not a set

    The connection is fine, so only the job touching that key is affected.
    """

    pass
