"""Subscriber set kinds."""

from enum import Enum

from ticket_notifier.store.keys import PROJECT_SUBSCRIBER_SET, TICKET_SUBSCRIBER_SET


class SubscriberSetKind(str, Enum):
    """Global subscriber sets; the value is the Redis key of the set."""

    TICKET_UPDATE = TICKET_SUBSCRIBER_SET
    PROJECT_UPDATE = PROJECT_SUBSCRIBER_SET

    @property
    def set_name(self) -> str:
        return self.value

    @classmethod
    def from_set_name(cls, set_name: str) -> "SubscriberSetKind":
        """Look a kind up by its set name.

        Raises:
            ValueError: If the name is not a global subscriber set
        """
        return cls(set_name)
