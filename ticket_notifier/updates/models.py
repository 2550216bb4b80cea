"""Notification job records."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

from ticket_notifier.store.exceptions import MalformedJobError
from ticket_notifier.store.keys import TICKET_SUBSCRIBER_SET


class JobField(str, Enum):
    """Field names of a job hash."""

    SUBSCRIBER_SET = "subscriberset"
    SUBJECT = "subject"
    BODY = "body"
    GLOBAL_SET = "globalset"


REQUIRED_FIELDS = (JobField.SUBSCRIBER_SET, JobField.SUBJECT, JobField.BODY)


@dataclass(frozen=True)
class NotificationJob:
    """
    One pending notification.

    Attributes:
        key: Job hash key (ticket:update:<ticket id>:<epoch millis>)
        subscriber_set: Per-ticket subscriber set intersected with the global set
        subject: Mail subject line
        body: Plain-text mail body
        global_set: Global subscriber set the recipients must also belong to
    """

    key: str
    subscriber_set: str
    subject: str
    body: str
    global_set: str = TICKET_SUBSCRIBER_SET

    def to_hash(self) -> Dict[str, str]:
        return {
            JobField.SUBSCRIBER_SET.value: self.subscriber_set,
            JobField.SUBJECT.value: self.subject,
            JobField.BODY.value: self.body,
            JobField.GLOBAL_SET.value: self.global_set,
        }

    @classmethod
    def from_hash(cls, key: str, fields: Optional[Mapping[str, str]]) -> "NotificationJob":
        """
        Build a job from its stored hash.

        Args:
            key: Job hash key
            fields: Result of HGETALL (empty when the hash is gone)

        Raises:
            MalformedJobError: If any required field is absent
        """
        fields = fields or {}
        missing = [field.value for field in REQUIRED_FIELDS if field.value not in fields]
        if missing:
            raise MalformedJobError(key, missing)

        return cls(
            key=key,
            subscriber_set=fields[JobField.SUBSCRIBER_SET.value],
            subject=fields[JobField.SUBJECT.value],
            body=fields[JobField.BODY.value],
            global_set=fields.get(JobField.GLOBAL_SET.value) or TICKET_SUBSCRIBER_SET,
        )
