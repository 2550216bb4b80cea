"""Subscriber sets and their maintenance."""

from .models import SubscriberSetKind
from .store import SubscriptionStore
from .sync import MembershipSync

__all__ = [
    "SubscriberSetKind",
    "SubscriptionStore",
    "MembershipSync",
]
