"""Utility functions."""

from .timestamps import epoch_millis, format_timestamp_for_log, utc_now

__all__ = [
    "utc_now",
    "epoch_millis",
    "format_timestamp_for_log",
]
