"""Batched email fan-out of ticket updates, backed by Redis."""

__version__ = "0.1.0"
