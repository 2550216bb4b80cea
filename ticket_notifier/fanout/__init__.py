"""Fan-out: expanding one job into its recipients."""

from .resolver import FanoutResolver

__all__ = ["FanoutResolver"]
