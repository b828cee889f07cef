"""Ordered KV store backends."""

from .base import OrderedKV
from .disk import Disk
from .memory import Memory

__all__ = ["Disk", "Memory", "OrderedKV"]
