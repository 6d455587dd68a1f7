"""KV storage backends."""

from .base import KVStore
from .files import Files
from .memory import Memory

__all__ = ["Files", "KVStore", "Memory"]
