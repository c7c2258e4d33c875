"""Lookup module - memoizing lookup service and its client."""

from .channel import LookupChannel
from .client import LookupClient
from .service import CacheStats, LookupService

__all__ = ["CacheStats", "LookupChannel", "LookupClient", "LookupService"]
