"""Memoizing lookup service.

A single long-lived worker thread owns the lookup cache and answers
requests from the channel strictly in arrival order. Because only the
worker ever touches the cache, no locking is needed: correctness rests on
the channel's ordering and blocking semantics alone.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.exceptions import ReferenceSourceError, ShortCodeNotFoundError
from ..core.models import LookupReply, LookupRequest, ReferenceTable
from ..core.types import ReplyStatus
from .channel import LookupChannel

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    """Anything that turns a description into a symbol."""

    def resolve(self, description: str, table: ReferenceTable) -> str: ...


@dataclass
class CacheStats:
    """Counters kept by the lookup service."""

    hits: int = 0
    misses: int = 0
    source_failures: int = 0

    @property
    def requests(self) -> int:
        return self.hits + self.misses + self.source_failures


class LookupService:
    """Serves lookup requests from a channel, memoizing every resolution."""

    THREAD_NAME = "emojify-lookup"

    def __init__(self, resolver: Resolver, channel: Optional[LookupChannel] = None):
        """
        Initialize the lookup service.

        Args:
            resolver: Resolves descriptions on cache misses
            channel: Channel pair to serve; a fresh one is created if omitted
        """
        self.resolver = resolver
        self.channel = channel or LookupChannel()
        self.stats = CacheStats()
        self.error: Optional[BaseException] = None
        self._cache: dict[str, LookupReply] = {}
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def start(self) -> "LookupService":
        """Start the worker thread. A service can be started only once."""
        if self._thread is not None:
            raise RuntimeError("Lookup service already started")
        self.channel.serving.set()
        self._thread = threading.Thread(
            target=self.serve_forever, name=self.THREAD_NAME, daemon=True
        )
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Close the request channel and wait for the worker to finish."""
        if self._thread is None:
            return
        if not self.channel.is_closed:
            self.channel.close()
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"Lookup service did not stop within {timeout}s")

    def __enter__(self) -> "LookupService":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def serve_forever(self) -> None:
        """Receive requests until the channel is closed."""
        logger.debug("Lookup service serving")
        reason = "Lookup service stopped"
        try:
            while True:
                request = self.channel.requests.get()
                if request is None:
                    break
                self.channel.replies.put(self.handle(request))
        except Exception as e:
            self.error = e
            reason = f"Lookup service failed: {e}"
            logger.exception("Lookup service failed")
        finally:
            self.channel.closed.set()
            # Unblocks a caller still waiting for a reply
            self.channel.replies.put(LookupReply(status=ReplyStatus.STOPPED, value=reason))
            logger.debug(
                f"Lookup service stopped: {self.stats.requests} requests, "
                f"{self.stats.hits} hits, {self.stats.misses} misses, "
                f"{self.cache_size} cached"
            )

    def handle(self, request: LookupRequest) -> LookupReply:
        """Answer one request from the cache, resolving on a miss."""
        key = request.token.text
        cached = self._cache.get(key)
        if cached is not None:
            self.stats.hits += 1
            logger.debug(f"Cache hit: {key}")
            return cached

        try:
            symbol = self.resolver.resolve(request.token.description, request.context)
            reply = LookupReply(status=ReplyStatus.OK, value=symbol)
        except ShortCodeNotFoundError:
            logger.debug(f"Unresolved short code: {key}")
            reply = LookupReply(
                status=ReplyStatus.UNRESOLVED, value=request.token.placeholder
            )
        except ReferenceSourceError as e:
            # Never cached
            self.stats.source_failures += 1
            logger.error(f"Reference source unavailable: {e}")
            return LookupReply(status=ReplyStatus.SOURCE_UNAVAILABLE, value=str(e))

        self.stats.misses += 1
        self._cache[key] = reply
        return reply
