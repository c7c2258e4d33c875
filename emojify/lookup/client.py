"""Synchronous client for the lookup service."""

import logging
import queue

from ..core.exceptions import LookupServiceStoppedError, ReferenceSourceError
from ..core.models import LookupReply, LookupRequest, ReferenceTable, ShortCode
from ..core.types import ReplyStatus
from .channel import LookupChannel

logger = logging.getLogger(__name__)


class LookupClient:
    """
    Call-and-wait interface over a lookup channel.

    Replies are matched to requests by arrival order, so a client must have
    a single active caller. It does no locking of its own.
    """

    # How often a blocked call re-checks whether the service is gone
    POLL_INTERVAL = 0.1

    def __init__(self, channel: LookupChannel):
        self.channel = channel

    def call(self, token: ShortCode, context: ReferenceTable) -> str:
        """
        Look up a short code.

        Args:
            token: Short code to resolve
            context: Reference table the resolver should consult

        Returns:
            The emoji, or the short code's placeholder if it has no match

        Raises:
            ReferenceSourceError: If the reference table is unavailable
            LookupServiceStoppedError: If the service is not running
        """
        if not self.channel.is_serving:
            raise LookupServiceStoppedError()

        self.channel.requests.put(LookupRequest(token=token, context=context))
        reply = self._receive()

        if reply.status is ReplyStatus.SOURCE_UNAVAILABLE:
            raise ReferenceSourceError("lookup-service", reply.value)
        if reply.status is ReplyStatus.STOPPED:
            raise LookupServiceStoppedError(reply.value)
        return reply.value

    def _receive(self) -> LookupReply:
        """
        Block for exactly one reply.

        The wait wakes every POLL_INTERVAL only to notice a service that
        stopped without replying; it never consumes more than one reply.
        """
        while True:
            try:
                return self.channel.replies.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                if self.channel.is_closed and self.channel.replies.empty():
                    logger.debug("Lookup service closed while a request was pending")
                    raise LookupServiceStoppedError(
                        "Lookup service stopped while a request was pending"
                    )
