"""Request/reply channel pair linking the scanner and the lookup service."""

import queue
import threading
from dataclasses import dataclass, field
from typing import Optional

from ..core.models import LookupReply, LookupRequest


@dataclass
class LookupChannel:
    """
    Two ordered, blocking queues forming one duplex link.

    ``requests`` flows scanner -> service and carries ``None`` as the
    close signal. ``replies`` flows service -> scanner. ``serving`` is set when
    the service starts and ``closed`` once it has stopped serving.
    """

    requests: "queue.Queue[Optional[LookupRequest]]" = field(default_factory=queue.Queue)
    replies: "queue.Queue[LookupReply]" = field(default_factory=queue.Queue)
    serving: threading.Event = field(default_factory=threading.Event)
    closed: threading.Event = field(default_factory=threading.Event)

    def close(self) -> None:
        """Ask the service to stop after the requests already queued."""
        self.requests.put(None)

    @property
    def is_serving(self) -> bool:
        return self.serving.is_set() and not self.closed.is_set()

    @property
    def is_closed(self) -> bool:
        return self.closed.is_set()
