"""Type definitions and enums for emojify."""

from enum import Enum


class ReplyStatus(str, Enum):
    """Outcome carried by a lookup reply."""

    OK = "ok"                                   # Resolved to a symbol
    UNRESOLVED = "unresolved"                   # No match, value is a placeholder
    SOURCE_UNAVAILABLE = "source_unavailable"   # Reference table unreadable
    STOPPED = "stopped"                         # Lookup service has shut down


class ScannerState(str, Enum):
    """States of the short-code scanner."""

    PASSTHROUGH = "passthrough"
    ACCUMULATING = "accumulating"


# Characters allowed inside a short code
SHORT_CODE_ALPHABET = frozenset("abcdefghijklmnopqrstuvwxyz_-")

DEFAULT_DELIMITER = ":"

# Marker pair wrapped around an unresolved short code
PLACEHOLDER_OPEN = "?"
PLACEHOLDER_CLOSE = "?"
