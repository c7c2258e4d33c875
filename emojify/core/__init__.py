"""Core module - data models, types, configuration and exceptions."""

from .models import (
    LookupReply,
    LookupRequest,
    ReferenceTable,
    ShortCode,
)
from .types import (
    DEFAULT_DELIMITER,
    SHORT_CODE_ALPHABET,
    ReplyStatus,
    ScannerState,
)
from .exceptions import (
    ConfigurationError,
    EmojifyError,
    InvalidShortCodeError,
    LookupServiceStoppedError,
    ProvisioningError,
    ReferenceSourceError,
    ShortCodeNotFoundError,
)

__all__ = [
    # Models
    "LookupReply",
    "LookupRequest",
    "ReferenceTable",
    "ShortCode",
    # Types
    "DEFAULT_DELIMITER",
    "SHORT_CODE_ALPHABET",
    "ReplyStatus",
    "ScannerState",
    # Exceptions
    "ConfigurationError",
    "EmojifyError",
    "InvalidShortCodeError",
    "LookupServiceStoppedError",
    "ProvisioningError",
    "ReferenceSourceError",
    "ShortCodeNotFoundError",
]
