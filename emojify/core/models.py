"""Pydantic data models for emojify.

All messages exchanged between the scanner and the lookup service are
immutable (frozen) so they can be handed across threads without copying.
"""

from pathlib import Path

from pydantic import BaseModel, field_validator

from .exceptions import InvalidShortCodeError
from .types import (
    PLACEHOLDER_CLOSE,
    PLACEHOLDER_OPEN,
    SHORT_CODE_ALPHABET,
    ReplyStatus,
)


def _check_short_code(text: str) -> str | None:
    """Return the reason ``text`` is not a short code, or None if it is."""
    if not text:
        return "short code is empty"
    bad = sorted(set(text) - SHORT_CODE_ALPHABET)
    if bad:
        return f"characters outside [a-z_-]: {''.join(bad)}"
    return None


class ShortCode(BaseModel):
    """A short code as written between delimiters, e.g. ``blue_heart``."""

    text: str

    model_config = {"frozen": True}

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        reason = _check_short_code(v)
        if reason:
            raise ValueError(reason)
        return v

    @classmethod
    def parse(cls, text: str) -> "ShortCode":
        """
        Build a ShortCode, raising the project's own error on bad input.

        Raises:
            InvalidShortCodeError: If text is empty or outside the alphabet
        """
        reason = _check_short_code(text)
        if reason:
            raise InvalidShortCodeError(text, reason)
        return cls(text=text)

    @property
    def description(self) -> str:
        """Canonical lookup form: underscores become spaces."""
        return self.text.replace("_", " ")

    @property
    def placeholder(self) -> str:
        """Rendering used when the short code cannot be resolved."""
        return f"{PLACEHOLDER_OPEN}{self.text}{PLACEHOLDER_CLOSE}"

    def __str__(self) -> str:
        return self.text


class ReferenceTable(BaseModel):
    """The annotation files a lookup should consult, in order.

    ``primary`` must be readable; ``supplements`` (e.g. derived annotations
    for skin tones and flags) are consulted after it and may be absent.
    """

    primary: Path
    supplements: tuple[Path, ...] = ()
    locale: str = "en"

    model_config = {"frozen": True}

    @property
    def paths(self) -> tuple[Path, ...]:
        return (self.primary, *self.supplements)

    @classmethod
    def in_directory(cls, root: Path, locale: str = "en") -> "ReferenceTable":
        """Table laid out the way CLDR's ``common/`` tree stores annotations."""
        return cls(
            primary=root / "annotations" / f"{locale}.xml",
            supplements=(root / "annotationsDerived" / f"{locale}.xml",),
            locale=locale,
        )


class LookupRequest(BaseModel):
    """Request sent from the scanner to the lookup service."""

    token: ShortCode
    context: ReferenceTable

    model_config = {"frozen": True}


class LookupReply(BaseModel):
    """Reply sent from the lookup service back to the scanner."""

    status: ReplyStatus
    value: str = ""

    model_config = {"frozen": True}
