"""Short-code scanner.

Streams text one character at a time, copying ordinary characters straight
through and replacing each ``:short_code:`` with the emoji the lookup
service returns for it. Text that only looks like the start of a short code
(``12:30``, ``Note: see``, an unterminated ``:partial``) is written out
unchanged.
"""

import logging
from typing import Iterable, Iterator, TextIO

from .core.models import ReferenceTable, ShortCode
from .core.types import DEFAULT_DELIMITER, SHORT_CODE_ALPHABET, ScannerState
from .lookup.client import LookupClient

logger = logging.getLogger(__name__)


def iter_chars(stream: TextIO) -> Iterator[str]:
    """Yield a text stream one character at a time."""
    return iter(lambda: stream.read(1), "")


class ShortCodeScanner:
    """Finite-state scanner over a character stream."""

    def __init__(
        self,
        client: LookupClient,
        table: ReferenceTable,
        delimiter: str = DEFAULT_DELIMITER,
    ):
        """
        Initialize the scanner.

        Args:
            client: Lookup client used for every complete short code
            table: Reference table passed along with each lookup
            delimiter: Single character opening and closing a short code
        """
        if len(delimiter) != 1 or delimiter in SHORT_CODE_ALPHABET:
            raise ValueError(f"Delimiter must be one non-alphabet character: {delimiter!r}")
        self.client = client
        self.table = table
        self.delimiter = delimiter
        self.state = ScannerState.PASSTHROUGH
        self._buffer: list[str] = []
        self.tokens_seen = 0

    def feed(self, char: str) -> str:
        """
        Consume one character and return the output it produces.

        Raises:
            ReferenceSourceError: If a complete short code cannot be looked up
        """
        if self.state is ScannerState.PASSTHROUGH:
            if char == self.delimiter:
                self._begin()
                return ""
            return char

        if char in SHORT_CODE_ALPHABET:
            self._buffer.append(char)
            return ""

        if char == self.delimiter:
            if not self._buffer:
                # "::" - the first delimiter is plain text, the second opens
                return self.delimiter
            token = ShortCode(text="".join(self._buffer))
            self.state = ScannerState.PASSTHROUGH
            self._buffer = []
            self.tokens_seen += 1
            return self.client.call(token, self.table)

        return self._abandon() + char

    def finish(self) -> str:
        """Flush an unterminated short code at end of stream."""
        if self.state is ScannerState.ACCUMULATING:
            return self._abandon()
        return ""

    def scan(self, chars: Iterable[str]) -> Iterator[str]:
        """Yield output fragments for a character stream."""
        for char in chars:
            out = self.feed(char)
            if out:
                yield out
        tail = self.finish()
        if tail:
            yield tail

    def transform(self, text: str) -> str:
        """Scan a whole string and return the result."""
        return "".join(self.scan(text))

    def run(self, instream: TextIO, outstream: TextIO) -> None:
        """Copy ``instream`` to ``outstream``, substituting short codes."""
        for fragment in self.scan(iter_chars(instream)):
            outstream.write(fragment)
            outstream.flush()
        logger.debug(f"Scanned stream with {self.tokens_seen} short codes")

    def _begin(self) -> None:
        self.state = ScannerState.ACCUMULATING
        self._buffer = []

    def _abandon(self) -> str:
        """Give up on the current candidate and return it verbatim."""
        text = self.delimiter + "".join(self._buffer)
        self.state = ScannerState.PASSTHROUGH
        self._buffer = []
        return text
