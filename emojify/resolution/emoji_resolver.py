"""Emoji resolution - resolves a short-code description to an emoji.

The reference table is a CLDR annotations document. Each emoji carries a
text-to-speech name, e.g.::

    <annotation cp="👋" type="tts">waving hand</annotation>

A description resolves to the ``cp`` of the first tts annotation whose text
matches it after normalization. The resolver keeps no state: every call
streams the files again, so callers that look up the same description
repeatedly are expected to memoize (see ``emojify.lookup``).
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from ..core.exceptions import ReferenceSourceError, ShortCodeNotFoundError
from ..core.models import ReferenceTable

logger = logging.getLogger(__name__)


def normalize_description(text: str) -> str:
    """Case-fold and collapse whitespace so descriptions compare exactly."""
    return " ".join(text.split()).casefold()


class EmojiResolver:
    """Looks up emoji by tts description in CLDR annotation files."""

    ANNOTATION_TAG = "annotation"
    TTS_TYPE = "tts"

    def resolve(self, description: str, table: ReferenceTable) -> str:
        """
        Resolve a description to its emoji.

        Args:
            description: Spoken description, e.g. "thumbs up"
            table: Annotation files to consult, in order

        Returns:
            The emoji string

        Raises:
            ShortCodeNotFoundError: If no file has a matching tts annotation
            ReferenceSourceError: If the primary file is unreadable or any
                file is malformed
        """
        wanted = normalize_description(description)
        if not wanted:
            raise ShortCodeNotFoundError(description)

        checked = []
        for path in table.paths:
            if path != table.primary and not path.exists():
                logger.debug(f"Skipping missing supplementary table: {path}")
                continue
            checked.append(path.name)
            symbol = self._search(path, wanted)
            if symbol is not None:
                logger.debug(f"Resolved '{description}' -> {symbol} ({path.name})")
                return symbol

        raise ShortCodeNotFoundError(description, tables_checked=checked)

    def _search(self, path: Path, wanted: str) -> str | None:
        """Stream one annotation file, stopping at the first match."""
        try:
            for _, elem in ET.iterparse(path, events=("end",)):
                if (
                    elem.tag == self.ANNOTATION_TAG
                    and elem.get("type") == self.TTS_TYPE
                    and normalize_description(elem.text or "") == wanted
                ):
                    cp = elem.get("cp")
                    if cp:
                        return cp
                elem.clear()
        except ET.ParseError as e:
            raise ReferenceSourceError(str(path), f"Malformed reference table: {e}")
        except OSError as e:
            raise ReferenceSourceError(str(path), f"Cannot read reference table: {e}")
        return None
