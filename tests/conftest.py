"""Pytest configuration and fixtures for emojify tests."""

from pathlib import Path

import pytest

from emojify.core.exceptions import ReferenceSourceError, ShortCodeNotFoundError
from emojify.core.models import ReferenceTable
from emojify.lookup import LookupClient, LookupService
from emojify.scanner import ShortCodeScanner

ANNOTATIONS_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<ldml>
    <identity>
        <version number="$Revision$"/>
        <language type="en"/>
    </identity>
    <annotations>
        <annotation cp="👋">hand | wave | waving</annotation>
        <annotation cp="👋" type="tts">waving hand</annotation>
        <annotation cp="👍">+1 | hand | thumb | thumbs up | up</annotation>
        <annotation cp="👍" type="tts">thumbs up</annotation>
        <annotation cp="💙">blue | blue heart</annotation>
        <annotation cp="💙" type="tts">blue heart</annotation>
        <annotation cp="🚀">launch | rocket | space</annotation>
        <annotation cp="🚀" type="tts">rocket</annotation>
        <annotation cp="🦖">T-Rex | Tyrannosaurus Rex</annotation>
        <annotation cp="🦖" type="tts">T-Rex</annotation>
    </annotations>
</ldml>
"""

DERIVED_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<ldml>
    <identity>
        <version number="$Revision$"/>
        <language type="en"/>
    </identity>
    <annotations>
        <annotation cp="👩‍💻">coder | technologist | woman</annotation>
        <annotation cp="👩‍💻" type="tts">woman technologist</annotation>
    </annotations>
</ldml>
"""


class FakeResolver:
    """Resolver test double that counts every call."""

    def __init__(self, symbols: dict[str, str] | None = None, broken: bool = False):
        self.symbols = symbols or {}
        self.broken = broken
        self.calls: list[str] = []

    def resolve(self, description: str, table: ReferenceTable) -> str:
        self.calls.append(description)
        if self.broken:
            raise ReferenceSourceError(str(table.primary), "Cannot read reference table")
        if description not in self.symbols:
            raise ShortCodeNotFoundError(description)
        return self.symbols[description]


def write_common_tree(root: Path) -> Path:
    """Write annotation tables laid out like CLDR's common/ directory."""
    (root / "annotations").mkdir(parents=True)
    (root / "annotationsDerived").mkdir(parents=True)
    (root / "annotations" / "en.xml").write_text(ANNOTATIONS_XML, encoding="utf-8")
    (root / "annotationsDerived" / "en.xml").write_text(DERIVED_XML, encoding="utf-8")
    return root


@pytest.fixture
def common_dir(tmp_path: Path) -> Path:
    """Directory with annotations/en.xml and annotationsDerived/en.xml."""
    return write_common_tree(tmp_path / "common")


@pytest.fixture
def reference_table(common_dir: Path) -> ReferenceTable:
    return ReferenceTable.in_directory(common_dir, "en")


@pytest.fixture
def fake_resolver() -> FakeResolver:
    """Resolver knowing a handful of descriptions."""
    return FakeResolver(
        {
            "wave": "👋",
            "thumbs up": "👍",
            "rocket": "🚀",
        }
    )


@pytest.fixture
def lookup_service(fake_resolver: FakeResolver):
    """Running lookup service backed by the fake resolver."""
    service = LookupService(fake_resolver).start()
    yield service
    service.stop()


@pytest.fixture
def lookup_client(lookup_service: LookupService) -> LookupClient:
    return LookupClient(lookup_service.channel)


@pytest.fixture
def scanner(lookup_client: LookupClient, reference_table: ReferenceTable) -> ShortCodeScanner:
    return ShortCodeScanner(lookup_client, reference_table)
