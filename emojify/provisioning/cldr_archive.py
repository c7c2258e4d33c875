"""
CLDR annotations provisioning.

On first use, downloads the latest CLDR "common" release archive from the
GitHub release feed and unpacks its annotation tables into the state
directory:

    <state_dir>/cldr/annotations/<locale>.xml
    <state_dir>/cldr/annotationsDerived/<locale>.xml
    <state_dir>/cldr/release.json

Only the ``common/annotations*`` members are extracted; the rest of the
archive is discarded.
"""

import json
import logging
import os
import re
import tempfile
import zipfile
import zlib
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Optional

import httpx

from ..core.config import EmojifyConfig
from ..core.exceptions import ProvisioningError
from ..core.models import ReferenceTable

logger = logging.getLogger(__name__)

# Matches e.g. common/annotations/en.xml and common/annotationsDerived/de_CH.xml
ANNOTATION_MEMBER = re.compile(
    r"(?:^|/)common/(annotations|annotationsDerived)/([^/]+\.xml)$"
)

RELEASE_MARKER = "release.json"


class CLDRArchiveFetcher:
    """Fetches and unpacks CLDR annotation tables."""

    def __init__(
        self,
        config: EmojifyConfig,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            config: Supplies state directory, release feed and timeouts
            client: Optional preconfigured HTTP client (used as-is, not closed)
        """
        self.config = config
        self.client = client
        self.root = config.reference_root

    def table(self, locale: Optional[str] = None) -> ReferenceTable:
        """Reference table for a locale inside the state directory."""
        return ReferenceTable.in_directory(self.root, locale or self.config.locale)

    def is_installed(self, locale: Optional[str] = None) -> bool:
        return self.table(locale).primary.is_file()

    def ensure(self, locale: Optional[str] = None, force: bool = False) -> ReferenceTable:
        """
        Return the locale's reference table, downloading it if absent.

        Raises:
            ProvisioningError: If the data is absent and cannot be fetched
        """
        table = self.table(locale)
        if table.primary.is_file() and not force:
            logger.debug(f"Reference table present: {table.primary}")
            return table

        self.download()
        if not table.primary.is_file():
            raise ProvisioningError(
                f"Archive has no annotations for locale '{table.locale}'"
            )
        return table

    def installed_release(self) -> Optional[dict[str, Any]]:
        """Metadata of the release last unpacked, if any."""
        marker = self.root / RELEASE_MARKER
        if not marker.is_file():
            return None
        try:
            with open(marker, "r", encoding="utf-8") as f:
                release = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable release marker {marker}: {e}")
            return None
        return release if isinstance(release, dict) else None

    def download(self) -> list[Path]:
        """
        Download the latest release archive and unpack its annotations.

        Returns:
            Paths of the extracted files

        Raises:
            ProvisioningError: On HTTP failure, missing asset or bad archive
        """
        self.root.mkdir(parents=True, exist_ok=True)
        context = nullcontext(self.client) if self.client is not None else self._new_client()
        with context as client:
            release = self._latest_release(client)
            asset = self._pick_asset(release)
            url = asset["browser_download_url"]
            logger.info(f"Downloading {asset['name']} ({release.get('tag_name', '?')})")

            fd, tmp_name = tempfile.mkstemp(suffix=".zip", dir=self.root)
            archive = Path(tmp_name)
            try:
                with os.fdopen(fd, "wb") as out:
                    self._stream_to(client, url, out)
                extracted = self._extract(archive, url)
            finally:
                archive.unlink(missing_ok=True)

        self._write_marker(release, asset)
        logger.info(f"Unpacked {len(extracted)} annotation tables to {self.root}")
        return extracted

    def _new_client(self) -> httpx.Client:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "emojify",
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return httpx.Client(
            timeout=self.config.http_timeout,
            headers=headers,
            follow_redirects=True,
        )

    def _latest_release(self, client: httpx.Client) -> dict[str, Any]:
        """Fetch the release feed entry."""
        url = self.config.release_feed_url
        try:
            response = client.get(url)
            response.raise_for_status()
            release = response.json()
        except httpx.HTTPStatusError as e:
            raise ProvisioningError(
                f"HTTP {e.response.status_code} from release feed",
                url=url,
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise ProvisioningError(str(e), url=url)
        except ValueError as e:
            raise ProvisioningError(f"Release feed is not JSON: {e}", url=url)

        if not isinstance(release, dict):
            raise ProvisioningError(
                f"Release feed returned {type(release).__name__}, expected an object",
                url=url,
            )
        return release

    def _pick_asset(self, release: dict[str, Any]) -> dict[str, Any]:
        """Return the first asset whose name matches the configured pattern."""
        pattern = re.compile(self.config.asset_pattern)
        assets = release.get("assets")
        for asset in assets if isinstance(assets, list) else []:
            if not isinstance(asset, dict):
                continue
            if pattern.search(asset.get("name", "")) and asset.get("browser_download_url"):
                return asset
        raise ProvisioningError(
            f"No asset matching {self.config.asset_pattern!r} in release "
            f"{release.get('tag_name', '?')}",
            url=self.config.release_feed_url,
        )

    def _stream_to(self, client: httpx.Client, url: str, out) -> None:
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    out.write(chunk)
        except httpx.HTTPStatusError as e:
            raise ProvisioningError(
                f"HTTP {e.response.status_code} downloading archive",
                url=url,
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise ProvisioningError(str(e), url=url)

    def _extract(self, archive: Path, url: str) -> list[Path]:
        """Unpack annotation members, replacing each target atomically."""
        extracted = []
        try:
            with zipfile.ZipFile(archive) as zf:
                for name in zf.namelist():
                    match = ANNOTATION_MEMBER.search(name)
                    if not match:
                        continue
                    group, filename = match.groups()
                    target = self.root / group / filename
                    target.parent.mkdir(parents=True, exist_ok=True)
                    tmp = target.with_name(target.name + ".part")
                    try:
                        with zf.open(name) as src, open(tmp, "wb") as dst:
                            dst.write(src.read())
                        os.replace(tmp, target)
                    finally:
                        tmp.unlink(missing_ok=True)
                    extracted.append(target)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise ProvisioningError(f"Invalid ZIP archive: {e}", url=url)
        except OSError as e:
            raise ProvisioningError(f"Cannot unpack archive: {e}", url=url)

        if not extracted:
            raise ProvisioningError("Archive contains no annotation tables", url=url)
        return extracted

    def _write_marker(self, release: dict[str, Any], asset: dict[str, Any]) -> None:
        marker = {
            "tag_name": release.get("tag_name"),
            "asset": asset.get("name"),
            "url": asset.get("browser_download_url"),
        }
        with open(self.root / RELEASE_MARKER, "w", encoding="utf-8") as f:
            json.dump(marker, f, indent=2)
