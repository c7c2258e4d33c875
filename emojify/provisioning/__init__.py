"""Provisioning module - first-run download of the reference data."""

from .cldr_archive import CLDRArchiveFetcher

__all__ = ["CLDRArchiveFetcher"]
