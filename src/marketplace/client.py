"""Gallery API client: fetch the latest version of an extension from a marketplace.

The same client serves the source marketplace and the mirror registry; the
only difference is whether prerelease versions are eligible as "latest".
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol

from constants import Constants, Marketplaces, QueryFlags
from common.http_client import post_json
from common.logging_utils import extra_context, is_debug_enabled, Timer
from errors import MarketplaceQueryError

from .models import MarketplaceSnapshot

logger = logging.getLogger(__name__)

DEFAULT_FLAGS = (
    QueryFlags.INCLUDE_STATISTICS.value
    | QueryFlags.INCLUDE_VERSIONS.value
    | QueryFlags.INCLUDE_VERSION_PROPERTIES.value
)

# Gallery filter type for an exact "<publisher>.<name>" lookup
_FILTER_EXTENSION_NAME = 7
_TIME_FORMATS = ("%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ")


class MarketplacePort(Protocol):
    """Capability the orchestrator needs from a marketplace."""

    name: str

    def get_extension(self, extension_id: str, flags: int = DEFAULT_FLAGS) -> Optional[MarketplaceSnapshot]: ...


def is_prerelease_version(properties: Optional[Iterable[Dict[str, Any]]]) -> bool:
    """Check whether version properties mark the version as a prerelease.

    Args:
        properties: Gallery version property list (``[{"key": ..., "value": ...}]``)

    Returns:
        True if the prerelease property is present and set to "true"
    """
    values = [p for p in (properties or []) if p.get("key") == Constants.PRERELEASE_PROPERTY]
    return len(values) > 0 and values[0].get("value") == "true"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a gallery timestamp into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in _TIME_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            logger.warning("Couldn't parse timestamp %s", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _extract_installs(extension: Dict[str, Any]) -> Optional[int]:
    for stat in extension.get("statistics") or []:
        if stat.get("statisticName") == Constants.INSTALL_STATISTIC:
            try:
                return int(stat.get("value"))
            except (TypeError, ValueError):
                return None
    return None


class MarketplaceClient:
    """Lightweight client for the gallery ``extensionquery`` endpoint.

    Transport retries are handled by the shared HTTP helpers; a query that
    still fails surfaces as MarketplaceQueryError.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        include_prerelease: bool = False,
        api_version: Optional[str] = None,
    ):
        """Initialize marketplace client.

        Args:
            name: Marketplace identifier used in logs (e.g. "source", "mirror")
            base_url: Gallery API base URL
            include_prerelease: Whether prerelease versions may be reported as latest
            api_version: Gallery API version (defaults to Constants.GALLERY_API_VERSION)
        """
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.include_prerelease = include_prerelease
        self.api_version = api_version or Constants.GALLERY_API_VERSION

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Accept": f"application/json;api-version={self.api_version}",
            "Content-Type": "application/json",
        }

    def _build_query(self, extension_id: str, flags: int) -> Dict[str, Any]:
        return {
            "filters": [
                {
                    "criteria": [{"filterType": _FILTER_EXTENSION_NAME, "value": extension_id}],
                    "pageNumber": 1,
                    "pageSize": 1,
                }
            ],
            "flags": flags,
        }

    def get_extension(self, extension_id: str, flags: int = DEFAULT_FLAGS) -> Optional[MarketplaceSnapshot]:
        """Fetch the latest known state of an extension.

        Args:
            extension_id: Extension identifier ("<publisher>.<name>")
            flags: Gallery query flags

        Returns:
            MarketplaceSnapshot, or None if the marketplace does not know the extension

        Raises:
            MarketplaceQueryError: If the marketplace could not be queried
        """
        url = f"{self.base_url}/extensionquery"
        with Timer() as t:
            status, _, data = post_json(url, self._build_query(extension_id, flags), headers=self._get_headers())

        if status == 404:
            return None
        if not 200 <= status < 300:
            raise MarketplaceQueryError(self.name, extension_id, f"HTTP status {status}")
        if not isinstance(data, dict):
            raise MarketplaceQueryError(self.name, extension_id, "malformed response body")

        extension = self._first_extension(data)
        if is_debug_enabled(logger):
            logger.debug(
                "Marketplace query done",
                extra=extra_context(
                    event="marketplace_query",
                    component="marketplace",
                    action="get_extension",
                    target=extension_id,
                    marketplace=self.name,
                    outcome="found" if extension else "not_found",
                    duration_ms=t.duration_ms()
                )
            )
        if extension is None:
            return None
        return self._to_snapshot(extension)

    @staticmethod
    def _first_extension(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for result in data.get("results") or []:
            extensions = result.get("extensions") or []
            if extensions:
                return extensions[0]
        return None

    def _pick_version(self, versions: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if self.include_prerelease:
            return versions[0] if versions else None
        for version in versions:
            if not is_prerelease_version(version.get("properties")):
                return version
        return None

    def _to_snapshot(self, extension: Dict[str, Any]) -> MarketplaceSnapshot:
        latest = self._pick_version(extension.get("versions") or [])
        publisher = extension.get("publisher") or {}
        return MarketplaceSnapshot(
            version=latest.get("version") if latest else None,
            last_updated=_parse_timestamp(latest.get("lastUpdated")) if latest else None,
            install_count=_extract_installs(extension),
            publisher_name=publisher.get("publisherName"),
        )


def create_source_client(base_url: Optional[str] = None) -> MarketplaceClient:
    """Client for the authoritative marketplace (prereleases ignored)."""
    return MarketplaceClient(
        Marketplaces.SOURCE.value,
        base_url or Constants.SOURCE_MARKETPLACE_URL,
        include_prerelease=False,
    )


def create_mirror_client(base_url: Optional[str] = None) -> MarketplaceClient:
    """Client for the mirror registry (first listed version is latest)."""
    return MarketplaceClient(
        Marketplaces.MIRROR.value,
        base_url or Constants.MIRROR_MARKETPLACE_URL,
        include_prerelease=True,
    )
