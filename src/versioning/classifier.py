"""Classification of a package across the source marketplace and the mirror."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from constants import Constants

from .models import Classification
from .parser import parse_version


def classify(source_version: Optional[str], mirror_version: Optional[str]) -> Classification:
    """Classify a package from its latest source and mirror versions.

    A pure function of its two arguments. Versions that cannot be parsed as
    semantic versions compare by string: equal strings are up to date,
    anything else counts as outdated since the source is authoritative.

    Args:
        source_version: Latest non-prerelease version in the source marketplace
        mirror_version: Latest version in the mirror registry

    Returns:
        Classification for the package
    """
    if not source_version:
        return Classification.NOT_IN_SOURCE
    if not mirror_version:
        return Classification.NOT_IN_MIRROR

    source, mirror = parse_version(source_version), parse_version(mirror_version)
    if source is None or mirror is None:
        if source_version.strip() == mirror_version.strip():
            return Classification.UP_TO_DATE
        return Classification.OUTDATED

    if source == mirror:
        return Classification.UP_TO_DATE
    if source > mirror:
        return Classification.OUTDATED
    return Classification.UNSTABLE


def is_recently_updated(last_updated: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Check whether the source marketplace updated the package recently.

    Args:
        last_updated: Source marketplace last-updated timestamp
        now: Reference time (defaults to current UTC time)

    Returns:
        True if last_updated falls within Constants.RECENTLY_UPDATED_DAYS of now
    """
    if last_updated is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=Constants.RECENTLY_UPDATED_DAYS) <= last_updated


def days_between(source_updated: Optional[datetime], mirror_updated: Optional[datetime]) -> Optional[float]:
    """Days the mirror's last update trails (or leads) the source's."""
    if source_updated is None or mirror_updated is None:
        return None
    return (mirror_updated - source_updated).total_seconds() / (3600 * 24)
