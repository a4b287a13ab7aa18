"""Version parsing and cross-marketplace classification."""

from .models import Classification, VersionStat
from .classifier import classify, days_between, is_recently_updated
from .parser import parse_version, versions_equal

__all__ = [
    "Classification",
    "VersionStat",
    "classify",
    "days_between",
    "is_recently_updated",
    "parse_version",
    "versions_equal",
]
