"""Data models for version classification."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Classification(Enum):
    """Status of a package across the source marketplace and the mirror."""
    NOT_IN_SOURCE = "notInSource"
    NOT_IN_MIRROR = "notInMirror"
    UP_TO_DATE = "upToDate"
    OUTDATED = "outdated"
    UNSTABLE = "unstable"  # mirror is ahead of the source marketplace


@dataclass(frozen=True)
class VersionStat:
    """Per-package figures recorded next to a classification."""
    source_installs: Optional[int]
    source_version: Optional[str]
    mirror_version: Optional[str]
    days_in_between: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "sourceInstalls": self.source_installs,
            "sourceVersion": self.source_version,
            "mirrorVersion": self.mirror_version,
            "daysInBetween": self.days_in_between,
        }
