"""Data models for upstream source resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ResolutionKind(Enum):
    """How the upstream source was found, in strict priority order."""
    RELEASE_ASSET = "releaseAsset"
    RELEASE_TAG = "releaseTag"
    TAG = "tag"
    LATEST = "latest"
    MATCHED_LATEST = "matchedLatest"
    MATCHED = "matched"


@dataclass(frozen=True)
class SourceHint:
    """What the source marketplace knows about the package."""
    version: str
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class ResolutionDescriptor:
    """Which upstream artifact or commit to republish from.

    ``path`` is the location of a prebuilt artifact (a release asset download
    URL); ``repository`` + ``ref`` name a checkout. At least one of the two
    forms is always present.
    """
    kind: ResolutionKind
    repository: Optional[str] = None
    ref: Optional[str] = None
    path: Optional[str] = None
    version: Optional[str] = None

    def __post_init__(self):
        if not self.path and not (self.repository and self.ref):
            raise ValueError(f"{self.kind.value} resolution needs a path or a repository and ref")

    @property
    def target(self) -> str:
        """The artifact location or ref this resolution points at."""
        return self.path or self.ref or ""

    def summary(self) -> Dict[str, Any]:
        """Report-shaped summary, keyed by the resolution kind."""
        return {self.kind.value: self.target}
