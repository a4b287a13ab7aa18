"""Data models for the publish step."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from resolution.models import ResolutionDescriptor, ResolutionKind


class ExecutionStatus(Enum):
    """How a bounded publish run ended."""
    SUCCESS = "success"
    FAILURE = "failure"
    TIMED_OUT = "timedOut"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of TaskExecutor.run_bounded."""
    status: ExecutionStatus
    reason: Optional[str] = None
    returncode: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is ExecutionStatus.SUCCESS


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class PublishContext:
    """Everything the publish step needs to know beyond the package config."""
    source_version: Optional[str] = None
    source_last_updated: Optional[datetime] = None
    source_installs: Optional[int] = None
    source_publisher: Optional[str] = None
    mirror_version: Optional[str] = None
    mirror_last_updated: Optional[datetime] = None
    version: Optional[str] = None
    file: Optional[str] = None
    repo: Optional[str] = None
    ref: Optional[str] = None

    def apply_resolution(self, descriptor: ResolutionDescriptor) -> None:
        """Point the publish step at the resolved artifact or commit."""
        self.version = descriptor.version
        if descriptor.kind is ResolutionKind.RELEASE_ASSET:
            self.file = descriptor.path
        else:
            self.repo = descriptor.repository
            self.ref = descriptor.ref

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON layout consumed by the publish step."""
        data = {
            "sourceVersion": self.source_version,
            "sourceLastUpdated": _iso(self.source_last_updated),
            "sourceInstalls": self.source_installs,
            "sourcePublisher": self.source_publisher,
            "mirrorVersion": self.mirror_version,
            "mirrorLastUpdated": _iso(self.mirror_last_updated),
            "version": self.version,
            "file": self.file,
            "repo": self.repo,
            "ref": self.ref,
        }
        return {k: v for k, v in data.items() if v is not None}
