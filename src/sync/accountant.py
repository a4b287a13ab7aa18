"""Run accounting: incremental, idempotent record of what happened to each package."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from versioning.models import Classification, VersionStat

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Aggregate outcome of one sync run.

    A package id is in at most one of the five classification buckets.
    """

    up_to_date: Dict[str, VersionStat] = field(default_factory=dict)
    outdated: Dict[str, VersionStat] = field(default_factory=dict)
    unstable: Dict[str, VersionStat] = field(default_factory=dict)
    not_in_mirror: Dict[str, VersionStat] = field(default_factory=dict)
    not_in_source: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    resolutions: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    source_published: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    recently_updated: Dict[str, VersionStat] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON report layout."""
        def stats(bucket: Dict[str, VersionStat]) -> Dict[str, Any]:
            return {k: v.to_dict() for k, v in bucket.items()}

        return {
            "upToDate": stats(self.up_to_date),
            "outdated": stats(self.outdated),
            "unstable": stats(self.unstable),
            "notInMirror": stats(self.not_in_mirror),
            "notInSource": list(self.not_in_source),
            "failed": list(self.failed),
            "sourcePublished": dict(self.source_published),
            "recentlyUpdated": stats(self.recently_updated),
            "resolutions": dict(self.resolutions),
        }


class RunAccountant:
    """Owns the RunReport and applies clear-then-write updates to it."""

    def __init__(self, report: Optional[RunReport] = None):
        self.report = report or RunReport()

    def _stat_buckets(self) -> Dict[Classification, Dict[str, VersionStat]]:
        r = self.report
        return {
            Classification.UP_TO_DATE: r.up_to_date,
            Classification.OUTDATED: r.outdated,
            Classification.UNSTABLE: r.unstable,
            Classification.NOT_IN_MIRROR: r.not_in_mirror,
        }

    def _clear(self, extension_id: str) -> None:
        for bucket in self._stat_buckets().values():
            bucket.pop(extension_id, None)
        if extension_id in self.report.not_in_source:
            self.report.not_in_source.remove(extension_id)
        self.report.recently_updated.pop(extension_id, None)

    def record(
        self,
        extension_id: str,
        classification: Classification,
        stat: VersionStat,
        recently_updated: bool = False,
    ) -> None:
        """Record a classification, replacing any earlier one for the same package."""
        self._clear(extension_id)
        if classification is Classification.NOT_IN_SOURCE:
            self.report.not_in_source.append(extension_id)
        else:
            self._stat_buckets()[classification][extension_id] = stat
        if recently_updated:
            self.report.recently_updated[extension_id] = stat

    def relabel_up_to_date(self, extension_id: str) -> None:
        """Move a package from outdated to up to date, keeping its stat."""
        stat = self.report.outdated.pop(extension_id, None)
        if stat is not None:
            self.report.up_to_date[extension_id] = stat

    def classification_of(self, extension_id: str) -> Optional[Classification]:
        """Current classification of a package, if recorded."""
        if extension_id in self.report.not_in_source:
            return Classification.NOT_IN_SOURCE
        for classification, bucket in self._stat_buckets().items():
            if extension_id in bucket:
                return classification
        return None

    def record_resolution(self, extension_id: str, summary: Dict[str, Any]) -> None:
        self.report.resolutions[extension_id] = summary

    def record_source_published(self, extension_id: str, installs: Optional[int], version: Optional[str]) -> None:
        self.report.source_published[extension_id] = {"installs": installs, "version": version}

    def mark_failed(self, extension_id: str) -> None:
        if extension_id not in self.report.failed:
            self.report.failed.append(extension_id)
            logger.debug("%s: marked failed", extension_id)
