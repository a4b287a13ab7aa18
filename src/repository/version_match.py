"""Version normalization and matching utilities.

Provides utilities for normalizing package versions and finding matches
against repository tags and releases.
"""
from __future__ import annotations

import re
from typing import List, Optional, Dict, Any, Iterable

from versioning.parser import versions_equal

# Tag split into a prefix and a trailing version: "my-ext@1.2.3", "v1.2.3", "my-ext-1.2.3"
_TRAILING_VERSION = re.compile(
    r"^(?P<prefix>.*?)[@/\-_]?v?(?P<version>\d+(?:\.\d+){1,2}(?:-[0-9A-Za-z.\-]+)?)$",
    re.IGNORECASE,
)


class VersionMatcher:
    """Handles version normalization and matching against repository artifacts.

    Supports various matching strategies: exact, v-prefix, prefixed-tag,
    semantic and pattern-based matching. Prefixed and semantic matches only
    accept tags with no prefix or with the package's own name as prefix, so a
    repository hosting several packages never yields a sibling's tag.
    """

    def __init__(self, patterns: Optional[List[str]] = None):
        """Initialize version matcher with optional custom patterns.

        Args:
            patterns: List of regex patterns for version matching (e.g., ["release-<v>"])
        """
        self.patterns = patterns or []

    def normalize_version(self, version: str) -> str:
        """Normalize version string for consistent matching.

        Lowercases and strips a single leading "v" without coercing numerics.

        Args:
            version: Version string to normalize

        Returns:
            Normalized version string
        """
        if not version:
            return ""
        normalized = version.strip().lower()
        if normalized.startswith("v") and normalized[1:2].isdigit():
            normalized = normalized[1:]
        return normalized

    def find_match(
        self,
        package_version: str,
        releases_or_tags: Iterable[Dict[str, Any]],
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Find best match for package version in repository artifacts.

        Tries matching strategies in order: exact, v-prefix, prefixed, semantic,
        pattern. Each strategy scans every artifact before the next one runs;
        within a strategy the first artifact in input order wins.

        Args:
            package_version: Package version to match
            releases_or_tags: Iterable of release/tag dictionaries
            name: Package name accepted as a tag prefix (e.g. "my-ext" for "my-ext@1.2.3")

        Returns:
            Dict with match details ('matched' False when nothing matched)
        """
        if not package_version:
            return self._no_match()

        # Convert to list for multiple iterations
        artifacts = list(releases_or_tags)

        strategies = [
            ("exact", self._find_exact_match),
            ("v-prefix", self._find_v_prefix_match),
            ("prefixed", self._find_prefixed_match),
            ("semantic", self._find_semantic_match),
        ]
        for match_type, strategy in strategies:
            artifact = strategy(package_version, artifacts, name)
            if artifact:
                return self._match(match_type, artifact)

        for pattern in self.patterns:
            artifact = self._find_pattern_match(package_version, artifacts, pattern)
            if artifact:
                return self._match("pattern", artifact)

        return self._no_match()

    def _match(self, match_type: str, artifact: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'matched': True,
            'match_type': match_type,
            'artifact': artifact,
            'tag_or_release': self._get_version_from_artifact(artifact)
        }

    @staticmethod
    def _no_match() -> Dict[str, Any]:
        return {
            'matched': False,
            'match_type': None,
            'artifact': None,
            'tag_or_release': None
        }

    def _find_exact_match(
        self,
        package_version: str,
        artifacts: List[Dict[str, Any]],
        name: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Find exact version match."""
        for artifact in artifacts:
            if self._get_version_from_artifact(artifact) == package_version:
                return artifact
        return None

    def _find_v_prefix_match(
        self,
        package_version: str,
        artifacts: List[Dict[str, Any]],
        name: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Find match differing only by a "v" prefix (v1.0.0 matches 1.0.0 and back)."""
        normalized_package = self.normalize_version(package_version)
        for artifact in artifacts:
            if self.normalize_version(self._get_version_from_artifact(artifact)) == normalized_package:
                return artifact
        return None

    def _split_tag(self, artifact: Dict[str, Any], name: Optional[str]) -> Optional[str]:
        """Trailing version of a tag whose prefix is empty or the package name."""
        m = _TRAILING_VERSION.match(self._get_version_from_artifact(artifact))
        if not m:
            return None
        prefix = m.group("prefix").lower()
        if prefix == "":
            return m.group("version")
        if name:
            wanted = name.lower()
            if prefix == wanted or prefix.endswith("/" + wanted):
                return m.group("version")
        return None

    def _find_prefixed_match(
        self,
        package_version: str,
        artifacts: List[Dict[str, Any]],
        name: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Find match whose name is the package name plus the version (e.g. "my-ext@1.0.0")."""
        normalized_package = self.normalize_version(package_version)
        for artifact in artifacts:
            version = self._split_tag(artifact, name)
            if version and version.lower() == normalized_package:
                return artifact
        return None

    def _find_semantic_match(
        self,
        package_version: str,
        artifacts: List[Dict[str, Any]],
        name: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Find match by semantic-version equality of the trailing version."""
        for artifact in artifacts:
            version = self._split_tag(artifact, name)
            if version and versions_equal(version, package_version):
                return artifact
        return None

    def _find_pattern_match(
        self,
        package_version: str,
        artifacts: List[Dict[str, Any]],
        pattern: str
    ) -> Optional[Dict[str, Any]]:
        """Find match using custom pattern."""
        try:
            # Replace <v> placeholder with package version
            regex_pattern = pattern.replace("<v>", re.escape(package_version))
            compiled_pattern = re.compile(regex_pattern, re.IGNORECASE)
        except re.error:
            # Invalid pattern, skip
            return None

        for artifact in artifacts:
            if compiled_pattern.match(self._get_version_from_artifact(artifact)):
                return artifact
        return None

    def _get_version_from_artifact(self, artifact: Dict[str, Any]) -> str:
        """Extract version string from artifact dict.

        Releases carry the tag in 'tag_name' (their 'name' is a free-form
        title); tags carry it in 'name'.
        """
        for key in ['tag_name', 'name', 'version', 'ref']:
            if key in artifact and artifact[key]:
                return str(artifact[key])

        return ""
