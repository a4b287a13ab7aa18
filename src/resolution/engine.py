"""Resolution engine: decide which upstream artifact or commit to republish.

Strategies are an explicit ordered list evaluated first-match-wins, from the
most reproducible source (a release asset) to the most approximate one (the
newest commit at or before the source marketplace's last update).
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer
from errors import UnresolvedError
from registry.definitions import PackageConfig
from repository.github import GitHubClient
from repository.url_normalize import RepoRef, normalize_repo_url
from repository.version_match import VersionMatcher
from versioning.parser import versions_equal

from .models import ResolutionDescriptor, ResolutionKind, SourceHint

logger = logging.getLogger(__name__)

_UNSET = object()


class ResolutionContext:
    """Per-package view of the upstream repository.

    Repository queries are made lazily and memoized so each strategy pays only
    for what it inspects and no query runs twice for one package.
    """

    def __init__(
        self,
        config: PackageConfig,
        ref: RepoRef,
        hint: Optional[SourceHint],
        client: GitHubClient,
        matcher: VersionMatcher,
        now: datetime,
    ):
        self.config = config
        self.repo_ref = ref
        self.hint = hint
        self.client = client
        self.matcher = matcher
        self.now = now
        self.target_version = config.version or (hint.version if hint else None)
        self._cache: Dict[Any, Any] = {}

    def _memo(self, key: Any, loader: Callable[[], Any]) -> Any:
        value = self._cache.get(key, _UNSET)
        if value is _UNSET:
            value = loader()
            self._cache[key] = value
        return value

    @property
    def repository(self) -> str:
        return self.repo_ref.normalized_url

    @property
    def manifest_path(self) -> str:
        location = self.config.location or self.repo_ref.directory
        if location:
            return f"{location.strip('/')}/{Constants.MANIFEST_FILE}"
        return Constants.MANIFEST_FILE

    def repo_info(self) -> Optional[Dict[str, Any]]:
        return self._memo("repo", lambda: self.client.get_repo(self.repo_ref.owner, self.repo_ref.repo))

    def releases(self) -> List[Dict[str, Any]]:
        def load():
            releases = self.client.get_releases(self.repo_ref.owner, self.repo_ref.repo) or []
            return [r for r in releases if not r.get("draft")]
        return self._memo("releases", load)

    def tags(self) -> List[Dict[str, Any]]:
        return self._memo("tags", lambda: self.client.get_tags(self.repo_ref.owner, self.repo_ref.repo) or [])

    def latest_commit(self, until: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        info = self.repo_info() or {}
        branch = info.get("default_branch")
        until_iso = until.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ") if until else None
        return self._memo(
            ("commit", until_iso),
            lambda: self.client.get_latest_commit(self.repo_ref.owner, self.repo_ref.repo, branch, until_iso),
        )

    def manifest_version(self, sha: str) -> Optional[str]:
        def load():
            manifest = self.client.get_file_json(self.repo_ref.owner, self.repo_ref.repo, self.manifest_path, sha)
            if isinstance(manifest, dict) and isinstance(manifest.get("version"), str):
                return manifest["version"]
            return None
        return self._memo(("manifest", sha), load)

    def matched_release(self) -> Optional[Dict[str, Any]]:
        """The release whose tag best matches the target version, across all releases."""
        if not self.target_version:
            return None

        def load():
            result = self.matcher.find_match(self.target_version, self.releases(), name=self.config.name)
            return result["artifact"]
        return self._memo("matched_release", load)

    def is_unmaintained(self) -> bool:
        """The source package has not been updated for a long time, or upstream is archived."""
        if self.hint and self.hint.last_updated:
            if self.now - self.hint.last_updated > timedelta(days=Constants.UNMAINTAINED_DAYS):
                return True
        info = self.repo_info()
        return bool(info and info.get("archived"))


def _find_asset(release: Dict[str, Any], name: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Downloadable artifact of a release, preferring one named after the package."""
    assets = [
        asset for asset in release.get("assets") or []
        if str(asset.get("name", "")).endswith(Constants.ARTIFACT_SUFFIX) and asset.get("browser_download_url")
    ]
    if name:
        for asset in assets:
            if name.lower() in str(asset["name"]).lower():
                return asset
    return assets[0] if assets else None


def resolve_release_asset(ctx: ResolutionContext) -> Optional[ResolutionDescriptor]:
    """A matching release with a downloadable artifact."""
    release = ctx.matched_release()
    if not release:
        return None
    asset = _find_asset(release, ctx.config.name)
    if not asset:
        return None
    return ResolutionDescriptor(
        ResolutionKind.RELEASE_ASSET,
        repository=ctx.repository,
        ref=release.get("tag_name"),
        path=asset["browser_download_url"],
        version=ctx.target_version,
    )


def resolve_release_tag(ctx: ResolutionContext) -> Optional[ResolutionDescriptor]:
    """A matching release without a usable artifact; build from its tag."""
    release = ctx.matched_release()
    if not release or not release.get("tag_name"):
        return None
    return ResolutionDescriptor(
        ResolutionKind.RELEASE_TAG,
        repository=ctx.repository,
        ref=release["tag_name"],
        version=ctx.target_version,
    )


def resolve_tag(ctx: ResolutionContext) -> Optional[ResolutionDescriptor]:
    """A plain repository tag matching the target version."""
    if not ctx.target_version:
        return None
    result = ctx.matcher.find_match(ctx.target_version, ctx.tags(), name=ctx.config.name)
    if result["matched"]:
        return ResolutionDescriptor(
            ResolutionKind.TAG,
            repository=ctx.repository,
            ref=result["tag_or_release"],
            version=ctx.target_version,
        )
    return None


def resolve_latest(ctx: ResolutionContext) -> Optional[ResolutionDescriptor]:
    """The newest commit, when there is no version to match or nobody maintains the package."""
    if ctx.target_version and not ctx.is_unmaintained():
        return None
    commit = ctx.latest_commit()
    if not commit:
        return None
    return ResolutionDescriptor(
        ResolutionKind.LATEST,
        repository=ctx.repository,
        ref=commit["sha"],
        version=ctx.manifest_version(commit["sha"]),
    )


def resolve_matched_latest(ctx: ResolutionContext) -> Optional[ResolutionDescriptor]:
    """The newest commit, when its manifest already carries the target version."""
    commit = ctx.latest_commit()
    if not commit or not ctx.target_version:
        return None
    version = ctx.manifest_version(commit["sha"])
    if not versions_equal(version, ctx.target_version):
        return None
    return ResolutionDescriptor(
        ResolutionKind.MATCHED_LATEST,
        repository=ctx.repository,
        ref=commit["sha"],
        version=version,
    )


def resolve_matched(ctx: ResolutionContext) -> Optional[ResolutionDescriptor]:
    """The newest commit at or before the source marketplace's last update."""
    if not ctx.hint or not ctx.hint.last_updated:
        return None
    commit = ctx.latest_commit(until=ctx.hint.last_updated)
    if not commit:
        return None
    return ResolutionDescriptor(
        ResolutionKind.MATCHED,
        repository=ctx.repository,
        ref=commit["sha"],
        version=ctx.manifest_version(commit["sha"]) or ctx.target_version,
    )


Strategy = Callable[[ResolutionContext], Optional[ResolutionDescriptor]]

STRATEGIES: List[Tuple[ResolutionKind, Strategy]] = [
    (ResolutionKind.RELEASE_ASSET, resolve_release_asset),
    (ResolutionKind.RELEASE_TAG, resolve_release_tag),
    (ResolutionKind.TAG, resolve_tag),
    (ResolutionKind.LATEST, resolve_latest),
    (ResolutionKind.MATCHED_LATEST, resolve_matched_latest),
    (ResolutionKind.MATCHED, resolve_matched),
]


class ResolutionEngine:
    """Runs the ordered strategy chain for one package at a time."""

    def __init__(
        self,
        client: Optional[GitHubClient] = None,
        matcher: Optional[VersionMatcher] = None,
        strategies: Optional[List[Tuple[ResolutionKind, Strategy]]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.client = client or GitHubClient()
        self.matcher = matcher or VersionMatcher()
        self.strategies = strategies if strategies is not None else STRATEGIES
        self.clock = clock

    def resolve(self, config: PackageConfig, hint: Optional[SourceHint] = None) -> ResolutionDescriptor:
        """Resolve the upstream source for a package.

        Args:
            config: Package configuration
            hint: Source marketplace version and last-updated time, if known

        Returns:
            The first descriptor produced by the strategy chain

        Raises:
            UnresolvedError: If the repository is unsupported or every strategy declined
        """
        ref = normalize_repo_url(config.repository)
        if ref is None or ref.host != "github":
            raise UnresolvedError(config.id, f"unsupported repository {config.repository}")

        ctx = ResolutionContext(config, ref, hint, self.client, self.matcher, self.clock())
        with Timer() as t:
            for kind, strategy in self.strategies:
                descriptor = strategy(ctx)
                if descriptor is None:
                    continue
                if is_debug_enabled(logger):
                    logger.debug(
                        "Resolved upstream source",
                        extra=extra_context(
                            event="decision",
                            component="resolution",
                            action="resolve",
                            target=config.id,
                            outcome=kind.value,
                            duration_ms=t.duration_ms()
                        )
                    )
                return descriptor

        raise UnresolvedError(config.id)
