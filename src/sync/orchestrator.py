"""Sequential per-package sync driver.

For every configured package: query both marketplaces, classify, resolve the
upstream source, decide whether to skip, run the publish step under a
deadline, then re-query the mirror and classify again. A failure of one
package is recorded and logged; the batch always continues.
"""
from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from errors import ExecutionFailure, ExecutionTimeout, MarketplaceQueryError, UnresolvedError
from marketplace.client import MarketplacePort
from marketplace.models import MarketplaceSnapshot
from publish.executor import SubprocessProcedure, TaskExecutor
from publish.models import ExecutionStatus, PublishContext
from registry.definitions import PackageConfig
from resolution.engine import ResolutionEngine
from resolution.models import ResolutionDescriptor, ResolutionKind, SourceHint
from versioning.classifier import classify, days_between, is_recently_updated
from versioning.models import Classification, VersionStat
from versioning.parser import versions_equal

from .accountant import RunAccountant, RunReport

logger = logging.getLogger(__name__)

_RESOLUTION_MESSAGES = {
    ResolutionKind.RELEASE_ASSET: "resolved %s from release",
    ResolutionKind.RELEASE_TAG: "resolved %s from release tag",
    ResolutionKind.TAG: "resolved %s from tags",
    ResolutionKind.MATCHED_LATEST: "resolved %s from the very latest commit",
    ResolutionKind.MATCHED: "resolved %s from the latest commit on the last update date",
}


class Orchestrator:
    """Drives one sync run over a list of package configs."""

    def __init__(
        self,
        source_client: MarketplacePort,
        mirror_client: MarketplacePort,
        engine: Optional[ResolutionEngine] = None,
        executor: Optional[TaskExecutor] = None,
        accountant: Optional[RunAccountant] = None,
        force: bool = False,
        skip_build: bool = False,
        work_dirs: Optional[List[str]] = None,
        publish_command: Optional[List[str]] = None,
        source_publishers: Optional[Iterable[str]] = None,
        procedure_factory: Optional[Callable[[List[str], dict], object]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.source_client = source_client
        self.mirror_client = mirror_client
        self.engine = engine or ResolutionEngine()
        self.executor = executor or TaskExecutor()
        self.accountant = accountant or RunAccountant()
        self.force = force
        self.skip_build = skip_build
        self.work_dirs = list(Constants.WORK_DIRS if work_dirs is None else work_dirs)
        self.publish_command = list(publish_command or Constants.PUBLISH_COMMAND)
        self.source_publishers = set(Constants.SOURCE_PUBLISHERS if source_publishers is None else source_publishers)
        self.procedure_factory = procedure_factory or SubprocessProcedure
        self.clock = clock

    def run(self, configs: Iterable[PackageConfig]) -> RunReport:
        """Process every package in order and return the run report."""
        for config in configs:
            context = PublishContext()
            try:
                self.process(config, context)
            except Exception as e:  # pylint: disable=broad-exception-caught
                self._record_failure(config, context, e)
        return self.accountant.report

    def _query(self, client: MarketplacePort, extension_id: str) -> Optional[MarketplaceSnapshot]:
        try:
            return client.get_extension(extension_id)
        except MarketplaceQueryError as e:
            logger.warning("%s", e)
            return None

    def _query_mirror(self, config: PackageConfig, context: PublishContext) -> None:
        mirror = self._query(self.mirror_client, config.id)
        context.mirror_version = mirror.version if mirror else None
        context.mirror_last_updated = mirror.last_updated if mirror else None

    def _classify(self, config: PackageConfig, context: PublishContext) -> Classification:
        classification = classify(context.source_version, context.mirror_version)
        stat = VersionStat(
            source_installs=context.source_installs,
            source_version=context.source_version,
            mirror_version=context.mirror_version,
            days_in_between=days_between(context.source_last_updated, context.mirror_last_updated),
        )
        recently = bool(context.source_version) and is_recently_updated(context.source_last_updated, self.clock())
        self.accountant.record(config.id, classification, stat, recently)
        if is_debug_enabled(logger):
            logger.debug(
                "Classified package",
                extra=extra_context(
                    event="decision",
                    component="orchestrator",
                    action="classify",
                    target=config.id,
                    outcome=classification.value
                )
            )
        return classification

    def process(self, config: PackageConfig, context: PublishContext) -> None:
        """Run the state machine for a single package.

        Raises:
            MirrorSyncError: On unresolvable packages or a failed publish step
        """
        source = self._query(self.source_client, config.id)
        if source is not None:
            context.source_version = source.version
            context.source_last_updated = source.last_updated
            context.source_installs = source.install_count
            context.source_publisher = source.publisher_name
        if context.source_publisher in self.source_publishers:
            self.accountant.record_source_published(config.id, context.source_installs, context.source_version)

        self._query_mirror(config, context)
        classification = self._classify(config, context)

        self._wipe_work_dirs()

        hint = SourceHint(context.source_version, context.source_last_updated) if context.source_version else None
        descriptor: Optional[ResolutionDescriptor] = None
        unresolved: Optional[UnresolvedError] = None
        try:
            descriptor = self.engine.resolve(config, hint)
        except UnresolvedError as e:
            unresolved = e
        summary = {"sourceInstalls": context.source_installs, "sourceVersion": context.source_version}
        if descriptor is not None:
            summary.update(descriptor.summary())
            context.version = descriptor.version
        self.accountant.record_resolution(config.id, summary)

        if not self.force and self._should_skip(config, classification, descriptor, context):
            return
        if unresolved is not None:
            raise unresolved

        context.apply_resolution(descriptor)
        self._log_resolution(config, descriptor, context)

        if self.skip_build:
            return

        self._publish(config, context)

        self._query_mirror(config, context)
        self._classify(config, context)

    def _should_skip(
        self,
        config: PackageConfig,
        classification: Classification,
        descriptor: Optional[ResolutionDescriptor],
        context: PublishContext,
    ) -> bool:
        if classification is Classification.UP_TO_DATE:
            logger.info("%s: skipping, since up-to-date", config.id)
            return True
        if classification is Classification.UNSTABLE:
            logger.info("%s: skipping, since version in the mirror is newer than in the source marketplace", config.id)
            return True
        if (
            descriptor is not None
            and descriptor.kind is ResolutionKind.LATEST
            and context.mirror_version
            and versions_equal(descriptor.version, context.mirror_version)
        ):
            logger.info("%s: skipping, since very latest commit already published to the mirror", config.id)
            self.accountant.relabel_up_to_date(config.id)
            return True
        return False

    def _log_resolution(self, config: PackageConfig, descriptor: ResolutionDescriptor, context: PublishContext) -> None:
        if descriptor.kind is ResolutionKind.LATEST:
            reason = (
                "it is not actively maintained" if context.source_version
                else "it is not published to the source marketplace"
            )
            logger.info("%s: resolved %s from the very latest commit, since %s", config.id, descriptor.ref, reason)
            return
        label = descriptor.path.rsplit("/", 1)[-1] if descriptor.kind is ResolutionKind.RELEASE_ASSET else descriptor.ref
        logger.info("%s: " + _RESOLUTION_MESSAGES[descriptor.kind], config.id, label)

    def _wipe_work_dirs(self) -> None:
        for path in self.work_dirs:
            shutil.rmtree(path, ignore_errors=True)

    def _publish(self, config: PackageConfig, context: PublishContext) -> None:
        payload = {"extension": config.to_payload(), "context": context.to_dict()}
        procedure = self.procedure_factory(self.publish_command, payload)
        outcome = self.executor.run_bounded(procedure, config.timeout)
        if outcome.status is ExecutionStatus.TIMED_OUT:
            raise ExecutionTimeout(outcome.reason)
        if outcome.status is ExecutionStatus.FAILURE:
            raise ExecutionFailure(outcome.reason)

    def _record_failure(self, config: PackageConfig, context: PublishContext, error: Exception) -> None:
        self.accountant.mark_failed(config.id)
        details = json.dumps({"extension": config.to_payload(), "context": context.to_dict()}, indent=2)
        if isinstance(error, ExecutionTimeout):
            logger.error("[TIMEOUT] %s: publish step killed (%s): %s", config.id, error, details)
        else:
            logger.error("[FAIL] Could not process extension: %s", details)
        logger.error("%s: %s", config.id, error, exc_info=not isinstance(error, ExecutionFailure))
