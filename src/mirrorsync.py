"""mirrorsync - keep a mirror extension registry in step with the source marketplace.

    Returns:
        int: Exit code
"""
import sys
import logging
import json
import os

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_cli_overrides, apply_config, load_config
from errors import RegistryValidationError
from marketplace.client import create_mirror_client, create_source_client
from publish.executor import TaskExecutor
from registry.definitions import load_registry, select_extensions
from repository.github import GitHubClient
from resolution.engine import ResolutionEngine
from sync.accountant import RunAccountant
from sync.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def setup_logging(args):
    """Configure logging from CLI arguments.

    --loglevel wins when given; otherwise MIRRORSYNC_LOG_LEVEL applies.
    """
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def export_report(report, path):
    """Writes the run report to a JSON file.

    Args:
        report (RunReport): Report of the finished run.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(report.to_dict(), file, ensure_ascii=False, indent=4)
        logging.info("Run report has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("Run report couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_failed(ids, path):
    """Writes the failed extension ids to a JSON file.

    Args:
        ids (list): Failed extension ids.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(list(ids), file, indent=4)
        logging.info("Failed extension list has been exported at: %s", path)
    except OSError as e:
        logging.error("Failed extension list couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def build_orchestrator(args):
    """Wire clients, engine and executor for one run."""
    return Orchestrator(
        source_client=create_source_client(),
        mirror_client=create_mirror_client(),
        engine=ResolutionEngine(client=GitHubClient()),
        executor=TaskExecutor(),
        accountant=RunAccountant(),
        force=args.FORCE,
        skip_build=args.SKIP_BUILD,
        work_dirs=Constants.WORK_DIRS,
        publish_command=Constants.PUBLISH_COMMAND,
        source_publishers=Constants.SOURCE_PUBLISHERS,
    )


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    setup_logging(args)

    apply_config(load_config(args.CONFIG))
    apply_cli_overrides(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        configs = load_registry(args.REGISTRY_FILE)
    except RegistryValidationError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    configs = select_extensions(configs, args.EXTENSIONS)
    if not configs:
        logging.warning("No extensions selected.")

    report = build_orchestrator(args).run(configs)

    export_report(report, args.OUTPUT)
    if report.failed:
        logging.warning("%d extension(s) failed: %s", len(report.failed), ", ".join(report.failed))
    export_failed(report.failed, args.FAILED_OUTPUT)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="main",
                outcome="success"
            )
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
