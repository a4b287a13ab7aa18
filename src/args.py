"""Argument parsing functionality for mirrorsync."""

import argparse
import os
import shlex

from constants import Constants


def _env_flag(name):
    return os.environ.get(name, "").strip().lower() == "true"


def split_extensions(value):
    """Split a comma separated id list, dropping blanks."""
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Environment variables EXTENSIONS, FORCE and SKIP_BUILD provide defaults;
    explicit flags win.
    """
    parser = argparse.ArgumentParser(
        prog="mirrorsync",
        description=(
            "mirrorsync - republish extensions whose upstream version moved ahead of the mirror"
        ),
        add_help=True,
    )

    parser.add_argument("-r", "--registry",
                        dest="REGISTRY_FILE",
                        help="Registry definition file (default: %(default)s)",
                        action="store", type=str,
                        default=Constants.REGISTRY_FILE)
    parser.add_argument("-e", "--extensions",
                        dest="EXTENSIONS",
                        help="Comma separated extension ids to process (env: EXTENSIONS)",
                        action="store",
                        type=split_extensions,
                        default=split_extensions(os.environ.get(Constants.ENV_EXTENSIONS)))
    parser.add_argument("--force",
                        dest="FORCE",
                        help="Republish even when the mirror looks up to date (env: FORCE=true)",
                        action="store_true",
                        default=_env_flag(Constants.ENV_FORCE))
    parser.add_argument("--skip-build",
                        dest="SKIP_BUILD",
                        help="Resolve only, do not run the publish step (env: SKIP_BUILD=true)",
                        action="store_true",
                        default=_env_flag(Constants.ENV_SKIP_BUILD))
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to the JSON run report (default: %(default)s)",
                        action="store",
                        type=str,
                        default=Constants.REPORT_FILE)
    parser.add_argument("--failed-output",
                        dest="FAILED_OUTPUT",
                        help="Path to the JSON list of failed extension ids (default: %(default)s)",
                        action="store",
                        type=str,
                        default=Constants.FAILED_FILE)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML/JSON configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--publish-command",
                        dest="PUBLISH_COMMAND",
                        help="Command running the single-extension publish step",
                        action="store",
                        type=shlex.split)
    parser.add_argument("--source-url",
                        dest="SOURCE_URL",
                        help="Source marketplace gallery API base URL",
                        action="store",
                        type=str)
    parser.add_argument("--mirror-url",
                        dest="MIRROR_URL",
                        help="Mirror registry gallery API base URL",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: $MIRRORSYNC_LOG_LEVEL or INFO)",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
