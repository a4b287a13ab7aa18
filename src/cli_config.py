"""Configuration file loading and runtime overrides for Constants.

A YAML (or JSON) file may override the tunables held on Constants. CLI flags
are applied afterwards and therefore win. Unknown keys are ignored with a
warning.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

# (section, key) -> Constants attribute
CONFIG_KEYS = {
    ("source", "url"): "SOURCE_MARKETPLACE_URL",
    ("source", "publishers"): "SOURCE_PUBLISHERS",
    ("mirror", "url"): "MIRROR_MARKETPLACE_URL",
    ("github", "api_base"): "GITHUB_API_BASE",
    ("github", "per_page"): "REPO_API_PER_PAGE",
    ("http", "request_timeout"): "REQUEST_TIMEOUT",
    ("http", "retry_max"): "HTTP_RETRY_MAX",
    ("http", "retry_base_delay_sec"): "HTTP_RETRY_BASE_DELAY_SEC",
    ("http", "cache_ttl_sec"): "HTTP_CACHE_TTL_SEC",
    ("sync", "work_dirs"): "WORK_DIRS",
    ("sync", "publish_command"): "PUBLISH_COMMAND",
    ("sync", "default_timeout_minutes"): "DEFAULT_TIMEOUT_MINUTES",
    ("sync", "recently_updated_days"): "RECENTLY_UPDATED_DAYS",
    ("sync", "unmaintained_days"): "UNMAINTAINED_DAYS",
    ("sync", "artifact_suffix"): "ARTIFACT_SUFFIX",
    ("output", "report"): "REPORT_FILE",
    ("output", "failed"): "FAILED_FILE",
}


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load a configuration file.

    Args:
        config_path: Path to a YAML/JSON config file

    Returns:
        Configuration dict (empty when no usable file is given)
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a mapping, ignoring", config_path)
        return {}
    return data


def apply_config(data: Dict[str, Any]) -> None:
    """Apply known config keys onto Constants."""
    for section, values in (data or {}).items():
        if not isinstance(values, dict):
            logger.warning("Config section '%s' is not a mapping, ignoring", section)
            continue
        for key, value in values.items():
            attr = CONFIG_KEYS.get((section, key))
            if attr is None:
                logger.warning("Unknown config key '%s.%s', ignoring", section, key)
                continue
            setattr(Constants, attr, value)
            logger.debug("Config override %s.%s applied", section, key)


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides for tunables (CLI has highest precedence)."""
    if getattr(args, "SOURCE_URL", None):
        Constants.SOURCE_MARKETPLACE_URL = args.SOURCE_URL
    if getattr(args, "MIRROR_URL", None):
        Constants.MIRROR_MARKETPLACE_URL = args.MIRROR_URL
    if getattr(args, "PUBLISH_COMMAND", None):
        Constants.PUBLISH_COMMAND = list(args.PUBLISH_COMMAND)
