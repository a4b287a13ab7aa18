"""Registry definition loading: read, validate and type the package list.

The definition file maps extension ids to their upstream configuration. The
whole file is validated up front with jsonschema (Draft 7); any violation
rejects the batch before a single package is processed.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from jsonschema import Draft7Validator

from constants import Constants
from errors import RegistryValidationError

from .schema import REGISTRY_SCHEMA, SCHEMA_KEY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageConfig:
    """Configuration of one extension from the registry definition."""

    id: str
    repository: str
    version: Optional[str] = None
    custom: Tuple[str, ...] = field(default_factory=tuple)
    timeout: int = Constants.DEFAULT_TIMEOUT_MINUTES
    location: Optional[str] = None
    prepublish: Optional[str] = None
    extension_file: Optional[str] = None
    checkout: Optional[str] = None

    @property
    def publisher(self) -> str:
        """Publisher part of the id."""
        return self.id.split(".", 1)[0]

    @property
    def name(self) -> str:
        """Extension name part of the id."""
        return self.id.split(".", 1)[1]

    def to_payload(self) -> Dict[str, Any]:
        """Definition-file shaped dict handed to the publish step."""
        payload: Dict[str, Any] = {"id": self.id, "repository": self.repository, "timeout": self.timeout}
        optional = {
            "version": self.version,
            "custom": list(self.custom) if self.custom else None,
            "location": self.location,
            "prepublish": self.prepublish,
            "extensionFile": self.extension_file,
            "checkout": self.checkout,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return payload


def validate_registry(data: Any, schema: Optional[Dict[str, Any]] = None) -> None:
    """Validate a registry definition and raise on any problem.

    Args:
        data: Parsed registry definition
        schema: Draft-07 JSON Schema dict (defaults to the bundled schema)

    Raises:
        RegistryValidationError: Listing every validation error found
    """
    validator = Draft7Validator(schema or REGISTRY_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        problems = []
        for err in errs:
            path = "/".join([str(p) for p in err.path])
            problems.append(f"at '{path}': {err.message}")
        raise RegistryValidationError("Registry definition is invalid:\n  " + "\n  ".join(problems))


def _to_config(extension_id: str, entry: Dict[str, Any]) -> PackageConfig:
    return PackageConfig(
        id=extension_id,
        repository=entry["repository"],
        version=entry.get("version"),
        custom=tuple(entry.get("custom") or ()),
        timeout=entry.get("timeout", Constants.DEFAULT_TIMEOUT_MINUTES),
        location=entry.get("location"),
        prepublish=entry.get("prepublish"),
        extension_file=entry.get("extensionFile"),
        checkout=entry.get("checkout"),
    )


def parse_registry(data: Any, schema: Optional[Dict[str, Any]] = None) -> List[PackageConfig]:
    """Validate a parsed registry definition and build configs in file order."""
    validate_registry(data, schema)
    return [
        _to_config(extension_id, entry)
        for extension_id, entry in data.items()
        if extension_id != SCHEMA_KEY
    ]


def load_registry(path: str, schema: Optional[Dict[str, Any]] = None) -> List[PackageConfig]:
    """Load and validate the registry definition file.

    Args:
        path: Path to the JSON registry definition
        schema: Optional schema overriding the bundled one

    Returns:
        List of PackageConfig in definition order

    Raises:
        RegistryValidationError: If the file is unreadable, not JSON, or invalid
    """
    try:
        with open(path, encoding="utf-8") as file:
            data = json.load(file)
    except OSError as e:
        raise RegistryValidationError(f"Registry definition {path} could not be read: {e}") from e
    except json.JSONDecodeError as e:
        raise RegistryValidationError(f"Registry definition {path} is not valid JSON: {e}") from e

    configs = parse_registry(data, schema)
    logger.info("Loaded %d extensions from %s", len(configs), path)
    return configs


def select_extensions(configs: Iterable[PackageConfig], allow_list: Optional[List[str]]) -> List[PackageConfig]:
    """Restrict configs to an allow-list of ids, keeping definition order.

    Args:
        configs: All configured extensions
        allow_list: Extension ids to keep, or None for all

    Returns:
        Selected configs
    """
    configs = list(configs)
    if allow_list is None:
        return configs
    wanted = set(allow_list)
    unknown = wanted - {c.id for c in configs}
    for extension_id in sorted(unknown):
        logger.warning("%s: not in the registry definition, ignoring", extension_id)
    return [c for c in configs if c.id in wanted]
