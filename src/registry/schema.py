"""JSON Schema for the registry definition file (extensions.json)."""

from typing import Any, Dict

SCHEMA_KEY = "$schema"

EXTENSION_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_\-]*\.[A-Za-z0-9][A-Za-z0-9_.\-]*$"

EXTENSION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "repository": {
            "type": "string",
            "pattern": r"^https?://",
            "description": "Upstream source repository URL",
        },
        "version": {
            "type": "string",
            "minLength": 1,
            "description": "Pinned version to publish instead of the source marketplace's latest",
        },
        "location": {
            "type": "string",
            "description": "Sub-directory of the extension inside the repository",
        },
        "prepublish": {
            "type": "string",
            "description": "Command run before packaging",
        },
        "extensionFile": {
            "type": "string",
            "description": "Path of a prebuilt artifact inside the repository",
        },
        "checkout": {
            "type": "string",
            "description": "Ref the publish step checks out",
        },
        "custom": {
            "type": "array",
            "items": {"type": "string"},
            "minItems": 1,
            "description": "Custom build commands replacing the default build",
        },
        "timeout": {
            "type": "integer",
            "minimum": 1,
            "description": "Publish timeout in minutes",
        },
    },
    "required": ["repository"],
    "additionalProperties": False,
}

REGISTRY_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        SCHEMA_KEY: {"type": "string"},
    },
    "propertyNames": {
        "anyOf": [
            {"const": SCHEMA_KEY},
            {"pattern": EXTENSION_ID_PATTERN},
        ]
    },
    "additionalProperties": EXTENSION_SCHEMA,
}
