"""Exception types raised by the sync pipeline.

Only RegistryValidationError is fatal for a run; every other error is caught
per package by the orchestrator and recorded in the report's failure set.
"""

from __future__ import annotations

from typing import Optional


class MirrorSyncError(Exception):
    """Base class for all mirrorsync errors."""


class RegistryValidationError(MirrorSyncError, ValueError):
    """Raised when the registry definition fails schema validation."""


class MarketplaceQueryError(MirrorSyncError):
    """Raised when a marketplace query fails after the client's retries."""

    def __init__(self, marketplace: str, extension_id: str, reason: str):
        super().__init__(f"{marketplace} query for {extension_id} failed: {reason}")
        self.marketplace = marketplace
        self.extension_id = extension_id
        self.reason = reason


class UnresolvedError(MirrorSyncError):
    """Raised when no resolution strategy yields a source for a package."""

    def __init__(self, extension_id: str, reason: Optional[str] = None):
        message = f"{extension_id}: failed to resolve"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.extension_id = extension_id


class ExecutionFailure(MirrorSyncError):
    """Raised when the publish step exits unsuccessfully."""


class ExecutionTimeout(ExecutionFailure):
    """Raised when the publish step overran its deadline and was killed."""
