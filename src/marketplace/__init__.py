"""Marketplace query clients.

This package provides the two marketplace views a sync run compares:
- models.py: MarketplaceSnapshot describing the latest known version of an extension
- client.py: gallery API client used for both the source marketplace and the mirror

Public API is preserved at marketplace without shims.
"""

from .models import MarketplaceSnapshot  # noqa: F401
from .client import (  # noqa: F401
    DEFAULT_FLAGS,
    MarketplaceClient,
    MarketplacePort,
    create_mirror_client,
    create_source_client,
    is_prerelease_version,
)

__all__ = [
    "DEFAULT_FLAGS",
    "MarketplaceClient",
    "MarketplacePort",
    "MarketplaceSnapshot",
    "create_mirror_client",
    "create_source_client",
    "is_prerelease_version",
]
