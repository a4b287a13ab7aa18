"""Data models for marketplace snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class MarketplaceSnapshot:
    """Latest known state of one extension in one marketplace.

    A marketplace that does not know the extension at all yields no snapshot;
    a snapshot with ``version`` None means the extension exists but has no
    eligible (non-prerelease) version.
    """
    version: Optional[str]
    last_updated: Optional[datetime] = None
    install_count: Optional[int] = None
    publisher_name: Optional[str] = None
