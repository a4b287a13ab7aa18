"""Upstream source resolution.

This package decides which upstream artifact or commit a package is
republished from:
- models.py: ResolutionKind, SourceHint and ResolutionDescriptor
- engine.py: the ordered strategy chain and ResolutionEngine
"""

from .models import ResolutionDescriptor, ResolutionKind, SourceHint  # noqa: F401
from .engine import STRATEGIES, ResolutionContext, ResolutionEngine  # noqa: F401

__all__ = [
    "STRATEGIES",
    "ResolutionContext",
    "ResolutionDescriptor",
    "ResolutionEngine",
    "ResolutionKind",
    "SourceHint",
]
