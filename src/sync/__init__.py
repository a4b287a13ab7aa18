"""Sync run driver and accounting."""

from .accountant import RunAccountant, RunReport  # noqa: F401
from .orchestrator import Orchestrator  # noqa: F401

__all__ = ["Orchestrator", "RunAccountant", "RunReport"]
