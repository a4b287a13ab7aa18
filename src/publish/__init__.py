"""Publish step execution."""

from .models import ExecutionOutcome, ExecutionStatus, PublishContext  # noqa: F401
from .executor import SubprocessProcedure, TaskExecutor, normalize_timeout  # noqa: F401

__all__ = [
    "ExecutionOutcome",
    "ExecutionStatus",
    "PublishContext",
    "SubprocessProcedure",
    "TaskExecutor",
    "normalize_timeout",
]
