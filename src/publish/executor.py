"""Time-bounded execution of the external publish step."""
from __future__ import annotations

import json
import logging
import os
import subprocess
import threading
from typing import Any, Dict, List, Optional, Protocol

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer

from .models import ExecutionOutcome, ExecutionStatus

logger = logging.getLogger(__name__)


class ProcessHandle(Protocol):
    """A started procedure."""

    def wait(self) -> int:  # pragma: no cover - protocol
        ...

    def kill(self) -> None:  # pragma: no cover - protocol
        ...


class Procedure(Protocol):
    """Anything the executor can start and later kill."""

    def start(self) -> ProcessHandle:  # pragma: no cover - protocol
        ...


class SubprocessProcedure:
    """Launches the publish command with the package payload as its last argument.

    stdin is closed, stdout/stderr are inherited from this process, and the
    environment is the parent's with NODE_ENV=development.
    """

    def __init__(
        self,
        command: List[str],
        payload: Dict[str, Any],
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
    ):
        self.command = list(command)
        self.payload = payload
        self.env = env
        self.cwd = cwd

    @property
    def argv(self) -> List[str]:
        return self.command + [json.dumps(self.payload)]

    def start(self) -> subprocess.Popen:
        env = dict(self.env if self.env is not None else os.environ)
        env["NODE_ENV"] = "development"
        return subprocess.Popen(  # noqa: S603
            self.argv,
            stdin=subprocess.DEVNULL,
            stdout=None,
            stderr=None,
            cwd=self.cwd or os.getcwd(),
            env=env,
        )


def normalize_timeout(timeout_minutes: Any) -> int:
    """Timeout in minutes, falling back to the default for non-integers."""
    if isinstance(timeout_minutes, bool) or not isinstance(timeout_minutes, int) or timeout_minutes < 1:
        return Constants.DEFAULT_TIMEOUT_MINUTES
    return timeout_minutes


class TaskExecutor:
    """Runs one procedure under a wall-clock deadline.

    The deadline is a threading.Timer armed at launch. When it fires the
    process is killed and the outcome is TIMED_OUT. The timer is cancelled on
    every exit path, and a deadline firing after wait() has returned neither
    kills nor reclassifies the finished run.
    """

    def __init__(self, seconds_per_minute: float = 60.0):
        self.seconds_per_minute = seconds_per_minute

    def run_bounded(self, procedure: Procedure, timeout_minutes: Any = None) -> ExecutionOutcome:
        """Run a procedure and wait for it, killing it at the deadline.

        Args:
            procedure: Object with start() returning a handle with wait() and kill()
            timeout_minutes: Deadline in minutes (non-integers use the default)

        Returns:
            ExecutionOutcome with SUCCESS, FAILURE or TIMED_OUT
        """
        minutes = normalize_timeout(timeout_minutes)
        try:
            handle = procedure.start()
        except OSError as e:
            logger.error("Publish step could not be launched: %s", e)
            return ExecutionOutcome(ExecutionStatus.FAILURE, reason=str(e))

        # expired is only set when the kill reached a process still running
        expired = threading.Event()
        lock = threading.Lock()
        finished = False

        def _on_deadline() -> None:
            with lock:
                if finished:
                    return
                expired.set()
                try:
                    handle.kill()
                except OSError as e:
                    logger.debug("Kill after deadline failed: %s", e)

        timer = threading.Timer(minutes * self.seconds_per_minute, _on_deadline)
        timer.daemon = True
        with Timer() as t:
            timer.start()
            try:
                returncode = handle.wait()
                with lock:
                    finished = True
            finally:
                timer.cancel()

        if is_debug_enabled(logger):
            logger.debug(
                "Publish step finished",
                extra=extra_context(
                    event="function_exit",
                    component="executor",
                    action="run_bounded",
                    outcome="timed_out" if expired.is_set() else str(returncode),
                    duration_ms=t.duration_ms()
                )
            )

        if expired.is_set():
            return ExecutionOutcome(
                ExecutionStatus.TIMED_OUT,
                reason=f"timeout after {minutes} mins",
                returncode=returncode,
            )
        if returncode:
            return ExecutionOutcome(
                ExecutionStatus.FAILURE,
                reason=f"failed with exit status: {returncode}",
                returncode=returncode,
            )
        return ExecutionOutcome(ExecutionStatus.SUCCESS, returncode=returncode)
