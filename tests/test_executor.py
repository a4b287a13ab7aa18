"""Tests for the time-bounded publish executor."""

import json
import threading
import time
from unittest.mock import patch, MagicMock

from publish.executor import SubprocessProcedure, TaskExecutor, normalize_timeout
from publish.models import ExecutionStatus


class _Handle:
    """Process handle that exits with a code, or hangs until killed."""

    def __init__(self, returncode=0, hang=False):
        self.returncode = returncode
        self.hang = hang
        self.killed = threading.Event()

    def wait(self):
        if self.hang:
            self.killed.wait(10)
            return -9
        return self.returncode

    def kill(self):
        self.killed.set()


class _Procedure:
    def __init__(self, handle=None, error=None):
        self.handle = handle
        self.error = error

    def start(self):
        if self.error:
            raise self.error
        return self.handle


class TestRunBounded:
    """Test TaskExecutor.run_bounded outcomes."""

    def test_success(self):
        outcome = TaskExecutor().run_bounded(_Procedure(_Handle(0)), 5)
        assert outcome.status is ExecutionStatus.SUCCESS
        assert outcome.ok

    def test_non_zero_exit(self):
        outcome = TaskExecutor().run_bounded(_Procedure(_Handle(3)), 5)
        assert outcome.status is ExecutionStatus.FAILURE
        assert outcome.reason == "failed with exit status: 3"
        assert outcome.returncode == 3

    def test_launch_error(self):
        outcome = TaskExecutor().run_bounded(_Procedure(error=FileNotFoundError("no such command")), 5)
        assert outcome.status is ExecutionStatus.FAILURE
        assert "no such command" in outcome.reason

    def test_timeout_kills_process(self):
        """Test a hanging procedure is killed at the deadline."""
        handle = _Handle(hang=True)
        executor = TaskExecutor(seconds_per_minute=0.05)
        started = time.monotonic()
        outcome = executor.run_bounded(_Procedure(handle), 1)
        elapsed = time.monotonic() - started

        assert outcome.status is ExecutionStatus.TIMED_OUT
        assert outcome.reason == "timeout after 1 mins"
        assert handle.killed.is_set()
        assert elapsed < 5

    def test_timer_cancelled_after_completion(self):
        """Test the deadline timer is disarmed once the procedure ends."""
        with patch('publish.executor.threading.Timer') as mock_timer:
            timer = MagicMock()
            mock_timer.return_value = timer
            TaskExecutor().run_bounded(_Procedure(_Handle(0)), 2)
        assert mock_timer.call_args[0][0] == 120.0
        timer.start.assert_called_once()
        timer.cancel.assert_called_once()

    def test_timer_cancelled_when_wait_raises(self):
        handle = MagicMock()
        handle.wait.side_effect = KeyboardInterrupt
        with patch('publish.executor.threading.Timer') as mock_timer:
            timer = MagicMock()
            mock_timer.return_value = timer
            try:
                TaskExecutor().run_bounded(_Procedure(handle), 1)
            except KeyboardInterrupt:
                pass
        timer.cancel.assert_called_once()

    def test_deadline_racing_completion_keeps_success(self):
        """Test a deadline firing just after the procedure exits does not mark it timed out."""
        class _LateTimer:
            def __init__(self, interval, callback):
                self.callback = callback
                self.daemon = False

            def start(self):
                pass

            def cancel(self):
                self.callback()

        handle = _Handle(0)
        with patch('publish.executor.threading.Timer', _LateTimer):
            outcome = TaskExecutor().run_bounded(_Procedure(handle), 1)
        assert outcome.status is ExecutionStatus.SUCCESS
        assert not handle.killed.is_set()

    def test_no_late_kill(self):
        """Test a finished procedure is never killed afterwards."""
        handle = _Handle(0)
        TaskExecutor(seconds_per_minute=0.01).run_bounded(_Procedure(handle), 1)
        time.sleep(0.05)
        assert not handle.killed.is_set()


class TestNormalizeTimeout:
    def test_defaults(self):
        assert normalize_timeout(None) == 5
        assert normalize_timeout("10") == 5
        assert normalize_timeout(2.5) == 5
        assert normalize_timeout(True) == 5
        assert normalize_timeout(0) == 5
        assert normalize_timeout(12) == 12


class TestSubprocessProcedure:
    """Test how the publish command is launched."""

    @patch('publish.executor.subprocess.Popen')
    def test_popen_arguments(self, mock_popen):
        payload = {"extension": {"id": "acme.ext"}, "context": {"ref": "v1"}}
        procedure = SubprocessProcedure(["node", "publish-extension.js"], payload, env={"PATH": "/bin"}, cwd="/work")
        procedure.start()

        args, kwargs = mock_popen.call_args
        argv = args[0]
        assert argv[:2] == ["node", "publish-extension.js"]
        assert json.loads(argv[2]) == payload
        assert kwargs["stdin"] is not None
        assert kwargs["stdout"] is None and kwargs["stderr"] is None
        assert kwargs["cwd"] == "/work"
        assert kwargs["env"] == {"PATH": "/bin", "NODE_ENV": "development"}
