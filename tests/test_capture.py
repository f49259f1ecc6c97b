"""Tests for command capture and re-execution."""

import os
import subprocess
import time
from pathlib import Path
from unittest.mock import patch

import psutil
import pytest

from oops.config.models import Settings
from oops.core.exceptions import CaptureSpawnError, CaptureTimeoutError, EmptyCommandError
from oops.executors.capture import capture, is_slow_command, timeout_for

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses /bin/sh")


@posix_only
class TestCapture:
    """Running scripts through the shell."""

    def test_captures_stdout(self):
        result = capture("echo hello", timeout=5)
        assert result.script == "echo hello"
        assert result.output == "hello\n"
        assert result.exit_code == 0

    def test_nonzero_exit_is_not_an_error(self):
        result = capture("echo 'nope' >&2; exit 3", timeout=5)
        assert result.output == "nope\n"
        assert result.exit_code == 3

    def test_stderr_and_stdout_interleaved_in_order(self):
        """Both streams share one pipe, so arrival order is kept."""
        result = capture("echo one; echo two >&2; echo three", timeout=5)
        assert result.output == "one\ntwo\nthree\n"

    def test_env_overlay(self):
        result = capture('echo "$OOPS_TEST_VAR"', timeout=5, env={"OOPS_TEST_VAR": "overlay"})
        assert result.output == "overlay\n"

    def test_inherits_environment(self, monkeypatch):
        monkeypatch.setenv("OOPS_INHERITED", "yes")
        assert capture('echo "$OOPS_INHERITED"', timeout=5).output == "yes\n"

    def test_does_not_read_stdin(self):
        """Commands waiting for input see EOF instead of hanging."""
        result = capture("cat", timeout=5)
        assert result.output == ""
        assert result.exit_code == 0

    def test_timeout_kills_process(self):
        started = time.monotonic()
        with pytest.raises(CaptureTimeoutError) as exc_info:
            capture("sleep 30", timeout=0.3)
        assert time.monotonic() - started < 10
        assert exc_info.value.timeout_seconds == 0.3
        assert exc_info.value.command == "sleep 30"

    def test_timeout_kills_grandchildren(self, tmp_path: Path):
        """Background children of the script do not survive the timeout."""
        pid_file = tmp_path / "pid"
        with pytest.raises(CaptureTimeoutError):
            capture(f"sleep 30 & echo $! > {pid_file}; wait", timeout=0.5)

        pid = int(pid_file.read_text())
        try:
            proc = psutil.Process(pid)
            proc.wait(timeout=3)
        except psutil.NoSuchProcess:
            pass
        assert not psutil.pid_exists(pid) or psutil.Process(pid).status() == psutil.STATUS_ZOMBIE

    def test_timeout_kills_detached_grandchildren(self):
        """Jobs reparented to init cannot keep the output pipe open."""
        started = time.monotonic()
        with pytest.raises(CaptureTimeoutError):
            capture("(sleep 8 &) ; sleep 30", timeout=0.5)
        assert time.monotonic() - started < 3

    def test_exited_shell_with_detached_job_times_out(self):
        """The shell exits at once but a detached job still holds the pipe."""
        started = time.monotonic()
        with pytest.raises(CaptureTimeoutError):
            capture("(sleep 8 &) ; echo started", timeout=0.5)
        assert time.monotonic() - started < 3

    def test_runs_in_own_session(self):
        with patch(
            "oops.executors.capture.subprocess.Popen", wraps=subprocess.Popen
        ) as popen:
            capture("true", timeout=5)
        assert popen.call_args.kwargs["start_new_session"] is True

    def test_spawn_failure(self):
        with patch("oops.executors.capture.subprocess.Popen", side_effect=OSError("no shell")):
            with pytest.raises(CaptureSpawnError) as exc_info:
                capture("ls", timeout=5)
        assert "no shell" in exc_info.value.reason

    def test_empty_script(self):
        with pytest.raises(EmptyCommandError):
            capture("   ", timeout=5)

    def test_spawns_one_process(self):
        with patch(
            "oops.executors.capture.subprocess.Popen", wraps=subprocess.Popen
        ) as popen:
            capture("true", timeout=5)
        assert popen.call_count == 1


class TestSlowCommands:
    """Timeout tier selection."""

    @pytest.mark.parametrize(
        "script",
        ["gradle build", "./gradlew test", "lein", "vagrant up", "sudo gradle build",
         "env gradle", "time lein run", "gradle-wrapper"],
    )
    def test_slow(self, script):
        assert is_slow_command(script, Settings().slow_commands)

    @pytest.mark.parametrize("script", ["git push", "gradlex build", "ls gradle", ""])
    def test_not_slow(self, script):
        assert not is_slow_command(script, Settings().slow_commands)

    def test_timeout_for_tiers(self):
        settings = Settings(wait_command=2, wait_slow_command=20)
        assert timeout_for("ls", settings) == 2
        assert timeout_for("gradle build", settings) == 20

    def test_custom_slow_commands(self):
        settings = Settings(slow_commands=("cargo",))
        assert timeout_for("cargo build", settings) == settings.wait_slow_command
        assert timeout_for("gradle build", settings) == settings.wait_command
