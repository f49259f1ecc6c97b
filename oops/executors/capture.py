"""
Oops Executors - Command capture.

Re-runs the failed command in a child shell, collecting stdout and
stderr as one stream in arrival order, and kills the whole process tree
if it outlives its timeout.
"""

from __future__ import annotations

import os
import signal
import subprocess
import time
from collections.abc import Mapping

import psutil
from loguru import logger

from oops.config.models import Settings
from oops.core.exceptions import CaptureSpawnError, CaptureTimeoutError, EmptyCommandError
from oops.core.types import CapturedCommand
from oops.utils.logger import log_prefix
from oops.utils.security import redact_sensitive_info

# Wrappers that do not change which program is slow
_TRANSPARENT_PREFIXES = ("sudo ", "sudo -e ", "env ", "time ")

# Seconds to wait for the pipe to close once the process tree is dead
_DRAIN_TIMEOUT = 1.0


def _shell_argv(script: str, shell_name: str | None) -> list[str]:
    if os.name == "nt":
        if shell_name == "powershell":
            return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]
        return ["cmd", "/C", script]
    return ["/bin/sh", "-c", script]


def _kill_tree(pid: int) -> None:
    """
    Kill a process, its descendants and its process group.

    Background jobs reparented to init are no longer descendants but stay
    in the group created at spawn, so the group kill reaches them.
    """
    procs: list[psutil.Process] = []
    try:
        parent = psutil.Process(pid)
        procs = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        logger.debug(f"Process {pid} already gone, killing its group only")

    for proc in procs:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            continue

    if os.name != "nt":
        try:
            os.killpg(pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError as e:
            logger.warning(f"{log_prefix('⚠️')} Cannot kill process group {pid}: {e}")

    _, alive = psutil.wait_procs(procs, timeout=1)
    for proc in alive:
        logger.warning(f"{log_prefix('⚠️')} Process {proc.pid} survived kill")


def _drain(proc: subprocess.Popen) -> None:
    """Reap a killed process without waiting on a pipe someone else holds."""
    try:
        proc.communicate(timeout=_DRAIN_TIMEOUT)
    except subprocess.TimeoutExpired:
        logger.warning(
            f"{log_prefix('⚠️')} Output pipe of process {proc.pid} still open after kill, "
            "abandoning it"
        )
        if proc.stdout:
            proc.stdout.close()
        proc.kill()
        proc.wait()


def capture(
    script: str,
    timeout: float,
    *,
    env: Mapping[str, str] | None = None,
    shell_name: str | None = None,
) -> CapturedCommand:
    """
    Run a script and capture its combined output.

    Exactly one child process is spawned. A nonzero exit status is the
    normal case and is reported in exit_code rather than raised.

    Args:
        script: Command line to run.
        timeout: Seconds to wait before killing the process tree.
        env: Variables overlaid on the current environment.
        shell_name: Active shell, used to pick the interpreter on Windows.

    Returns:
        CapturedCommand with output and exit status.

    Raises:
        EmptyCommandError: If script is blank.
        CaptureSpawnError: If the process cannot be started.
        CaptureTimeoutError: If the process had to be killed.
    """
    if not script.strip():
        raise EmptyCommandError()

    child_env = dict(os.environ)
    if env:
        child_env.update(env)

    safe_script = redact_sensitive_info(script)
    logger.debug(f"Re-running {safe_script!r} (timeout {timeout:g}s)")
    started = time.monotonic()

    try:
        proc = subprocess.Popen(
            _shell_argv(script, shell_name),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            env=child_env,
            encoding="utf-8",
            errors="replace",
            start_new_session=os.name != "nt",
        )
    except OSError as e:
        logger.error(f"{log_prefix('❌')} Failed to spawn {safe_script!r}: {e}")
        raise CaptureSpawnError(script, str(e)) from e

    try:
        output, _ = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired as e:
        logger.warning(f"{log_prefix('⏱️')} {safe_script!r} timed out after {timeout:g}s, killing")
        _kill_tree(proc.pid)
        _drain(proc)
        raise CaptureTimeoutError(script, timeout) from e

    logger.debug(
        f"{safe_script!r} exited with {proc.returncode} "
        f"in {time.monotonic() - started:.2f}s"
    )
    return CapturedCommand(script=script, output=output or "", exit_code=proc.returncode)


def is_slow_command(script: str, slow_commands: tuple[str, ...] | list[str]) -> bool:
    """
    Check whether a script starts one of the slow commands.

    sudo, env and time wrappers are looked through.
    """
    lowered = script.strip().lower()
    for prefix in _TRANSPARENT_PREFIXES:
        if lowered.startswith(prefix):
            lowered = lowered[len(prefix):].lstrip()
            break

    for slow in slow_commands:
        slow = slow.lower()
        if not lowered.startswith(slow):
            continue
        rest = lowered[len(slow):]
        if not rest or rest[0] in " \t-":
            return True
    return False


def timeout_for(script: str, settings: Settings) -> float:
    """Pick the timeout tier for a script."""
    if is_slow_command(script, settings.slow_commands):
        return settings.wait_slow_command
    return settings.wait_command
