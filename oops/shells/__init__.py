"""
Oops Shells - Shell integration and detection.

The active shell is chosen once per run:
1. TF_SHELL exported by the alias
2. The nearest recognized shell among our ancestor processes (Unix)
3. bash
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import PurePath

import psutil
from loguru import logger

from oops.config.constants import MAX_PROCESS_TREE_DEPTH
from oops.shells.base import Shell
from oops.shells.bash import Bash
from oops.shells.fish import Fish
from oops.shells.powershell import PowerShell
from oops.shells.tcsh import Tcsh
from oops.shells.zsh import Zsh
from oops.utils.logger import log_prefix

SHELLS: dict[str, type[Shell]] = {
    "bash": Bash,
    "zsh": Zsh,
    "fish": Fish,
    "powershell": PowerShell,
    "pwsh": PowerShell,
    "tcsh": Tcsh,
    "csh": Tcsh,
}


def get_shell_by_name(name: str, environ: Mapping[str, str] | None = None) -> Shell | None:
    """
    Instantiate a shell from its name or executable name.

    Accepts paths and .exe suffixes (/usr/bin/zsh, pwsh.exe). Login
    shells reported as "-bash" are recognized too.

    Returns:
        Shell instance, or None for an unknown name
    """
    key = PurePath(name.strip().replace("\\", "/")).stem.lower().lstrip("-")
    shell_cls = SHELLS.get(key)
    return shell_cls(environ) if shell_cls else None


def _detect_from_process_tree(environ: Mapping[str, str] | None) -> Shell | None:
    try:
        proc = psutil.Process().parent()
        for _ in range(MAX_PROCESS_TREE_DEPTH):
            if proc is None:
                break
            shell = get_shell_by_name(proc.name(), environ)
            if shell:
                logger.debug(f"Detected {shell.name} from process {proc.pid}")
                return shell
            proc = proc.parent()
    except psutil.Error as e:
        logger.debug(f"Process tree probe stopped: {e}")
    return None


def detect_shell(environ: Mapping[str, str] | None = None) -> Shell:
    """
    Select the active shell.

    Args:
        environ: Environment to read TF_SHELL from (defaults to os.environ)

    Returns:
        The detected Shell, bash when nothing is recognized
    """
    environ = os.environ if environ is None else environ

    tf_shell = environ.get("TF_SHELL")
    if tf_shell:
        shell = get_shell_by_name(tf_shell, environ)
        if shell:
            logger.debug(f"{log_prefix('🐚')} Shell from TF_SHELL: {shell.name}")
            return shell
        logger.warning(f"{log_prefix('⚠️')} Unknown TF_SHELL value: {tf_shell!r}")

    if os.name != "nt":
        shell = _detect_from_process_tree(environ)
        if shell:
            return shell

    logger.debug(f"{log_prefix('🐚')} Falling back to bash")
    return Bash(environ)


__all__ = [
    "SHELLS",
    "Bash",
    "Fish",
    "PowerShell",
    "Shell",
    "Tcsh",
    "Zsh",
    "detect_shell",
    "get_shell_by_name",
]
