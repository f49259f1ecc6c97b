"""
Oops Utils - Executable lookup.

Answers "does this program exist on PATH?" once per name per process.
Rules may call it concurrently from the corrector's worker threads.
"""

from __future__ import annotations

import os
import re
import shutil
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from oops.config.constants import OWN_EXECUTABLES

_WINDOWS_EXTENSIONS = (".exe", ".cmd", ".bat", ".com", ".ps1")


def _which_probe(name: str) -> bool:
    # shutil.which tries PATHEXT extensions on Windows
    return shutil.which(name) is not None


class ExecutableCache:
    """
    Memoized, thread-safe PATH lookup.

    Entries are written once and never invalidated. Each name gets its own
    lock so concurrent callers asking for the same name share one probe
    while lookups of different names proceed in parallel.

    Args:
        probe: Function doing the real lookup (defaults to shutil.which).
        excluded_prefixes: PATH entries ignored by all_executables().
        path: PATH value to scan (defaults to $PATH).
    """

    def __init__(
        self,
        probe: Callable[[str], bool] | None = None,
        excluded_prefixes: Iterable[str] = (),
        path: str | None = None,
    ) -> None:
        self._probe = probe or _which_probe
        self._excluded_prefixes = tuple(excluded_prefixes)
        self._path = path
        self._results: dict[str, bool] = {}
        self._name_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()
        self._all: frozenset[str] | None = None
        self.probe_count = 0

    def exists(self, name: str) -> bool:
        """Return True if name resolves to a program on PATH."""
        if not name:
            return False

        # Fast path: resolved names never change
        result = self._results.get(name)
        if result is not None:
            return result

        with self._lock:
            name_lock = self._name_locks.setdefault(name, threading.Lock())

        with name_lock:
            result = self._results.get(name)
            if result is not None:
                return result
            result = bool(self._probe(name))
            with self._lock:
                self.probe_count += 1
                self._results[name] = result

        logger.trace(f"Executable lookup {name!r}: {result}")
        return result

    def all_executables(self) -> frozenset[str]:
        """
        Names of every executable file on PATH.

        Scanned once. Our own entry points are left out so they are never
        suggested as corrections.
        """
        if self._all is not None:
            return self._all

        with self._lock:
            if self._all is None:
                self._all = frozenset(self._scan_path())
                logger.debug(f"Found {len(self._all)} executables on PATH")
        return self._all

    def _scan_path(self) -> set[str]:
        path_value = self._path if self._path is not None else os.environ.get("PATH", "")
        names: set[str] = set()

        for entry in path_value.split(os.pathsep):
            if not entry or entry.startswith(self._excluded_prefixes):
                continue
            directory = Path(entry)
            try:
                children = list(directory.iterdir())
            except OSError:
                continue
            for child in children:
                if _is_executable(child):
                    names.add(child.name)
                    if os.name == "nt":
                        names.add(child.stem)

        return names - OWN_EXECUTABLES


def _is_executable(path: Path) -> bool:
    try:
        if path.is_dir():
            return False
    except OSError:
        return False
    if os.name == "nt":
        return path.suffix.lower() in _WINDOWS_EXTENSIONS
    return os.access(path, os.X_OK)


def replace_argument(script: str, from_: str, to: str) -> str:
    """
    Replace one argument of a script.

    A trailing argument is replaced first, then the first occurrence
    surrounded by spaces. The script is returned unchanged
    when from_ is not a standalone word.
    """
    escaped = re.escape(from_)
    replaced = re.sub(rf" {escaped}$", lambda _: f" {to}", script, count=1)
    if replaced != script:
        return replaced
    return script.replace(f" {from_} ", f" {to} ", 1)
