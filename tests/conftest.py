"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from oops.config.models import Settings
from oops.core.rule import RuleContext
from oops.rules import build_rule_catalog
from oops.shells.bash import Bash
from oops.utils.executables import ExecutableCache

FAKE_EXECUTABLES = ("git", "ls", "python3", "pip3", "apt", "apt-get", "ssh", "vim", "mkdir")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep tests away from the user's shell signals, settings and logs."""
    for name in list(os.environ):
        if name.startswith(("TF_", "THEFUCK_", "OOPS_")):
            monkeypatch.delenv(name, raising=False)
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("OOPS_LOG_FILE", "false")
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("HISTFILE", raising=False)
    return config_home


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """A PATH directory holding a few fake executables."""
    directory = tmp_path / "bin"
    directory.mkdir()
    for name in FAKE_EXECUTABLES:
        program = directory / name
        program.write_text("#!/bin/sh\n")
        program.chmod(program.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return directory


@pytest.fixture
def executables(bin_dir: Path) -> ExecutableCache:
    """Executable cache that only sees bin_dir."""
    return ExecutableCache(probe=lambda name: (bin_dir / name).exists(), path=str(bin_dir))


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def shell() -> Bash:
    return Bash(environ={})


@pytest.fixture
def context(settings: Settings, executables: ExecutableCache, shell: Bash) -> RuleContext:
    return RuleContext(settings=settings, executables=executables, shell=shell)


@pytest.fixture
def rules(context: RuleContext):
    return build_rule_catalog(context)
