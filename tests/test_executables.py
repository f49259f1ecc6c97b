"""Tests for the executable lookup cache."""

import threading
import time
from pathlib import Path

from oops.utils.executables import ExecutableCache, replace_argument


class TestExists:
    """Memoized PATH probing."""

    def test_probes_once_per_name(self):
        """Later lookups are served from the cache."""
        calls = []
        cache = ExecutableCache(probe=lambda name: calls.append(name) or name == "git")

        assert cache.exists("git") is True
        assert cache.exists("git") is True
        assert cache.exists("gti") is False
        assert cache.exists("gti") is False

        assert calls == ["git", "gti"]
        assert cache.probe_count == 2

    def test_empty_name(self):
        cache = ExecutableCache(probe=lambda name: True)
        assert cache.exists("") is False
        assert cache.probe_count == 0

    def test_concurrent_same_name_single_probe(self):
        """Threads asking for one name share a single probe."""
        def slow_probe(name):
            time.sleep(0.05)
            return True

        cache = ExecutableCache(probe=slow_probe)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(cache.exists("git"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True] * 8
        assert cache.probe_count == 1

    def test_concurrent_different_names(self):
        """Distinct names are each probed exactly once."""
        cache = ExecutableCache(probe=lambda name: name.startswith("g"))
        names = [f"{prefix}{i}" for prefix in "gx" for i in range(20)]

        threads = [threading.Thread(target=cache.exists, args=(name,)) for name in names * 3]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.probe_count == len(names)
        assert cache.exists("g3") is True
        assert cache.exists("x3") is False

    def test_default_probe_uses_which(self, monkeypatch):
        monkeypatch.setattr("oops.utils.executables.shutil.which", lambda name: f"/usr/bin/{name}")
        assert ExecutableCache().exists("anything") is True


class TestAllExecutables:
    """PATH scanning."""

    def test_lists_executables(self, bin_dir: Path):
        names = ExecutableCache(path=str(bin_dir)).all_executables()
        assert {"git", "ls", "python3"} <= names

    def test_skips_non_executable_files(self, bin_dir: Path):
        (bin_dir / "README").write_text("not a program")
        assert "README" not in ExecutableCache(path=str(bin_dir)).all_executables()

    def test_skips_own_entry_points(self, bin_dir: Path):
        program = bin_dir / "oops"
        program.write_text("#!/bin/sh\n")
        program.chmod(0o755)
        assert "oops" not in ExecutableCache(path=str(bin_dir)).all_executables()

    def test_excluded_prefixes(self, bin_dir: Path):
        cache = ExecutableCache(path=str(bin_dir), excluded_prefixes=[str(bin_dir)])
        assert cache.all_executables() == frozenset()

    def test_missing_directory(self, tmp_path: Path):
        cache = ExecutableCache(path=str(tmp_path / "nope"))
        assert cache.all_executables() == frozenset()

    def test_scanned_once(self, bin_dir: Path):
        cache = ExecutableCache(path=str(bin_dir))
        first = cache.all_executables()
        (bin_dir / "newtool").write_text("")
        (bin_dir / "newtool").chmod(0o755)
        assert cache.all_executables() is first


class TestReplaceArgument:
    """Argument substitution in scripts."""

    def test_trailing_argument(self):
        assert replace_argument("git psuh", "psuh", "push") == "git push"

    def test_middle_argument(self):
        assert replace_argument("git psuh origin main", "psuh", "push") == "git push origin main"

    def test_not_a_word(self):
        assert replace_argument("git pushy", "push", "pull") == "git pushy"

    def test_special_characters(self):
        assert replace_argument("ls a.b", "a.b", r"c\d") == r"ls c\d"
