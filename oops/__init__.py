"""
Oops - corrects your previous console command.

Matches a failed command and its output against a ranked catalog of
correction rules, then hands the chosen fix back to the shell.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("oops")
except PackageNotFoundError:
    # Package not installed, fallback to pyproject.toml
    __version__ = "0.1.0"

__author__ = "Oops Contributors"
