"""
Oops UI - Terminal interaction on stderr.
"""

from oops.ui.console import ConsoleUI

__all__ = ["ConsoleUI"]
