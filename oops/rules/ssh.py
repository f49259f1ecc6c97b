"""
Oops Rules - Changed SSH host keys.
"""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

from oops.core.rule import Rule, for_app
from oops.core.types import CapturedCommand
from oops.utils.logger import log_prefix

_CHANGED_KEY_PATTERNS = (
    re.compile(r"WARNING: REMOTE HOST IDENTIFICATION HAS CHANGED!"),
    re.compile(r"WARNING: POSSIBLE DNS SPOOFING DETECTED!"),
    re.compile(
        r"Warning: the \S+ host key for '[^']+' differs from the key for the IP address '[^']+'"
    ),
)

_OFFENDING_KEY = re.compile(
    r"(?:Offending (?:key for IP|\S+ key)|Matching host key) in ([^:]+):(\d+)"
)


class SshKnownHostsRule(Rule):
    """
    Forget a changed host key and retry.

    The candidate is the unchanged command; choosing it removes the
    offending known_hosts lines reported by ssh.
    """

    name = "ssh_known_hosts"

    @for_app("ssh", "scp")
    def is_match(self, command: CapturedCommand) -> bool:
        return any(pattern.search(command.output) for pattern in _CHANGED_KEY_PATTERNS)

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        return [command.script]

    def side_effect(self, old_command: CapturedCommand, new_script: str) -> None:
        # ssh reports 1-based line numbers, possibly several per file
        offending: dict[str, set[int]] = {}
        for path, line_number in _OFFENDING_KEY.findall(old_command.output):
            offending.setdefault(path, set()).add(int(line_number))

        for path, line_numbers in offending.items():
            known_hosts = Path(path).expanduser()
            if not known_hosts.is_file():
                logger.warning(f"{log_prefix('⚠️')} known_hosts file not found: {known_hosts}")
                continue
            lines = known_hosts.read_text().splitlines(keepends=True)
            kept = [
                line for number, line in enumerate(lines, start=1)
                if number not in line_numbers
            ]
            known_hosts.write_text("".join(kept))
            logger.info(
                f"{log_prefix('📁')} Removed {len(lines) - len(kept)} line(s) from {known_hosts}"
            )
