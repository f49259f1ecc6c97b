"""
Oops Config - Settings model.

Pydantic model for the immutable settings snapshot of one run.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from oops.config.constants import (
    DEFAULT_ENV,
    DEFAULT_NUM_CLOSE_MATCHES,
    DEFAULT_SLOW_COMMANDS,
    DEFAULT_WAIT_COMMAND,
    DEFAULT_WAIT_SLOW_COMMAND,
)

# Sentinel enabling every rule that is enabled by default
ALL_RULES = "ALL"


class Settings(BaseModel):
    """User settings, read once at startup and never modified."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    rules: tuple[str, ...] = Field(
        default=(ALL_RULES,), description="Enabled rules, or ALL"
    )
    exclude_rules: tuple[str, ...] = Field(default=(), description="Disabled rules")
    require_confirmation: bool = Field(
        default=True, description="Ask before running the first correction"
    )
    wait_command: float = Field(
        default=DEFAULT_WAIT_COMMAND, gt=0, description="Re-run timeout in seconds"
    )
    wait_slow_command: float = Field(
        default=DEFAULT_WAIT_SLOW_COMMAND, gt=0, description="Re-run timeout for slow commands"
    )
    no_colors: bool = Field(default=False, description="Disable colored output")
    priority: Mapping[str, int] = Field(
        default_factory=dict,
        validate_default=True,
        description="Per-rule priority overrides",
    )
    history_limit: int | None = Field(
        default=None, ge=1, description="Maximum history lines to read"
    )
    alter_history: bool = Field(
        default=True, description="Record the chosen correction in shell history"
    )
    slow_commands: tuple[str, ...] = Field(
        default=DEFAULT_SLOW_COMMANDS, description="Commands given the slow timeout"
    )
    num_close_matches: int = Field(
        default=DEFAULT_NUM_CLOSE_MATCHES, ge=1, description="Fuzzy suggestions per rule"
    )
    excluded_search_path_prefixes: tuple[str, ...] = Field(
        default=(), description="PATH entries ignored when listing executables"
    )
    env: Mapping[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ENV),
        validate_default=True,
        description="Environment overlay for re-executed commands",
    )
    debug: bool = Field(default=False, description="Log debug output to stderr")

    @field_validator("priority", "env", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping) -> Mapping:
        """Freeze mapping fields so the snapshot cannot change after load."""
        return MappingProxyType(dict(value))

    @field_serializer("priority", "env")
    def _serialize_mapping(self, value: Mapping) -> dict:
        return dict(value)
