"""
Oops Configuration Constants.

Centralized constants for timeouts, limits, and shell integration names.
"""

# Re-execution timeouts (seconds)
DEFAULT_WAIT_COMMAND = 3.0
DEFAULT_WAIT_SLOW_COMMAND = 15.0

# Commands known to start slowly (build tools, VMs)
DEFAULT_SLOW_COMMANDS = ("lein", "react-native", "gradle", "./gradlew", "vagrant")

# Fuzzy matching
DEFAULT_NUM_CLOSE_MATCHES = 3
DEFAULT_CUTOFF = 0.6
DIFF_WITH_ALIAS = 0.5  # Below this similarity a history line is not an alias call

# Environment overlay for re-executed commands (stable, untranslated output)
DEFAULT_ENV = {"LC_ALL": "C", "LANG": "C"}

# Shell integration
DEFAULT_ALIAS = "oops"
ARGUMENT_PLACEHOLDER = "THEFUCK_ARGUMENT_PLACEHOLDER"
DEFAULT_HISTORY_LIMIT = 10
MAX_PROCESS_TREE_DEPTH = 10

# Our own entry points, never suggested as corrections
OWN_EXECUTABLES = frozenset({"oops", "fuck", "thefuck", "tf"})

# Environment variable prefixes read by the settings loader
ENV_PREFIXES = ("THEFUCK_", "OOPS_")
