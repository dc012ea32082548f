"""repodesk constants and enumerations."""

from enum import StrEnum


class MergePhase(StrEnum):
    """Where a checkout-then-merge stopped."""

    CHECKOUT_FAILED = "checkout_failed"
    MERGE_FAILED = "merge_failed"
    CONFLICTED = "conflicted"
    MERGED = "merged"


# Defaults
DEFAULT_GIT_BINARY = "git"
DEFAULT_TIMEOUT_SECONDS = 300
DEFAULT_REMOTE = "origin"
DEFAULT_PUSH_BRANCH = "main"

# Paths
GIT_DIR_MARKER = ".git"
CONFIG_FILE = ".repodesk/config.yaml"
LOGS_DIR = ".repodesk/logs"

# Environment
GIT_TERMINAL_PROMPT = "GIT_TERMINAL_PROMPT"

# Serialized command output is cut to this many characters
OUTPUT_TRUNCATE_CHARS = 2000
