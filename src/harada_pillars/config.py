"""Configuration constants for harada-pillars."""

import os
from pathlib import Path

# Tree shape. Every expanded node has exactly FANOUT children.
FANOUT: int = 8
MAX_LEVEL: int = 7

# The only level whose "blocked" status is inherited by descendants.
BLOCKING_LEVEL: int = 2

# Nodes at this level may carry checklist items that override their progress.
CHECKLIST_LEVEL: int = 3

# Levels generated eagerly by create_tree; deeper levels are expanded lazily.
DEFAULT_INITIAL_DEPTH: int = 3

# Main goals and sub-goals cannot be deleted or overwritten.
MIN_DELETABLE_LEVEL: int = 3

# Limits on user-edited node fields.
TITLE_MAX_LENGTH: int = 200
DESCRIPTION_MAX_LENGTH: int = 5000
TIMEZONE_MAX_LENGTH: int = 50

# Title search ignores shorter queries and caps its result count.
SEARCH_MIN_QUERY_LENGTH: int = 2
SEARCH_RESULT_LIMIT: int = 20

# Owner recorded on nodes created through the local CLI.
LOCAL_USER_ID: str = "local"

DATA_DIR_ENV_VAR: str = "HARADA_PILLARS_DATA_DIR"
LOG_LEVEL_ENV_VAR: str = "HARADA_PILLARS_LOG_LEVEL"

# Directory with the planner database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/harada-pillars").expanduser(),
    Path("~/.harada-pillars").expanduser(),
]


def resolve_data_directory() -> Path:
    """Return the data directory, preferring the environment override."""
    override = os.environ.get(DATA_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
