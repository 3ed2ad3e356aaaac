"""Configuration paths and heuristic constants for argonav."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("ARGONAV_HOME", str(Path.home() / ".argonav"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------
YAML_EXTENSIONS = (".yaml", ".yml")

IGNORED_DIRS = frozenset({
    "node_modules", ".git", ".vscode", "dist", "build", "out", "target",
})

MAX_DEPTH = 10
DIRECTORY_CONCURRENCY = 20

# ---------------------------------------------------------------------------
# Scanning and caching
# ---------------------------------------------------------------------------
FILE_CONCURRENCY = 10
CONTENT_CACHE_TIMEOUT = 30.0  # seconds
CONTENT_CACHE_SWEEP_THRESHOLD = 100
WORKSPACE_CACHE_TIMEOUT = 300.0  # seconds

# ---------------------------------------------------------------------------
# Line-window bounds used by the heuristics
# ---------------------------------------------------------------------------
TEMPLATE_REF_BLOCK_LINES = 10
WORKFLOW_TEMPLATE_REF_LINES = 5

TEMPLATES_SECTION_LOOKBACK = 50
WORKFLOW_TEMPLATE_NAME_LOOKAHEAD = 20
METADATA_LOOKBACK = 20
TEMPLATE_REF_LOOKBACK = 15
TEMPLATE_REF_LOOKAHEAD_PAST_CURSOR = 3
TEMPLATE_REF_NAME_LOOKBACK = 5

MIN_TOKEN_LENGTH = 2

# Names so common that an empty lookup is not worth a warning.
QUIET_NAMES = frozenset({"main", "default"})
