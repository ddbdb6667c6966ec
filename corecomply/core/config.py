"""
Configuration for the CoreComply setup and evidence core.
All values come from the environment (optionally a .env file).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/corecomply.db")

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Store snapshots are written on every mutation when enabled
PERSISTENCE_ENABLED = os.getenv("PERSISTENCE_ENABLED", "true").lower() == "true"

# Evidence matching
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "0.50"))
MATCH_TOP_N = int(os.getenv("MATCH_TOP_N", "3"))

# Discovery adapters run without a timeout unless one is configured (0 = none)
DISCOVERY_ADAPTER_TIMEOUT_SEC = float(os.getenv("DISCOVERY_ADAPTER_TIMEOUT_SEC", "0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Version string
VERSION = "0.4.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_db_path():
    """Get the SQLite path, re-reading the environment so tests can override it."""
    return os.getenv("DB_PATH", DB_PATH)


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def is_persistence_enabled():
    """Check if store snapshots should be written."""
    return os.getenv("PERSISTENCE_ENABLED", "true").lower() == "true"


def get_match_threshold():
    """Minimum confidence for a match to be retained."""
    return MATCH_THRESHOLD


def get_match_top_n():
    """Maximum obligation references kept on one artifact."""
    return MATCH_TOP_N


def get_adapter_timeout():
    """Per-adapter timeout in seconds, or None when adapters may run unbounded."""
    if DISCOVERY_ADAPTER_TIMEOUT_SEC <= 0:
        return None
    return DISCOVERY_ADAPTER_TIMEOUT_SEC


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if not 0.0 <= MATCH_THRESHOLD <= 1.0:
        issues.append(f"MATCH_THRESHOLD must be within [0, 1]: {MATCH_THRESHOLD}")

    if MATCH_TOP_N < 1:
        issues.append(f"MATCH_TOP_N must be >= 1: {MATCH_TOP_N}")

    if DISCOVERY_ADAPTER_TIMEOUT_SEC < 0:
        issues.append(f"DISCOVERY_ADAPTER_TIMEOUT_SEC must be >= 0: {DISCOVERY_ADAPTER_TIMEOUT_SEC}")

    return issues
