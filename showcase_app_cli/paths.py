"""CLI path policy.

Centralizes where the app keeps its settings and persistent data.
"""

import os
from pathlib import Path

DATA_DIR_ENV = "SHOWCASE_DATA_DIR"


def get_showcase_home() -> Path:
    """Get the user-level app directory (~/.showcase)."""
    return Path.home() / ".showcase"


def get_data_dir() -> Path:
    """Get the persistent data directory for catalog files.

    Returns:
        $SHOWCASE_DATA_DIR if set, otherwise ~/.showcase/data
    """
    if env_value := os.getenv(DATA_DIR_ENV):
        return Path(env_value).expanduser()
    return get_showcase_home() / "data"
