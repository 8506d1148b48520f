"""
Global Configuration and Defaults.

This module centralizes the constants shared by the navigation engine,
the layout engine and the persisted view state, plus the loader for the
optional `.pcgnav/config.yaml` settings file.

Precedence for runtime settings: CLI option > environment variable >
config.yaml > default.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# --- Persisted view state ---
# Bumping this invalidates every entry written under an older namespace.
STORAGE_VERSION = "v1"

# Entries not read or written for this long are treated as absent.
DEFAULT_TTL_HOURS = 3.0

DEFAULT_STATE_DB = Path(".pcgnav/state.db")
DEFAULT_CONFIG_PATH = Path(".pcgnav/config.yaml")

# Key under which the fallback archive is cached (base64).
CACHED_ARCHIVE_KEY = "cachedZipFile"

# --- Artifact layout ---
DATA_DIR = "data"
ARCHIVE_NAME = "data.zip"
DATASRC_QUERY_PARAM = "datasrc"

# --- Live endpoint ---
HTTP_TIMEOUT_SECONDS = 30

# --- CFG layout (Graphviz dot, top to bottom) ---
NODE_WIDTH = 300
RANK_SEPARATION = 100
NODE_SEPARATION = 50
MARGIN_Y = 100

# Estimated statement-table geometry, in pixels.
TABLE_ROW_HEIGHT = 25
TABLE_BORDER = 2
INLINE_ACTION_LINE_HEIGHT = 15
INLINE_ACTION_MARGIN = 4

# --- Environment overrides ---
ENV_DATASRC = "PCGNAV_DATASRC"
ENV_STATE_DB = "PCGNAV_STATE_DB"
ENV_TTL_HOURS = "PCGNAV_TTL_HOURS"


@dataclass
class Settings:
    """
    Resolved runtime settings.

    Attributes:
        datasrc: Root of the live endpoint (None means relative paths).
        state_db: SQLite file backing the persisted view state.
        ttl_hours: Time-to-live of persisted entries, from last access.
    """

    datasrc: Optional[str] = None
    state_db: Path = DEFAULT_STATE_DB
    ttl_hours: float = DEFAULT_TTL_HOURS

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_hours * 3600.0


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {config_path}: expected a mapping")
        return {}
    return data


def load_settings(
    config_path: Optional[Path] = None,
    datasrc: Optional[str] = None,
    state_db: Optional[str] = None,
) -> Settings:
    """
    Resolve settings from config file, environment and explicit overrides.

    Args:
        config_path: Path to config.yaml (defaults to .pcgnav/config.yaml).
        datasrc: Explicit data root, wins over everything else.
        state_db: Explicit state database path.

    Returns:
        Settings: The merged settings.
    """
    data = _read_config_file(config_path or DEFAULT_CONFIG_PATH)
    settings = Settings()

    if data.get("datasrc"):
        settings.datasrc = str(data["datasrc"])
    if data.get("state_db"):
        settings.state_db = Path(data["state_db"])
    if data.get("ttl_hours") is not None:
        settings.ttl_hours = float(data["ttl_hours"])

    if os.getenv(ENV_DATASRC):
        settings.datasrc = os.getenv(ENV_DATASRC)
    if os.getenv(ENV_STATE_DB):
        settings.state_db = Path(os.environ[ENV_STATE_DB])
    if os.getenv(ENV_TTL_HOURS):
        try:
            settings.ttl_hours = float(os.environ[ENV_TTL_HOURS])
        except ValueError:
            logger.warning(f"Ignoring non-numeric {ENV_TTL_HOURS}")

    if datasrc:
        settings.datasrc = datasrc
    if state_db:
        settings.state_db = Path(state_db)

    return settings
