"""Configuration loading for wp-since."""

import copy
import sys
from pathlib import Path
from typing import Any, Dict, Optional
import logging

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "wp_since.toml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "database": "wp_since.db",
    },
    "host": {
        "required_theme": "wporg-developer",
    },
    "report": {
        "ticket_url": "https://core.trac.wordpress.org/ticket/{ticket}",
        "default_format": "text",
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a TOML file, merged over the defaults.

    Args:
        config_path: Path to the configuration file

    Returns:
        Configuration dictionary
    """
    config_file = Path(config_path or DEFAULT_CONFIG_PATH)

    if not config_file.exists():
        if config_path:
            logger.warning(f"Config file not found: {config_path}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_file, 'rb') as f:
        loaded = tomllib.load(f)

    logger.debug(f"Loaded configuration from {config_file}")
    return _merge(DEFAULT_CONFIG, loaded)
