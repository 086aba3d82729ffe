"""Runtime configuration for codecoach - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from codecoach.utils.logging import logger

DEFAULTS = {
    "limits": {
        "max_source_bytes": 256 * 1024,
        "max_tree_depth": 400,
        "max_scan_depth": 20,
        "max_surfaced_issues": 5,
        "max_top_issues": 3,
        "max_prioritized_issues": 3,
        "max_context_items": 5,
    },
    "eslint": {
        "enabled": True,
        "binary": "eslint",
        "timeout": 30,
        "project_dir": ".",
    },
    "paths": {
        "curriculum": "",
        "error_log": "./.codecoach/error.log",
    },
}

CONFIG_FILE = Path(".codecoach") / "config.json"

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off"])


def _coerce(value: str, default: Any) -> Any:
    """Convert an environment string to the type of its default."""
    if isinstance(default, bool):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected a boolean, got {value!r}")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, list):
        return [v.strip() for v in value.split(",")]
    return value


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .codecoach/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (CODECOACH_* prefixed)
    2. .codecoach/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / CONFIG_FILE
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"CODECOACH_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce(value, cfg[section][key])
                except (ValueError, AttributeError) as e:
                    logger.warning(
                        f"Invalid value for environment variable {env_var}: '{value}' - {e}"
                    )
                    logger.info(f"Using default value: {cfg[section][key]}")

    return cfg
