"""Loading and validation of the guard's JSON configuration.

Configuration is optional. Built-in defaults reproduce the plain
`go build` workflow; a JSON file (given with `-c`, or `buildguard.json` in the
invocation directory) can override any of them section by section.
"""

import copy
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

from buildguard.core.scope import SCOPE_MODES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "buildguard.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "git": {"executable": "git"},
    "build": {
        "tool": "go",
        "subcommand": "build",
        "package": "main",
        "date_variable": "buildDate",
        "hash_variable": "commitHash",
    },
    "scope": {"mode": "prefix"},
    "logging": {
        "log_level": "WARNING",
        "log_to_console": True,
        "log_dir": None,
        "log_count": 5,
    },
}

REQUIRED_STRINGS = {
    "git": ["executable"],
    "build": ["tool", "subcommand", "package", "date_variable", "hash_variable"],
    "scope": ["mode"],
}


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merges `override` into a copy of `base`.

    Nested dictionaries are merged key by key; any other value in `override`
    replaces the one in `base`. Neither input is modified.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Loads the configuration, falling back to the defaults.

    Args:
        config_path (Optional[str]): Path to a JSON configuration file. When
            omitted, `buildguard.json` in the current directory is used if it
            exists.

    Returns:
        Dict[str, Any]: The defaults merged with the file contents.
    """
    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_FILENAME):
            return copy.deepcopy(DEFAULT_CONFIG)
        config_path = DEFAULT_CONFIG_FILENAME

    if not os.path.exists(config_path):
        logger.error(f"Config file not found at '{config_path}'")
        sys.exit(2)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            file_config = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Error reading or parsing config file '{config_path}': {e}")
        sys.exit(2)

    if not isinstance(file_config, dict):
        logger.error(f"Config file '{config_path}' must contain a JSON object")
        sys.exit(2)

    logger.debug("Configuration loaded", extra={"config_source": os.path.abspath(config_path)})
    return merge_configs(DEFAULT_CONFIG, file_config)


def validate_config(config: Dict[str, Any]) -> None:
    """Validates the merged configuration, exiting with status 2 on error."""
    for section, keys in REQUIRED_STRINGS.items():
        section_config = config.get(section)
        if not isinstance(section_config, dict):
            logger.error(f"Missing required config section: '{section}'")
            sys.exit(2)
        for key in keys:
            value = section_config.get(key)
            if not isinstance(value, str) or not value:
                logger.error(
                    f"Config key '{section}.{key}' must be a non-empty string, got {value!r}"
                )
                sys.exit(2)

    mode = config["scope"]["mode"]
    if mode not in SCOPE_MODES:
        logger.error(f"Invalid scope mode '{mode}'. Expected one of {SCOPE_MODES}")
        sys.exit(2)

    if not isinstance(config.get("logging"), dict):
        logger.error("Missing required config section: 'logging'")
        sys.exit(2)

    log_count = config["logging"].get("log_count", 5)
    if not isinstance(log_count, int) or isinstance(log_count, bool) or log_count < 1:
        logger.error(f"Config key 'logging.log_count' must be a positive integer, got {log_count!r}")
        sys.exit(2)

    log_dir = config["logging"].get("log_dir")
    if log_dir is not None and (not isinstance(log_dir, str) or not log_dir):
        logger.error(f"Config key 'logging.log_dir' must be null or a non-empty string, got {log_dir!r}")
        sys.exit(2)

    log_to_console = config["logging"].get("log_to_console", True)
    if not isinstance(log_to_console, bool):
        logger.error(f"Config key 'logging.log_to_console' must be a boolean, got {log_to_console!r}")
        sys.exit(2)
