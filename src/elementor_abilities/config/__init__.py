"""
elementor_abilities.config - Configuration loading and defaults
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from elementor_abilities.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from elementor_abilities.config.loader import (
    ConfigError,
    find_config_file,
    load_config,
    merge_configs,
    parse_toml_document,
    validate_config,
)

ENV_PREFIX = "ELEMENTOR_ABILITIES_"


def _try_parse_env_value(value: str) -> Any:
    """Parse JSON arrays/objects, booleans and digit strings; anything else stays a string."""
    stripped = value.strip()
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except ValueError:
            return value
    if stripped.isdigit():
        return int(stripped)
    return value


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ``ELEMENTOR_ABILITIES_<SECTION>_<KEY>`` environment overrides.

    The first segment after the prefix names the section, the rest (lower-cased)
    is the key, so ``ELEMENTOR_ABILITIES_STORE_SITE_PATH`` sets
    ``config["store"]["site_path"]``.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        remainder = name[len(ENV_PREFIX):].lower()
        section, _, key = remainder.partition("_")
        if not section or not key:
            continue
        target = config.setdefault(section, {})
        if isinstance(target, dict):
            target[key] = _try_parse_env_value(raw)
    return config


def get_config(
    config_path: Optional[Path] = None,
    start_path: Optional[Path] = None,
    quiet: bool = False,
) -> Dict[str, Any]:
    """Load the effective configuration.

    Uses ``config_path`` when given, otherwise searches upward from
    ``start_path`` (default: cwd). Falls back to the defaults when no file is
    found. Environment overrides are applied last.
    """
    path = config_path or find_config_file(start_path or Path.cwd())
    if path is not None:
        config = load_config(path)
    else:
        if not quiet:
            print(
                f"No {CONFIG_FILENAME} found; using default configuration.",
                file=sys.stderr,
            )
        config = merge_configs(DEFAULT_CONFIG, {})
    return _apply_env_overrides(config)


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml_document",
    "validate_config",
]
