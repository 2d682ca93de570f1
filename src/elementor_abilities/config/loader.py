"""
elementor_abilities.config.loader - Configuration file discovery and loading.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomlkit
from tomlkit.exceptions import ParseError

from elementor_abilities.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, STORE_BACKENDS


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is invalid."""


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """Walk up from ``start_path`` looking for ``.elementor-abilities.toml``.

    Returns:
        Path to the config file, or None if not found.
    """
    current = Path(start_path or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def parse_toml_document(content: str) -> Dict[str, Any]:
    """Parse TOML text into plain Python containers."""
    try:
        return tomlkit.parse(content).unwrap()
    except ParseError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def merge_configs(defaults: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``user`` over ``defaults`` without mutating either."""
    merged = copy.deepcopy(defaults)
    for key, value in user.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load a config file and merge it over the defaults."""
    try:
        content = Path(config_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    return merge_configs(DEFAULT_CONFIG, parse_toml_document(content))


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Return a list of problems with ``config`` (empty when valid)."""
    errors: List[str] = []

    store = config.get("store", {})
    backend = store.get("backend")
    if backend not in STORE_BACKENDS:
        errors.append(
            f"store.backend must be one of {', '.join(STORE_BACKENDS)} (got {backend!r})"
        )
    if backend == "json" and not store.get("seed_file"):
        errors.append("store.seed_file is required for the json backend")
    if backend == "wp-cli" and not store.get("site_path"):
        errors.append("store.site_path is required for the wp-cli backend")
    if not isinstance(store.get("timeout"), int) or store.get("timeout") <= 0:
        errors.append("store.timeout must be a positive integer")

    capabilities = config.get("permissions", {}).get("capabilities")
    if not isinstance(capabilities, list) or not all(isinstance(c, str) for c in capabilities):
        errors.append("permissions.capabilities must be a list of strings")

    limit = config.get("templates", {}).get("limit")
    if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
        errors.append("templates.limit must be a positive integer")

    port = config.get("server", {}).get("port")
    if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
        errors.append("server.port must be an integer between 1 and 65535")

    return errors
