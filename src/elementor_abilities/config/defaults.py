"""
elementor_abilities.config.defaults - Default configuration values.
"""

from typing import Any, Dict

CONFIG_FILENAME = ".elementor-abilities.toml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "store": {
        # memory | json | wp-cli
        "backend": "memory",
        # JSON snapshot loaded into the memory backend, or the file the json
        # backend reads and writes.
        "seed_file": "",
        "wp_cli": "wp",
        "site_path": "",
        "run_as": "",
        "site_url": "http://localhost",
        # Memory/json backends only: whether "elementor flush-css" is available.
        "elementor_loaded": False,
        "timeout": 120,
    },
    "permissions": {
        "capabilities": ["edit_posts"],
    },
    "patch": {
        "allow_delimited": True,
    },
    "templates": {
        "limit": 100,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5050,
    },
    "logging": {
        "level": "WARNING",
        "file": "",
    },
}

STORE_BACKENDS = ("memory", "json", "wp-cli")
