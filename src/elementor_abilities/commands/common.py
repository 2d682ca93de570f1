"""
elementor_abilities.commands.common - Config and logging setup shared by commands.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Dict

from elementor_abilities.config import get_config
from elementor_abilities.utilities.logs import configure_logging


def load_command_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Load config and apply the global ``--store``/``--site-path``/``--seed-file`` flags."""
    config = get_config(config_path=getattr(args, "config", None), quiet=True)
    store = config.setdefault("store", {})
    if getattr(args, "store", None):
        store["backend"] = args.store
    if getattr(args, "site_path", None):
        store["site_path"] = str(args.site_path)
        if not getattr(args, "store", None):
            store["backend"] = "wp-cli"
    if getattr(args, "seed_file", None):
        store["seed_file"] = str(args.seed_file)
    return config


def setup_logging(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    """Configure logging from ``-v``/``-q`` and the ``[logging]`` section."""
    settings = config.get("logging", {})
    level: Any = settings.get("level", "WARNING")
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    configure_logging(level, settings.get("file") or None)
