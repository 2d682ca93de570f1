"""
elementor_abilities.commands.config_cmd - Show configuration.
"""

import argparse
import json
import sys
from pathlib import Path

from elementor_abilities.commands.common import load_command_config
from elementor_abilities.config import CONFIG_FILENAME, find_config_file, validate_config


def run(args: argparse.Namespace) -> int:
    """Run the config command."""
    action = getattr(args, "config_action", None)
    if action == "show":
        return cmd_show(args)
    elif action == "path":
        return cmd_path(args)
    else:
        print("Usage: elementor-abilities config {show,path}", file=sys.stderr)
        return 1


def cmd_show(args: argparse.Namespace) -> int:
    config = load_command_config(args)
    print(json.dumps(config, indent=2))
    for problem in validate_config(config):
        print(f"Warning: {problem}", file=sys.stderr)
    return 0


def cmd_path(args: argparse.Namespace) -> int:
    path = getattr(args, "config", None) or find_config_file(Path.cwd())
    if path is None:
        print(f"No {CONFIG_FILENAME} found (using defaults)", file=sys.stderr)
        return 1
    print(Path(path).resolve())
    return 0
