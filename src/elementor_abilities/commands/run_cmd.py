"""
elementor_abilities.commands.run_cmd - Execute one ability.

Prints the result envelope as JSON on stdout. Exit code is 0 when the
envelope reports success and 1 otherwise.
"""

import argparse
import json
import sys
from pathlib import Path

from elementor_abilities.abilities import create_registry
from elementor_abilities.commands.common import load_command_config, setup_logging
from elementor_abilities.factory import build_context


def _read_input(args: argparse.Namespace):
    if getattr(args, "input_file", None):
        text = Path(args.input_file).read_text(encoding="utf-8")
    elif getattr(args, "input", None):
        text = args.input
    else:
        return {}
    return json.loads(text)


def run(args: argparse.Namespace) -> int:
    """Run the run command."""
    try:
        payload = _read_input(args)
    except (OSError, ValueError) as e:
        print(f"Error: cannot read input: {e}", file=sys.stderr)
        return 1

    config = load_command_config(args)
    setup_logging(args, config)
    context = build_context(config)

    result = create_registry().run(args.name, payload, context)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result.get("success") else 1
