"""
elementor_abilities.commands.abilities_cmd - List and describe abilities.
"""

import argparse
import json
import sys

from elementor_abilities.abilities import create_registry


def run(args: argparse.Namespace) -> int:
    """Run the abilities command."""
    action = getattr(args, "abilities_action", None)
    if action == "list":
        return cmd_list(args)
    elif action == "show":
        return cmd_show(args)
    else:
        print("Usage: elementor-abilities abilities {list,show}", file=sys.stderr)
        return 1


def cmd_list(args: argparse.Namespace) -> int:
    registry = create_registry()
    if getattr(args, "json", False):
        print(json.dumps(registry.describe(), indent=2))
        return 0

    width = max((len(name) for name in registry.names()), default=0)
    for ability in registry:
        flag = "ro" if ability.annotations.readonly else "rw"
        print(f"{ability.name:<{width}}  [{flag}]  {ability.label}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    registry = create_registry()
    ability = registry.get(args.name)
    if ability is None:
        print(f"Error: Ability not found: {args.name}", file=sys.stderr)
        return 1
    print(json.dumps(ability.describe(), indent=2))
    return 0
