"""
elementor_abilities.commands.serve_cmd - Run the REST API server.
"""

import argparse
import sys

from elementor_abilities.commands.common import load_command_config, setup_logging
from elementor_abilities.factory import build_context


def run(args: argparse.Namespace) -> int:
    """Run the serve command."""
    try:
        from elementor_abilities.server import create_app
    except ImportError:
        print("Error: server dependencies not installed.", file=sys.stderr)
        print("Install with: pip install elementor-abilities[server]", file=sys.stderr)
        return 1

    config = load_command_config(args)
    setup_logging(args, config)
    server = config.get("server", {})
    host = args.host or server.get("host", "127.0.0.1")
    port = args.port or int(server.get("port", 5050))

    app = create_app(build_context(config))
    print(f"Serving abilities on http://{host}:{port}/api/abilities", file=sys.stderr)
    app.run(host=host, port=port)
    return 0
