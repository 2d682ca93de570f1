"""
elementor_abilities.cli - Command-line interface.

Main entry point for the elementor-abilities CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from elementor_abilities import __version__
from elementor_abilities.commands import (
    abilities_cmd,
    config_cmd,
    run_cmd,
    serve_cmd,
)
from elementor_abilities.config.defaults import STORE_BACKENDS


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="elementor-abilities",
        description="Read and patch Elementor page data in WordPress",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  elementor-abilities abilities list                   # Show registered abilities
  elementor-abilities run elementor/get-data --input '{"id": 12}'
  elementor-abilities --site-path /var/www/site run elementor/patch-data \\
      --input '{"id": 12, "find": "http://old", "replace": "https://new"}'
  elementor-abilities mcp serve                        # MCP server on stdio
  elementor-abilities serve --port 5050                # REST API

Configuration:
  elementor-abilities config path   # Show config file location
  elementor-abilities config show   # View effective settings

For detailed command help: elementor-abilities <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"elementor-abilities {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--store",
        choices=list(STORE_BACKENDS),
        help="Document store backend (default: from config, else memory)",
    )
    parser.add_argument(
        "--site-path",
        type=Path,
        help="WordPress root for the wp-cli store (implies --store wp-cli)",
        metavar="PATH",
    )
    parser.add_argument(
        "--seed-file",
        type=Path,
        help="JSON site snapshot for the memory/json stores",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # abilities command
    abilities_parser = subparsers.add_parser(
        "abilities",
        help="List or describe registered abilities",
    )
    abilities_subparsers = abilities_parser.add_subparsers(dest="abilities_action")
    abilities_list = abilities_subparsers.add_parser("list", help="List abilities")
    abilities_list.add_argument(
        "--json",
        action="store_true",
        help="Output full metadata as JSON",
    )
    abilities_show = abilities_subparsers.add_parser("show", help="Show one ability")
    abilities_show.add_argument("name", help="Ability name, e.g. elementor/get-data")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Execute an ability and print its result as JSON",
    )
    run_parser.add_argument("name", help="Ability name, e.g. elementor/patch-data")
    input_group = run_parser.add_mutually_exclusive_group()
    input_group.add_argument(
        "--input",
        help="Input object as a JSON string",
        metavar="JSON",
    )
    input_group.add_argument(
        "--input-file",
        type=Path,
        help="Read the input object from a JSON file",
        metavar="PATH",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the REST API server (requires elementor-abilities[server])",
    )
    serve_parser.add_argument("--host", help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default: from config)")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser("show", help="Print the effective configuration")
    config_subparsers.add_parser("path", help="Print the config file location")

    # version command
    subparsers.add_parser("version", help="Show version information")

    # mcp command
    mcp_parser = subparsers.add_parser(
        "mcp",
        help="MCP server commands (requires elementor-abilities[mcp])",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Claude Desktop Configuration:
  Add to claude_desktop_config.json:

    {
      "mcpServers": {
        "elementor": {
          "command": "elementor-abilities",
          "args": ["--site-path", "/var/www/site", "mcp", "serve"]
        }
      }
    }

Tools:
  elementor_get_data              Get page structure and settings
  elementor_update_data           Replace the whole page structure
  elementor_patch_data            Find/replace inside the raw JSON
  elementor_update_element        Replace one element by ID
  elementor_list_templates        List library templates
  elementor_clear_cache           Clear generated CSS
  elementor_update_page_settings  Merge page or kit settings
  list_abilities                  Describe every ability
""",
    )
    mcp_subparsers = mcp_parser.add_subparsers(dest="mcp_action")

    # mcp serve
    mcp_serve = mcp_subparsers.add_parser(
        "serve",
        help="Start MCP server",
    )
    mcp_serve.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport type (default: stdio)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install elementor-abilities[completion]
    # Then activate: eval "$(register-python-argcomplete elementor-abilities)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        # Dispatch to command handlers
        if args.command == "abilities":
            return abilities_cmd.run(args)
        elif args.command == "run":
            return run_cmd.run(args)
        elif args.command == "serve":
            return serve_cmd.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        elif args.command == "version":
            return version_command(args)
        elif args.command == "mcp":
            return mcp_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"elementor-abilities {__version__}")
    return 0


def mcp_command(args: argparse.Namespace) -> int:
    """Handle MCP server commands."""
    from elementor_abilities.mcp import MCP_AVAILABLE

    if not MCP_AVAILABLE:
        print("Error: MCP dependencies not installed.", file=sys.stderr)
        print("Install with: pip install elementor-abilities[mcp]", file=sys.stderr)
        return 1

    if args.mcp_action == "serve":
        from elementor_abilities.commands.common import load_command_config, setup_logging
        from elementor_abilities.mcp.server import run_server

        config = load_command_config(args)
        setup_logging(args, config)

        # stdout carries the stdio transport; status goes to stderr.
        print("Starting elementor-abilities MCP server...", file=sys.stderr)
        print(f"Store: {config['store']['backend']}", file=sys.stderr)
        print(f"Transport: {args.transport}", file=sys.stderr)

        try:
            run_server(working_dir=Path.cwd(), transport=args.transport, config=config)
        except KeyboardInterrupt:
            print("\nServer stopped.", file=sys.stderr)
        return 0
    else:
        print("Usage: elementor-abilities mcp serve", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
