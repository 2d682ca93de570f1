"""Entry point for running the MCP server directly.

Usage:
    python -m elementor_abilities.mcp
"""

from elementor_abilities.mcp.server import run_server

if __name__ == "__main__":
    run_server()
