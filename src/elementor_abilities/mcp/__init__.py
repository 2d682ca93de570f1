"""elementor_abilities.mcp - Model Context Protocol server.

The server itself lives in ``elementor_abilities.mcp.server`` and needs the
``mcp`` extra (``pip install elementor-abilities[mcp]``). ``MCP_AVAILABLE``
reports whether it can be imported.
"""

try:
    from mcp.server.fastmcp import FastMCP  # noqa: F401

    MCP_AVAILABLE = True
except ImportError:
    MCP_AVAILABLE = False

__all__ = ["MCP_AVAILABLE"]
