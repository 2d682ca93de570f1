"""elementor_abilities.server - Flask REST API server.

Provides a thin REST wrapper over the ability registry, exposing the same
abilities as the MCP server over HTTP.
"""

from elementor_abilities.server.app import create_app

__all__ = ["create_app"]
