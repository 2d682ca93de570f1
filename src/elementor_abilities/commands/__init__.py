"""
elementor_abilities.commands - CLI command implementations
"""

__all__ = [
    "abilities_cmd",
    "common",
    "config_cmd",
    "run_cmd",
    "serve_cmd",
]
