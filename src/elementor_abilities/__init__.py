"""
elementor-abilities - Agent-facing abilities for Elementor page data

Exposes a small set of operations on the Elementor data that WordPress keeps
in post meta: read a page's element tree, replace it, patch its raw JSON
text, swap a single element by id, list library templates, clear generated
CSS and update page or kit settings. The same abilities are served over MCP,
a REST API and the command line.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("elementor-abilities")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from elementor_abilities.abilities import (
    Ability,
    AbilityContext,
    AbilityRegistry,
    create_registry,
)
from elementor_abilities.core import AbilityError, Element, patch_text, replace_element

__all__ = [
    "__version__",
    "Ability",
    "AbilityContext",
    "AbilityError",
    "AbilityRegistry",
    "Element",
    "create_registry",
    "patch_text",
    "replace_element",
]
