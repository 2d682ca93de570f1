"""
elementor_abilities.abilities - Ability registry and Elementor abilities.
"""

from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.abilities.elementor import (
    ELEMENTOR_ABILITIES,
    register_elementor_abilities,
)
from elementor_abilities.abilities.registry import Ability, AbilityAnnotations, AbilityRegistry


def create_registry() -> AbilityRegistry:
    """Return a registry holding every Elementor ability."""
    registry = AbilityRegistry()
    register_elementor_abilities(registry)
    return registry


__all__ = [
    "Ability",
    "AbilityAnnotations",
    "AbilityContext",
    "AbilityRegistry",
    "ELEMENTOR_ABILITIES",
    "create_registry",
    "register_elementor_abilities",
]
