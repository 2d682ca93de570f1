"""
elementor_abilities.utilities - Shared helpers.
"""
