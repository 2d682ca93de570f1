"""Ability registry.

An ability is a named operation with a JSON input schema, a required
capability and an executor returning a result envelope. The registry is
the single entry point every surface (MCP, REST, CLI) goes through, so
permission and input checks happen in one place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

Executor = Callable[[AbilityContext, dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class AbilityAnnotations:
    """Behaviour hints surfaced to clients."""

    readonly: bool = False
    destructive: bool = False
    idempotent: bool = True

    def to_dict(self) -> dict[str, bool]:
        return {
            "readonly": self.readonly,
            "destructive": self.destructive,
            "idempotent": self.idempotent,
        }


@dataclass(frozen=True)
class Ability:
    """A registered ability.

    Attributes:
        name: Namespaced name, e.g. ``elementor/get-data``.
        label: Short human-readable title.
        description: What the ability does, shown to agents.
        execute: Handler returning a result envelope. Never raises.
        input_schema: JSON Schema of the input object.
        output_schema: JSON Schema of the result envelope.
        category: Ability category.
        capability: Capability the caller must hold.
        annotations: Behaviour hints.
    """

    name: str
    label: str
    description: str
    execute: Executor
    input_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object"})
    output_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object"})
    category: str = "site"
    capability: str = "edit_posts"
    annotations: AbilityAnnotations = field(default_factory=AbilityAnnotations)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
            "meta": {"annotations": self.annotations.to_dict()},
        }


def _type_checking_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Drop top-level ``required`` so handlers report missing fields themselves."""
    return {key: value for key, value in schema.items() if key != "required"}


def _format_schema_error(error: Any) -> str:
    path = ".".join(str(part) for part in error.absolute_path)
    if error.validator == "type" and path:
        return f"Invalid input: '{path}' must be of type {error.validator_value}"
    if error.validator == "enum" and path:
        allowed = ", ".join(str(v) for v in error.validator_value)
        return f"Invalid input: '{path}' must be one of: {allowed}"
    return f"Invalid input: {error.message}"


class AbilityRegistry:
    """Holds abilities by name and runs them."""

    def __init__(self) -> None:
        self._abilities: dict[str, Ability] = {}
        self._validators: dict[str, Draft202012Validator] = {}

    def register(self, ability: Ability) -> Ability:
        """Add an ability.

        Raises:
            ValueError: If an ability with the same name is registered.
        """
        if ability.name in self._abilities:
            raise ValueError(f"Ability already registered: {ability.name}")
        Draft202012Validator.check_schema(ability.input_schema)
        self._abilities[ability.name] = ability
        self._validators[ability.name] = Draft202012Validator(
            _type_checking_schema(ability.input_schema)
        )
        return ability

    def get(self, name: str) -> Ability | None:
        return self._abilities.get(name)

    def names(self) -> list[str]:
        return list(self._abilities)

    def __iter__(self) -> Iterator[Ability]:
        return iter(self._abilities.values())

    def __len__(self) -> int:
        return len(self._abilities)

    def __contains__(self, name: object) -> bool:
        return name in self._abilities

    def describe(self) -> list[dict[str, Any]]:
        return [ability.describe() for ability in self._abilities.values()]

    def validate_input(self, name: str, payload: Mapping[str, Any]) -> None:
        """Check field types, enums and unknown properties.

        Raises:
            ValidationError: With a message naming the offending field.
        """
        validator = self._validators[name]
        error = best_match(validator.iter_errors(dict(payload)))
        if error is not None:
            raise ValidationError(_format_schema_error(error))

    def run(self, name: str, payload: Any, context: AbilityContext) -> dict[str, Any]:
        """Run an ability and return its envelope.

        A non-object payload is treated as an empty input. Unknown names,
        missing capabilities and schema violations produce failure
        envelopes; nothing is raised.
        """
        ability = self._abilities.get(name)
        if ability is None:
            return NotFoundError(f"Ability not found: {name}").to_envelope()

        if not context.can(ability.capability):
            logger.warning("Permission denied for %s (needs %s)", name, ability.capability)
            return PermissionDeniedError(
                f"Permission denied: {name} requires the '{ability.capability}' capability"
            ).to_envelope()

        payload = dict(payload) if isinstance(payload, Mapping) else {}
        try:
            self.validate_input(name, payload)
        except ValidationError as e:
            return e.to_envelope()

        logger.debug("Running %s", name)
        return ability.execute(context, payload)
