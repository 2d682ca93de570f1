"""Execution context passed to every ability.

Holds what WordPress would otherwise provide as ambient globals: the store
to read and write, and the capabilities of the acting user.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from elementor_abilities.store.base import DocumentStore

DEFAULT_CAPABILITIES = frozenset({"edit_posts"})


@dataclass
class AbilityContext:
    """Per-request state for ability handlers.

    Attributes:
        store: Backend holding posts and post meta.
        capabilities: Capabilities granted to the caller.
        allow_delimited_patterns: Accept ``/pattern/flags`` in patch-data.
        template_limit: Maximum templates returned by list-templates.
    """

    store: DocumentStore
    capabilities: frozenset[str] = field(default=DEFAULT_CAPABILITIES)
    allow_delimited_patterns: bool = True
    template_limit: int = 100

    @classmethod
    def from_config(cls, store: DocumentStore, config: dict) -> AbilityContext:
        permissions = config.get("permissions", {})
        capabilities: Iterable[str] = permissions.get("capabilities", DEFAULT_CAPABILITIES)
        return cls(
            store=store,
            capabilities=frozenset(capabilities),
            allow_delimited_patterns=bool(config.get("patch", {}).get("allow_delimited", True)),
            template_limit=int(config.get("templates", {}).get("limit", 100)),
        )

    def can(self, capability: str) -> bool:
        return capability in self.capabilities

    def active_kit_id(self) -> int | None:
        return self.store.active_kit_id()
