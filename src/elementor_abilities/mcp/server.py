"""elementor_abilities.mcp.server - MCP server implementation.

Exposes every registered ability as an MCP tool. Tools are a thin interface
layer: each one builds an input object and hands it to
``AbilityRegistry.run``, which does the permission and input checks.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

try:
    from mcp.server.fastmcp import FastMCP
    from mcp.types import ToolAnnotations

    MCP_AVAILABLE = True
except ImportError:
    MCP_AVAILABLE = False
    FastMCP = None
    ToolAnnotations = None

from elementor_abilities.abilities import create_registry
from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.abilities.registry import AbilityRegistry
from elementor_abilities.config import get_config
from elementor_abilities.factory import build_context

logger = logging.getLogger(__name__)

SERVER_NAME = "elementor-abilities"

MCP_SERVER_INSTRUCTIONS = """\
Read and edit Elementor page data stored in WordPress post meta.

**Reading:**
- elementor_get_data(id) returns the element tree, edit mode and page settings.
- elementor_list_templates(type) lists saved library templates.

**Editing (prefer the narrowest tool):**
1. elementor_update_element(id, target_id, replacement) swaps one container or widget.
2. elementor_patch_data(id, find, replace, use_pattern) edits text, URLs or setting
   values inside the raw JSON; patches that would break the JSON are rejected.
3. elementor_update_data(id, data) replaces the whole page structure.

**Settings and cache:**
- elementor_update_page_settings(id, settings, replace) merges page or kit settings.
- elementor_clear_cache(id | all) drops generated CSS.

Every tool returns {"success": bool, "message": str, ...}.
"""


# ─────────────────────────────────────────────────────────────────────────────
# Tool helpers
# ─────────────────────────────────────────────────────────────────────────────


def _compact(**fields: Any) -> dict[str, Any]:
    """Build an ability input, leaving out arguments the caller did not set."""
    return {key: value for key, value in fields.items() if value is not None}


def _run_ability(state: dict[str, Any], name: str, payload: dict[str, Any]) -> dict[str, Any]:
    registry: AbilityRegistry = state["registry"]
    result = registry.run(name, payload, state["context"])
    if not result.get("success"):
        logger.info("%s returned failure: %s", name, result.get("message"))
    return result


def _list_abilities(registry: AbilityRegistry) -> dict[str, Any]:
    abilities = registry.describe()
    return {"success": True, "abilities": abilities, "total": len(abilities)}


def _tool_annotations(registry: AbilityRegistry, name: str, title: str) -> Any:
    hints = registry.get(name).annotations
    return ToolAnnotations(
        title=title,
        readOnlyHint=hints.readonly,
        destructiveHint=hints.destructive,
        idempotentHint=hints.idempotent,
        openWorldHint=False,
    )


# ─────────────────────────────────────────────────────────────────────────────
# MCP Server Factory
# ─────────────────────────────────────────────────────────────────────────────


def create_server(
    context: AbilityContext | None = None,
    registry: AbilityRegistry | None = None,
    working_dir: Path | None = None,
    config: dict[str, Any] | None = None,
) -> FastMCP:
    """Create the MCP server with all tools registered.

    Args:
        context: Optional pre-built context (for testing).
        registry: Optional ability registry; defaults to the Elementor abilities.
        working_dir: Directory the config file is searched from.
        config: Optional configuration; loaded from ``working_dir`` when omitted.

    Returns:
        FastMCP server instance.
    """
    if not MCP_AVAILABLE:
        raise ImportError(
            "MCP dependencies not installed. Install with: pip install elementor-abilities[mcp]"
        )

    if working_dir is None:
        working_dir = Path.cwd()
    if config is None:
        config = get_config(start_path=working_dir, quiet=True)
    if context is None:
        context = build_context(config)
    if registry is None:
        registry = create_registry()

    mcp = FastMCP(SERVER_NAME, instructions=MCP_SERVER_INSTRUCTIONS)

    _state: dict[str, Any] = {
        "context": context,
        "registry": registry,
        "working_dir": working_dir,
        "config": config,
    }

    def annotations(name: str, title: str) -> Any:
        return _tool_annotations(_state["registry"], name, title)

    # ─────────────────────────────────────────────────────────────────────
    # Register Tools
    # ─────────────────────────────────────────────────────────────────────

    @mcp.tool(annotations=ToolAnnotations(title="List Abilities", readOnlyHint=True))
    def list_abilities() -> dict[str, Any]:
        """List registered abilities with their input schemas and hints."""
        return _list_abilities(_state["registry"])

    @mcp.tool(annotations=annotations("elementor/get-data", "Get Elementor Data"))
    def elementor_get_data(id: int, format: str = "array") -> dict[str, Any]:
        """Get the Elementor data of a page or post.

        Args:
            id: Post/Page ID.
            format: "array" for the decoded element tree, "json" for raw JSON text.

        Returns:
            Element tree, title, edit mode and page settings.
        """
        return _run_ability(_state, "elementor/get-data", _compact(id=id, format=format))

    @mcp.tool(annotations=annotations("elementor/update-data", "Update Elementor Data"))
    def elementor_update_data(id: int, data: list[dict[str, Any]]) -> dict[str, Any]:
        """Replace the whole Elementor structure of a page.

        Sets the page to builder mode and clears its generated CSS. Invalid
        data will break the page; prefer elementor_update_element for
        targeted edits.

        Args:
            id: Post/Page ID.
            data: Full Elementor element list.
        """
        return _run_ability(_state, "elementor/update-data", {"id": id, "data": data})

    @mcp.tool(annotations=annotations("elementor/patch-data", "Patch Elementor Data"))
    def elementor_patch_data(
        id: int,
        find: str,
        replace: str,
        use_pattern: bool = False,
    ) -> dict[str, Any]:
        """Find and replace inside the raw Elementor JSON text.

        Args:
            id: Post/Page ID.
            find: Literal text, or a regular expression when use_pattern is true
                ("/pattern/flags" is accepted).
            replace: Replacement text; $1 or \\1 refer to capture groups.
            use_pattern: Treat find as a regular expression.

        Returns:
            Number of replacements. The patch is rejected if the result is
            not valid JSON.
        """
        return _run_ability(
            _state,
            "elementor/patch-data",
            {"id": id, "find": find, "replace": replace, "use_pattern": use_pattern},
        )

    @mcp.tool(annotations=annotations("elementor/update-element", "Update Elementor Element"))
    def elementor_update_element(
        id: int,
        target_id: str,
        replacement: dict[str, Any],
    ) -> dict[str, Any]:
        """Replace one element (container or widget) by its ID.

        Args:
            id: Post/Page ID containing the element.
            target_id: ID of the element to replace.
            replacement: New element object ("id", "elType", "settings", ...).
        """
        return _run_ability(
            _state,
            "elementor/update-element",
            {"id": id, "target_id": target_id, "replacement": replacement},
        )

    @mcp.tool(annotations=annotations("elementor/list-templates", "List Elementor Templates"))
    def elementor_list_templates(type: str = "all") -> dict[str, Any]:
        """List published Elementor library templates.

        Args:
            type: all, page, section, container, loop-item, header, footer,
                single, archive or popup.
        """
        return _run_ability(_state, "elementor/list-templates", {"type": type})

    @mcp.tool(annotations=annotations("elementor/clear-cache", "Clear Elementor Cache"))
    def elementor_clear_cache(id: int | None = None, all: bool = False) -> dict[str, Any]:
        """Clear generated Elementor CSS for one post or the whole site.

        Args:
            id: Post/Page ID to clear.
            all: Clear every post's CSS instead.
        """
        return _run_ability(_state, "elementor/clear-cache", _compact(id=id, all=all or None))

    @mcp.tool(
        annotations=annotations("elementor/update-page-settings", "Update Elementor Page Settings")
    )
    def elementor_update_page_settings(
        id: int,
        settings: dict[str, Any] | None = None,
        replace: bool = False,
    ) -> dict[str, Any]:
        """Update _elementor_page_settings of a page or the Site Settings kit.

        Args:
            id: Post/Page/Kit ID.
            settings: Keys to add or update.
            replace: Replace the whole settings object instead of merging.
        """
        return _run_ability(
            _state,
            "elementor/update-page-settings",
            _compact(id=id, settings=settings, replace=replace),
        )

    return mcp


def run_server(
    working_dir: Path | None = None,
    transport: str = "stdio",
    config: dict[str, Any] | None = None,
) -> None:
    """Run the MCP server.

    Args:
        working_dir: Directory the config file is searched from.
        transport: Transport type ('stdio', 'sse' or 'streamable-http').
        config: Optional pre-loaded configuration.
    """
    mcp = create_server(working_dir=working_dir, config=config)
    mcp.run(transport=transport)
