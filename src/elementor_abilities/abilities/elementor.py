"""Elementor abilities.

Each handler validates its input before touching the store, then loads the
post, transforms the Elementor data in memory and writes it back whole.
Handlers return ``{"success": ..., "message": ..., ...}`` envelopes and
never raise: ``AbilityError`` failures are turned into failure envelopes by
``returns_envelope``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping
from typing import Any

from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.abilities.registry import (
    Ability,
    AbilityAnnotations,
    AbilityRegistry,
    Executor,
)
from elementor_abilities.core.errors import (
    AbilityError,
    EncodingError,
    NotFoundError,
    ValidationError,
)
from elementor_abilities.core.models import (
    Element,
    decode_document,
    encode_document,
    encode_json,
)
from elementor_abilities.core.text_patch import patch_text
from elementor_abilities.core.tree import replace_element
from elementor_abilities.store.base import TEMPLATE_TYPES, DocumentStore, PostRecord

logger = logging.getLogger(__name__)


def returns_envelope(func: Executor) -> Executor:
    """Convert ``AbilityError`` raised by a handler into a failure envelope."""

    @functools.wraps(func)
    def wrapper(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            return func(context, payload)
        except AbilityError as e:
            logger.info("%s failed (%s): %s", func.__name__, e.kind, e.message)
            return e.to_envelope()

    return wrapper


# ─────────────────────────────────────────────────────────────────────────────
# Input helpers
# ─────────────────────────────────────────────────────────────────────────────


def _require_post_id(payload: Mapping[str, Any], message: str = "Post/Page ID is required") -> int:
    value = payload.get("id")
    if not value or isinstance(value, bool):
        raise ValidationError(message)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("Post/Page ID must be an integer") from e


def _require_post(store: DocumentStore, post_id: int) -> PostRecord:
    post = store.get_post(post_id)
    if post is None:
        raise NotFoundError("Post not found", id=post_id)
    return post


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _require_raw_text(store: DocumentStore, post: PostRecord) -> str:
    raw = store.load_raw_text(post.id)
    if raw is None:
        raise NotFoundError(
            "No Elementor data found for this post", id=post.id, title=post.title
        )
    return raw


def _commit_document_change(store: DocumentStore, post_id: int) -> None:
    store.invalidate_derived_cache(post_id)
    store.touch_post(post_id)


# ─────────────────────────────────────────────────────────────────────────────
# Handlers
# ─────────────────────────────────────────────────────────────────────────────


@returns_envelope
def get_data(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """Return the Elementor data, edit mode and page settings of a post."""
    post_id = _require_post_id(payload)
    fmt = payload.get("format") or "array"
    if fmt not in ("array", "json"):
        raise ValidationError('Format must be "array" or "json"')

    store = context.store
    post = _require_post(store, post_id)
    raw = _require_raw_text(store, post)

    if fmt == "json":
        data: Any = raw
    else:
        try:
            data = store.load(post_id)
        except EncodingError as e:
            e.details.setdefault("title", post.title)
            raise

    return {
        "success": True,
        "id": post_id,
        "title": post.title,
        "edit_mode": store.get_edit_mode(post_id) or "not set",
        "data": data,
        "page_settings": store.get_page_settings(post_id),
        "message": "Elementor data retrieved successfully",
    }


@returns_envelope
def update_data(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """Replace the whole Elementor document of a post."""
    post_id = _require_post_id(payload)
    data = payload.get("data")
    if not isinstance(data, list):
        raise ValidationError("Elementor data array is required")

    store = context.store
    _require_post(store, post_id)
    text = encode_json(data)

    store.save_raw_text(post_id, text)
    store.set_edit_mode(post_id, "builder")
    _commit_document_change(store, post_id)
    logger.info("Replaced Elementor data of post %s (%d bytes)", post_id, len(text))

    return {
        "success": True,
        "id": post_id,
        "message": "Elementor data updated successfully",
        "link": store.permalink(post_id),
    }


@returns_envelope
def patch_data(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """Find and replace within the raw Elementor JSON text."""
    post_id = _require_post_id(payload)
    find = payload.get("find")
    if find is None or find == "":
        raise ValidationError("Find string is required")
    if not isinstance(find, str):
        raise ValidationError("Find must be a string")
    replace = payload.get("replace")
    if replace is None:
        raise ValidationError("Replace string is required")
    if not isinstance(replace, str):
        raise ValidationError("Replace must be a string")
    use_pattern = bool(_first_present(payload, "use_pattern", "regex"))

    store = context.store
    post = _require_post(store, post_id)
    raw = _require_raw_text(store, post)

    result = patch_text(
        raw,
        find,
        replace,
        use_pattern,
        allow_delimited=context.allow_delimited_patterns,
    )

    if not result.changed:
        return {
            "success": True,
            "id": post_id,
            "replacements": 0,
            "message": "No matches found - Elementor data unchanged",
            "link": store.permalink(post_id),
        }

    store.save_raw_text(post_id, result.text)
    _commit_document_change(store, post_id)
    logger.info("Patched post %s: %d replacement(s)", post_id, result.count)

    return {
        "success": True,
        "id": post_id,
        "replacements": result.count,
        "message": f"Successfully replaced {result.count} occurrence(s) in Elementor data",
        "link": store.permalink(post_id),
    }


@returns_envelope
def update_element(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """Replace one element (container or widget) by id."""
    post_id = _require_post_id(payload)
    target_id = _first_present(payload, "target_id", "element_id")
    if not target_id:
        raise ValidationError("Element ID is required")
    replacement = _first_present(payload, "replacement", "element_data")
    if not isinstance(replacement, Mapping):
        raise ValidationError("Element data object is required")

    store = context.store
    post = _require_post(store, post_id)
    document = decode_document(_require_raw_text(store, post))

    updated, found = replace_element(document, target_id, Element.from_dict(replacement))
    if not found:
        raise NotFoundError(
            f'Element with ID "{target_id}" not found in page structure',
            id=post_id,
            target_id=target_id,
        )

    store.save_raw_text(post_id, encode_document(updated))
    _commit_document_change(store, post_id)
    logger.info("Replaced element %s in post %s", target_id, post_id)

    return {
        "success": True,
        "id": post_id,
        "target_id": target_id,
        "message": f'Element "{target_id}" updated successfully',
        "link": store.permalink(post_id),
    }


@returns_envelope
def list_templates(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """List published Elementor library templates."""
    type_filter = _first_present(payload, "type", "type_filter") or "all"
    if type_filter not in TEMPLATE_TYPES:
        raise ValidationError(f"Unknown template type: {type_filter}")

    templates = context.store.list_templates(type_filter, limit=context.template_limit)
    return {
        "success": True,
        "templates": [template.to_dict() for template in templates],
        "total": len(templates),
        "message": f"Found {len(templates)} template(s)",
    }


@returns_envelope
def clear_cache(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """Clear generated CSS for one post or the whole site."""
    store = context.store
    if payload.get("all"):
        if store.invalidate_all_derived_caches():
            return {"success": True, "message": "All Elementor cache cleared"}
        return {"success": True, "message": "Elementor CSS meta cleared (Elementor not loaded)"}

    if payload.get("id"):
        post_id = _require_post_id(payload)
        _require_post(store, post_id)
        store.invalidate_derived_cache(post_id)
        return {"success": True, "message": f"Cache cleared for post {post_id}"}

    raise ValidationError('Provide either "id" or set "all" to true')


@returns_envelope
def update_page_settings(context: AbilityContext, payload: dict[str, Any]) -> dict[str, Any]:
    """Merge into (or replace) ``_elementor_page_settings``."""
    post_id = _require_post_id(payload, "Post/Page/Kit ID is required")
    new_settings = payload.get("settings")
    if new_settings is None:
        new_settings = {}
    if not isinstance(new_settings, Mapping):
        raise ValidationError("Settings must be an object")
    replace = bool(payload.get("replace"))

    store = context.store
    _require_post(store, post_id)

    if replace:
        final_settings = dict(new_settings)
    else:
        final_settings = store.get_page_settings(post_id)
        final_settings.update(new_settings)

    store.save_page_settings(post_id, final_settings)
    store.invalidate_derived_cache(post_id)

    # The active kit holds site-wide settings: every page's CSS depends on it.
    if context.active_kit_id() == post_id:
        store.flush_css()

    return {
        "success": True,
        "id": post_id,
        "message": "Page settings updated successfully",
        "settings": final_settings,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Definitions
# ─────────────────────────────────────────────────────────────────────────────

_ID_PROPERTY = {"type": "integer", "description": "Post/Page ID."}

ELEMENTOR_ABILITIES: tuple[Ability, ...] = (
    Ability(
        name="elementor/get-data",
        label="Get Elementor Data",
        description=(
            "Retrieves the Elementor JSON data for a page or post. Returns the raw "
            "Elementor structure including containers, widgets, and settings."
        ),
        execute=get_data,
        input_schema={
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "integer", "description": "Post/Page ID to get Elementor data from."},
                "format": {
                    "type": "string",
                    "enum": ["array", "json"],
                    "default": "array",
                    "description": (
                        'Return format: "array" for decoded data, "json" for the raw JSON string.'
                    ),
                },
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "id": {"type": "integer"},
                "title": {"type": "string"},
                "edit_mode": {"type": "string"},
                "data": {"type": ["array", "string"]},
                "page_settings": {"type": "object"},
                "message": {"type": "string"},
            },
        },
        annotations=AbilityAnnotations(readonly=True),
    ),
    Ability(
        name="elementor/update-data",
        label="Update Elementor Data",
        description=(
            "Updates the Elementor JSON data for a page or post. Automatically clears "
            "Elementor CSS cache. Use with caution - invalid data will break the page."
        ),
        execute=update_data,
        input_schema={
            "type": "object",
            "required": ["id", "data"],
            "properties": {
                "id": {"type": "integer", "description": "Post/Page ID to update."},
                "data": {
                    "type": "array",
                    "description": "Elementor data array (will be JSON encoded).",
                },
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "id": {"type": "integer"},
                "message": {"type": "string"},
                "link": {"type": "string"},
            },
        },
    ),
    Ability(
        name="elementor/patch-data",
        label="Patch Elementor Data",
        description=(
            "Performs find-and-replace operations within Elementor JSON data. Works on "
            "the raw JSON string, so you can replace text, URLs, settings values, etc. "
            "The patch is rejected if the result is no longer valid JSON."
        ),
        execute=patch_data,
        input_schema={
            "type": "object",
            "required": ["id", "find", "replace"],
            "properties": {
                "id": {"type": "integer", "description": "Post/Page ID to patch."},
                "find": {"type": "string", "description": "String to find in the Elementor JSON."},
                "replace": {"type": "string", "description": "Replacement string."},
                "use_pattern": {
                    "type": "boolean",
                    "default": False,
                    "description": (
                        'If true, treat "find" as a regular expression '
                        '("/pattern/flags" is accepted).'
                    ),
                },
                "regex": {"type": "boolean", "description": 'Alias of "use_pattern".'},
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "id": {"type": "integer"},
                "replacements": {"type": "integer"},
                "message": {"type": "string"},
                "link": {"type": "string"},
            },
        },
    ),
    Ability(
        name="elementor/update-element",
        label="Update Elementor Element",
        description=(
            "Replaces a specific element (container or widget) by ID within the Elementor "
            "page structure. Useful for targeted updates without re-uploading the entire page."
        ),
        execute=update_element,
        input_schema={
            "type": "object",
            "required": ["id", "target_id", "replacement"],
            "properties": {
                "id": {"type": "integer", "description": "Post/Page ID containing the element."},
                "target_id": {
                    "type": "string",
                    "description": 'The ID of the element to replace (e.g., "col1", "hero_section").',
                },
                "replacement": {
                    "type": "object",
                    "description": (
                        'The new element data. Must include "id", "elType", and other '
                        "required Elementor fields."
                    ),
                },
                "element_id": {"type": "string", "description": 'Alias of "target_id".'},
                "element_data": {"type": "object", "description": 'Alias of "replacement".'},
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "id": {"type": "integer"},
                "target_id": {"type": "string"},
                "message": {"type": "string"},
                "link": {"type": "string"},
            },
        },
    ),
    Ability(
        name="elementor/list-templates",
        label="List Elementor Templates",
        description="Lists all saved Elementor templates (sections, pages, containers, etc.).",
        execute=list_templates,
        input_schema={
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": list(TEMPLATE_TYPES),
                    "default": "all",
                    "description": "Filter by template type.",
                },
                "type_filter": {
                    "type": "string",
                    "enum": list(TEMPLATE_TYPES),
                    "description": 'Alias of "type".',
                },
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "templates": {"type": "array"},
                "total": {"type": "integer"},
                "message": {"type": "string"},
            },
        },
        annotations=AbilityAnnotations(readonly=True),
    ),
    Ability(
        name="elementor/clear-cache",
        label="Clear Elementor Cache",
        description="Clears Elementor CSS cache for a specific post or the entire site.",
        execute=clear_cache,
        input_schema={
            "type": "object",
            "properties": {
                "id": {
                    "type": "integer",
                    "description": "Post/Page ID to clear cache for.",
                },
                "all": {
                    "type": "boolean",
                    "default": False,
                    "description": "If true, clears all Elementor cache site-wide.",
                },
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "message": {"type": "string"},
            },
        },
    ),
    Ability(
        name="elementor/update-page-settings",
        label="Update Elementor Page Settings",
        description=(
            "Updates Elementor page settings (stored in _elementor_page_settings postmeta). "
            "Can update individual keys or replace entire settings object. Use for Site "
            "Settings Kit to set global padding, typography, colors, etc."
        ),
        execute=update_page_settings,
        input_schema={
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "integer", "description": "Post/Page/Kit ID to update settings for."},
                "settings": {
                    "type": "object",
                    "description": (
                        "Settings object to merge with existing settings. Keys will be "
                        "added/updated."
                    ),
                },
                "replace": {
                    "type": "boolean",
                    "default": False,
                    "description": "If true, replace entire settings object instead of merging.",
                },
            },
            "additionalProperties": False,
        },
        output_schema={
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "id": {"type": "integer"},
                "message": {"type": "string"},
                "settings": {"type": "object"},
            },
        },
    ),
)


def register_elementor_abilities(registry: AbilityRegistry) -> None:
    """Register every Elementor ability on ``registry``."""
    for ability in ELEMENTOR_ABILITIES:
        registry.register(ability)
