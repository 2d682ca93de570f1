"""Document store interface.

A store gives the abilities access to WordPress posts and post meta. Backends
implement a handful of primitives mirroring the WordPress functions the
abilities need (``get_post``, ``get_post_meta``, ``update_post_meta``...);
everything Elementor-specific (which meta key holds what, how the derived CSS
cache is invalidated) is implemented once here on top of them.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from elementor_abilities.core.errors import EncodingError
from elementor_abilities.core.models import loads_json

logger = logging.getLogger(__name__)

DATA_META_KEY = "_elementor_data"
EDIT_MODE_META_KEY = "_elementor_edit_mode"
PAGE_SETTINGS_META_KEY = "_elementor_page_settings"
CSS_META_KEY = "_elementor_css"
TEMPLATE_TYPE_META_KEY = "_elementor_template_type"
ACTIVE_KIT_OPTION = "elementor_active_kit"
TEMPLATE_POST_TYPE = "elementor_library"

TEMPLATE_TYPES = (
    "all",
    "page",
    "section",
    "container",
    "loop-item",
    "header",
    "footer",
    "single",
    "archive",
    "popup",
)


@dataclass(frozen=True)
class PostRecord:
    """The subset of a WordPress post the abilities read."""

    id: int
    title: str
    post_type: str = "page"
    status: str = "publish"
    date: str = ""
    modified: str = ""


@dataclass(frozen=True)
class TemplateRecord:
    """An ``elementor_library`` template as listed by list-templates."""

    id: int
    title: str
    type: str
    created_at: str
    modified_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "created_at": self.created_at,
            "modified_at": self.modified_at,
        }


class DocumentStore(ABC):
    """Base class for post/meta backends.

    Subclasses implement the abstract primitives. Write primitives raise
    ``StoreError`` on failure; read primitives return ``None`` for missing
    posts or meta.
    """

    name = "base"

    # ─────────────────────────────────────────────────────────────────────
    # Backend primitives
    # ─────────────────────────────────────────────────────────────────────

    @abstractmethod
    def get_post(self, post_id: int) -> PostRecord | None:
        """Return the post, or None when it does not exist."""

    @abstractmethod
    def get_meta(self, post_id: int, key: str) -> Any:
        """Return a single post meta value, or None when unset."""

    @abstractmethod
    def update_meta(self, post_id: int, key: str, value: Any) -> None:
        """Set a post meta value."""

    @abstractmethod
    def delete_meta(self, post_id: int, key: str) -> None:
        """Delete a post meta value. Missing meta is not an error."""

    @abstractmethod
    def delete_meta_everywhere(self, key: str) -> None:
        """Delete a meta key from every post."""

    @abstractmethod
    def touch_post(self, post_id: int) -> None:
        """Bump the post's modified time."""

    @abstractmethod
    def permalink(self, post_id: int) -> str:
        """Return the public URL of a post."""

    @abstractmethod
    def query_templates(self, template_type: str | None, limit: int) -> list[TemplateRecord]:
        """Return published templates ordered by title, optionally filtered by type."""

    @abstractmethod
    def get_option(self, name: str) -> Any:
        """Return a site option, or None when unset."""

    def flush_css(self) -> bool:
        """Ask Elementor to regenerate all CSS.

        Returns:
            True if Elementor handled the flush, False if the backend has no
            Elementor runtime to ask (the caller then falls back to deleting
            the CSS meta directly).
        """
        return False

    # ─────────────────────────────────────────────────────────────────────
    # Elementor document access
    # ─────────────────────────────────────────────────────────────────────

    def load_raw_text(self, post_id: int) -> str | None:
        """Return the raw ``_elementor_data`` JSON text, or None when empty."""
        value = self.get_meta(post_id, DATA_META_KEY)
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            # Some backends hand back meta already decoded.
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        return value

    def save_raw_text(self, post_id: int, text: str) -> None:
        logger.debug("Saving %d bytes of %s for post %s", len(text), DATA_META_KEY, post_id)
        self.update_meta(post_id, DATA_META_KEY, text)

    def load(self, post_id: int) -> Any:
        """Return the decoded Elementor data, or None when empty.

        Raises:
            EncodingError: If the stored text is not valid JSON.
        """
        raw = self.load_raw_text(post_id)
        if raw is None:
            return None
        try:
            return loads_json(raw)
        except ValueError as e:
            raise EncodingError("Failed to parse existing Elementor data", id=post_id) from e

    def save(self, post_id: int, document: Any) -> None:
        try:
            text = json.dumps(document, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise EncodingError("Failed to encode data to JSON", id=post_id) from e
        self.save_raw_text(post_id, text)

    def get_edit_mode(self, post_id: int) -> str | None:
        return self.get_meta(post_id, EDIT_MODE_META_KEY) or None

    def set_edit_mode(self, post_id: int, mode: str = "builder") -> None:
        self.update_meta(post_id, EDIT_MODE_META_KEY, mode)

    def get_page_settings(self, post_id: int) -> dict[str, Any]:
        """Return page settings; anything that is not a mapping reads as empty."""
        value = self.get_meta(post_id, PAGE_SETTINGS_META_KEY)
        if isinstance(value, str) and value.startswith("{"):
            try:
                value = loads_json(value)
            except ValueError:
                return {}
        return dict(value) if isinstance(value, dict) else {}

    def save_page_settings(self, post_id: int, settings: dict[str, Any]) -> None:
        self.update_meta(post_id, PAGE_SETTINGS_META_KEY, settings)

    # ─────────────────────────────────────────────────────────────────────
    # Derived cache and templates
    # ─────────────────────────────────────────────────────────────────────

    def invalidate_derived_cache(self, post_id: int) -> None:
        """Drop the generated CSS of one post."""
        logger.debug("Invalidating %s for post %s", CSS_META_KEY, post_id)
        self.delete_meta(post_id, CSS_META_KEY)

    def invalidate_all_derived_caches(self) -> bool:
        """Drop generated CSS site-wide.

        Returns:
            True when Elementor flushed its files cache, False when the CSS
            meta had to be deleted directly.
        """
        if self.flush_css():
            return True
        logger.info("Elementor runtime unavailable; deleting %s meta directly", CSS_META_KEY)
        self.delete_meta_everywhere(CSS_META_KEY)
        return False

    def list_templates(self, type_filter: str = "all", limit: int = 100) -> list[TemplateRecord]:
        template_type = None if type_filter == "all" else type_filter
        return self.query_templates(template_type, limit)

    def active_kit_id(self) -> int | None:
        value = self.get_option(ACTIVE_KIT_OPTION)
        try:
            return int(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            return None
