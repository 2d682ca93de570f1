"""In-process document stores.

``MemoryStore`` keeps posts, post meta and options in dicts. It backs the
test suite and local experiments. ``JsonFileStore`` adds persistence: the
whole site is read from one JSON file and written back after every change.

Seed/persistence file format::

    {
      "site_url": "http://example.test",
      "options": {"elementor_active_kit": 7},
      "posts": [
        {"id": 12, "title": "Home", "post_type": "page", "status": "publish",
         "date": "2025-01-01 10:00:00", "modified": "2025-01-01 10:00:00",
         "meta": {"_elementor_data": [...], "_elementor_edit_mode": "builder"}}
      ]
    }

``_elementor_data`` may be given decoded (a list) or as JSON text; it is
always held as text, the way WordPress stores it.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path
from typing import Any

from elementor_abilities.core.errors import StoreError
from elementor_abilities.store.base import (
    CSS_META_KEY,
    DATA_META_KEY,
    TEMPLATE_POST_TYPE,
    TEMPLATE_TYPE_META_KEY,
    DocumentStore,
    PostRecord,
    TemplateRecord,
)

logger = logging.getLogger(__name__)

MYSQL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _now() -> str:
    return datetime.now().strftime(MYSQL_TIME_FORMAT)


class MemoryStore(DocumentStore):
    """Dict-backed store."""

    name = "memory"

    def __init__(self, site_url: str = "http://localhost", elementor_loaded: bool = False) -> None:
        self.site_url = site_url.rstrip("/")
        self.elementor_loaded = elementor_loaded
        self._posts: dict[int, PostRecord] = {}
        self._meta: dict[int, dict[str, Any]] = {}
        self._options: dict[str, Any] = {}
        self.css_flushes = 0

    # ─────────────────────────────────────────────────────────────────────
    # Seeding
    # ─────────────────────────────────────────────────────────────────────

    def add_post(
        self,
        post_id: int,
        title: str,
        post_type: str = "page",
        status: str = "publish",
        meta: dict[str, Any] | None = None,
        date: str | None = None,
        modified: str | None = None,
    ) -> PostRecord:
        """Create (or overwrite) a post with optional meta."""
        created = date or _now()
        post = PostRecord(
            id=int(post_id),
            title=title,
            post_type=post_type,
            status=status,
            date=created,
            modified=modified or created,
        )
        self._posts[post.id] = post
        self._meta[post.id] = {}
        for key, value in (meta or {}).items():
            self._meta[post.id][key] = self._normalize_meta(key, value)
        return post

    def set_option(self, name: str, value: Any) -> None:
        self._options[name] = value

    def load_snapshot(self, snapshot: dict[str, Any]) -> None:
        """Replace the store content with a decoded seed document."""
        self._posts.clear()
        self._meta.clear()
        self.site_url = str(snapshot.get("site_url", self.site_url)).rstrip("/")
        self._options = dict(snapshot.get("options", {}))
        for entry in snapshot.get("posts", []):
            self.add_post(
                entry["id"],
                entry.get("title", ""),
                post_type=entry.get("post_type", "page"),
                status=entry.get("status", "publish"),
                meta=entry.get("meta"),
                date=entry.get("date"),
                modified=entry.get("modified"),
            )

    def snapshot(self) -> dict[str, Any]:
        """Return the store content in seed-file format."""
        posts = []
        for post_id in sorted(self._posts):
            entry = asdict(self._posts[post_id])
            entry["meta"] = dict(self._meta.get(post_id, {}))
            posts.append(entry)
        return {"site_url": self.site_url, "options": dict(self._options), "posts": posts}

    @staticmethod
    def _normalize_meta(key: str, value: Any) -> Any:
        if key == DATA_META_KEY and not isinstance(value, str):
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        return value

    def _commit(self) -> None:
        """Hook called after every write."""

    def _require_post(self, post_id: int) -> None:
        if int(post_id) not in self._posts:
            raise StoreError(f"Post {post_id} does not exist", id=post_id)

    # ─────────────────────────────────────────────────────────────────────
    # Primitives
    # ─────────────────────────────────────────────────────────────────────

    def get_post(self, post_id: int) -> PostRecord | None:
        return self._posts.get(int(post_id))

    def get_meta(self, post_id: int, key: str) -> Any:
        return self._meta.get(int(post_id), {}).get(key)

    def update_meta(self, post_id: int, key: str, value: Any) -> None:
        self._require_post(post_id)
        self._meta[int(post_id)][key] = self._normalize_meta(key, value)
        self._commit()

    def delete_meta(self, post_id: int, key: str) -> None:
        self._meta.get(int(post_id), {}).pop(key, None)
        self._commit()

    def delete_meta_everywhere(self, key: str) -> None:
        for meta in self._meta.values():
            meta.pop(key, None)
        self._commit()

    def touch_post(self, post_id: int) -> None:
        self._require_post(post_id)
        post_id = int(post_id)
        self._posts[post_id] = replace(self._posts[post_id], modified=_now())
        self._commit()

    def permalink(self, post_id: int) -> str:
        return f"{self.site_url}/?p={int(post_id)}"

    def query_templates(self, template_type: str | None, limit: int) -> list[TemplateRecord]:
        templates = [
            post
            for post in self._posts.values()
            if post.post_type == TEMPLATE_POST_TYPE and post.status == "publish"
        ]
        if template_type is not None:
            templates = [
                post
                for post in templates
                if self.get_meta(post.id, TEMPLATE_TYPE_META_KEY) == template_type
            ]
        templates.sort(key=lambda post: (post.title.lower(), post.id))
        return [
            TemplateRecord(
                id=post.id,
                title=post.title,
                type=self.get_meta(post.id, TEMPLATE_TYPE_META_KEY) or "unknown",
                created_at=post.date,
                modified_at=post.modified,
            )
            for post in templates[:limit]
        ]

    def get_option(self, name: str) -> Any:
        return self._options.get(name)

    def flush_css(self) -> bool:
        if not self.elementor_loaded:
            return False
        for meta in self._meta.values():
            meta.pop(CSS_META_KEY, None)
        self.css_flushes += 1
        self._commit()
        return True

    def css_meta_count(self) -> int:
        return sum(1 for meta in self._meta.values() if CSS_META_KEY in meta)


class JsonFileStore(MemoryStore):
    """MemoryStore persisted to a JSON file after every write."""

    name = "json"

    def __init__(
        self, path: Path, site_url: str = "http://localhost", elementor_loaded: bool = False
    ) -> None:
        super().__init__(site_url=site_url, elementor_loaded=elementor_loaded)
        self.path = Path(path)
        if self.path.exists():
            try:
                snapshot = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise StoreError(f"Cannot read store file {self.path}: {e}") from e
            self.load_snapshot(snapshot)
            logger.debug("Loaded %d posts from %s", len(self._posts), self.path)

    def _commit(self) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(
                json.dumps(self.snapshot(), indent=2, ensure_ascii=False), encoding="utf-8"
            )
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write store file %s: %s", self.path, e)
            raise StoreError(f"Cannot write store file {self.path}: {e}") from e
