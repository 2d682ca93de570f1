"""
elementor_abilities.factory - Build stores and contexts from config.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.config import get_config
from elementor_abilities.core.errors import StoreError
from elementor_abilities.store import DocumentStore, JsonFileStore, MemoryStore, WPCLIStore

logger = logging.getLogger(__name__)


def build_store(config: Dict[str, Any]) -> DocumentStore:
    """Create the document store selected by ``config["store"]["backend"]``.

    Raises:
        StoreError: Unknown backend, missing settings, or unreadable seed file.
    """
    settings = config.get("store", {})
    backend = settings.get("backend", "memory")
    seed_file = settings.get("seed_file") or ""
    site_url = settings.get("site_url", "http://localhost")
    elementor_loaded = bool(settings.get("elementor_loaded", False))

    if backend == "memory":
        store = MemoryStore(site_url=site_url, elementor_loaded=elementor_loaded)
        if seed_file:
            try:
                store.load_snapshot(json.loads(Path(seed_file).read_text(encoding="utf-8")))
            except (OSError, ValueError) as e:
                raise StoreError(f"Cannot read seed file {seed_file}: {e}") from e
        logger.debug("Using memory store (seed: %s)", seed_file or "none")
        return store

    if backend == "json":
        if not seed_file:
            raise StoreError("The json store needs store.seed_file")
        logger.debug("Using json store at %s", seed_file)
        return JsonFileStore(Path(seed_file), site_url=site_url, elementor_loaded=elementor_loaded)

    if backend == "wp-cli":
        site_path = settings.get("site_path") or ""
        if not site_path:
            raise StoreError("The wp-cli store needs store.site_path")
        logger.debug("Using wp-cli store at %s", site_path)
        return WPCLIStore(
            Path(site_path),
            wp_cli=settings.get("wp_cli") or "wp",
            timeout=int(settings.get("timeout", 120)),
            run_as=settings.get("run_as") or None,
        )

    raise StoreError(f"Unknown store backend: {backend}")


def build_context(
    config: Optional[Dict[str, Any]] = None,
    store: Optional[DocumentStore] = None,
) -> AbilityContext:
    """Create an ``AbilityContext`` from config, building the store if needed."""
    if config is None:
        config = get_config(quiet=True)
    if store is None:
        store = build_store(config)
    return AbilityContext.from_config(store, config)

