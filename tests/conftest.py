"""Shared fixtures: a small WordPress site held in a MemoryStore."""

import copy
import json

import pytest

from elementor_abilities.abilities import create_registry
from elementor_abilities.abilities.context import AbilityContext
from elementor_abilities.store import MemoryStore

# ─────────────────────────────────────────────────────────────────────────────
# Sample Elementor data
# ─────────────────────────────────────────────────────────────────────────────

HOME_DATA = [
    {
        "id": "hero",
        "elType": "container",
        "settings": {"background_color": "#ff0000", "padding": {"top": "40"}},
        "elements": [
            {
                "id": "title",
                "elType": "widget",
                "widgetType": "heading",
                "settings": {"title": "Welcome to Acme"},
                "elements": [],
            },
            {
                "id": "cta",
                "elType": "widget",
                "widgetType": "button",
                "settings": {"text": "Buy now", "link": {"url": "http://old.example.com/shop"}},
                "elements": [],
            },
        ],
        "isInner": False,
    },
    {
        "id": "footer",
        "elType": "container",
        "settings": {},
        "elements": [
            {
                "id": "copy",
                "elType": "widget",
                "widgetType": "text-editor",
                "settings": {"editor": "<p>Visit http://old.example.com</p>"},
                "elements": [],
            }
        ],
    },
]

HOME_ID = 12
EMPTY_ID = 13
KIT_ID = 7


@pytest.fixture
def home_data():
    return copy.deepcopy(HOME_DATA)


@pytest.fixture
def store():
    """MemoryStore with a page, an empty page, the active kit and templates."""
    s = MemoryStore(site_url="http://example.test")
    s.add_post(
        HOME_ID,
        "Home",
        meta={
            "_elementor_data": json.dumps(HOME_DATA, separators=(",", ":")),
            "_elementor_edit_mode": "builder",
            "_elementor_page_settings": {"hide_title": "yes"},
            "_elementor_css": {"status": "file"},
        },
    )
    s.add_post(EMPTY_ID, "Plain page")
    s.add_post(
        KIT_ID,
        "Default Kit",
        post_type="elementor_library",
        meta={
            "_elementor_template_type": "kit",
            "_elementor_page_settings": {"container_width": {"size": 1140}},
            "_elementor_css": {"status": "file"},
        },
    )
    s.set_option("elementor_active_kit", KIT_ID)
    s.add_post(
        100,
        "Site Header",
        post_type="elementor_library",
        meta={"_elementor_template_type": "header"},
        date="2025-01-02 09:00:00",
    )
    s.add_post(
        101,
        "about section",
        post_type="elementor_library",
        meta={"_elementor_template_type": "section"},
        date="2025-01-03 09:00:00",
    )
    s.add_post(
        102,
        "Draft footer",
        post_type="elementor_library",
        status="draft",
        meta={"_elementor_template_type": "footer"},
    )
    s.add_post(103, "Untyped", post_type="elementor_library")
    return s


@pytest.fixture
def context(store):
    return AbilityContext(store=store)


@pytest.fixture
def registry():
    return create_registry()
