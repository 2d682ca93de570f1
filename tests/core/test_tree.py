"""Tests for element tree traversal and targeted replacement."""

import copy
import json

import pytest

from elementor_abilities.core.models import Element, document_to_data, parse_document
from elementor_abilities.core.tree import find_element, iter_elements, replace_element


def _doc(data):
    return parse_document(copy.deepcopy(data))


@pytest.fixture
def duplicate_ids():
    """Id "dup" appears at depth 2 (first in pre-order), depth 0 and depth 1."""
    return [
        {
            "id": "a",
            "elType": "container",
            "elements": [
                {
                    "id": "b",
                    "elType": "container",
                    "elements": [{"id": "dup", "elType": "widget", "marker": 1}],
                },
            ],
        },
        {"id": "dup", "elType": "container", "marker": 2, "elements": [
            {"id": "dup", "elType": "widget", "marker": 3},
        ]},
    ]


class TestIterElements:
    def test_preorder_with_depths(self, home_data):
        visited = [(depth, el.id) for depth, el in iter_elements(_doc(home_data))]
        assert visited == [
            (0, "hero"),
            (1, "title"),
            (1, "cta"),
            (0, "footer"),
            (1, "copy"),
        ]

    def test_empty_document(self):
        assert list(iter_elements(())) == []


class TestFindElement:
    def test_finds_nested(self, home_data):
        found = find_element(_doc(home_data), "cta")
        assert found is not None
        assert found.extra["widgetType"] == "button"

    def test_missing(self, home_data):
        assert find_element(_doc(home_data), "nope") is None

    def test_first_match_wins(self, duplicate_ids):
        assert find_element(_doc(duplicate_ids), "dup").extra["marker"] == 1


class TestReplaceElement:
    def test_hero_scenario(self):
        document = parse_document([{"id": "hero", "elType": "widget", "elements": []}])
        replacement = Element.from_dict(
            {"id": "hero", "elType": "widget", "elements": [{"id": "child1", "elType": "text"}]}
        )

        updated, found = replace_element(document, "hero", replacement)

        assert found is True
        assert document_to_data(updated) == [
            {"id": "hero", "elType": "widget", "elements": [{"id": "child1", "elType": "text"}]}
        ]

    def test_absent_target_leaves_document_unchanged(self, home_data):
        document = _doc(home_data)
        replacement = Element.from_dict({"id": "x", "elType": "widget"})

        updated, found = replace_element(document, "missing", replacement)

        assert found is False
        assert updated is document
        assert document_to_data(updated) == home_data

    def test_nested_replacement_keeps_other_nodes(self, home_data):
        document = _doc(home_data)
        new_cta = {"id": "cta", "elType": "widget", "widgetType": "button", "settings": {"text": "Go"}}

        updated, found = replace_element(document, "cta", Element.from_dict(new_cta))

        assert found is True
        expected = copy.deepcopy(home_data)
        expected[0]["elements"][1] = new_cta
        assert document_to_data(updated) == expected

    def test_input_document_is_not_modified(self, home_data):
        document = _doc(home_data)
        replace_element(document, "title", Element.from_dict({"id": "title", "elType": "widget"}))
        assert document_to_data(document) == home_data

    def test_unchanged_siblings_are_shared(self, home_data):
        document = _doc(home_data)
        updated, _ = replace_element(
            document, "copy", Element.from_dict({"id": "copy", "elType": "widget"})
        )
        assert updated[0] is document[0]
        assert updated[1] is not document[1]

    def test_only_first_duplicate_is_replaced(self, duplicate_ids):
        document = _doc(duplicate_ids)
        replacement = Element.from_dict({"id": "dup", "elType": "widget", "marker": "new"})

        updated, found = replace_element(document, "dup", replacement)

        assert found is True
        data = document_to_data(updated)
        assert data[0]["elements"][0]["elements"][0]["marker"] == "new"
        assert data[1]["marker"] == 2
        assert data[1]["elements"][0]["marker"] == 3

    def test_replacement_id_is_taken_verbatim(self, home_data):
        updated, found = replace_element(
            _doc(home_data), "footer", Element.from_dict({"id": "new-footer", "elType": "section"})
        )
        assert found is True
        assert [el.id for el in updated] == ["hero", "new-footer"]

    def test_id_comparison_is_type_strict(self):
        document = parse_document([{"id": 5, "elType": "widget"}])
        _, found = replace_element(document, "5", Element.from_dict({"id": "5"}))
        assert found is False

    def test_round_trip_preserves_text(self, home_data):
        raw = json.dumps(home_data, separators=(",", ":"))
        document = parse_document(json.loads(raw))
        assert json.dumps(document_to_data(document), separators=(",", ":")) == raw
