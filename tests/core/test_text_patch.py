"""Tests for find/replace over raw Elementor JSON text."""

import json

import pytest

from elementor_abilities.core.errors import (
    PatternCompileError,
    PostConditionError,
    ValidationError,
)
from elementor_abilities.core.text_patch import compile_pattern, patch_text, translate_template

RAW = json.dumps(
    [{"id": "w", "elType": "widget", "settings": {"color": "red", "border": "red", "url": "http://a.test"}}],
    separators=(",", ":"),
)


class TestLiteralMode:
    def test_red_to_blue_counts_every_occurrence(self):
        result = patch_text('"color: red; color: red;"', "red", "blue")
        assert result.text == '"color: blue; color: blue;"'
        assert result.count == 2
        assert result.changed

    def test_zero_matches_is_success(self):
        result = patch_text(RAW, "green", "blue")
        assert result.count == 0
        assert result.text == RAW
        assert not result.changed

    def test_literal_treats_metacharacters_literally(self):
        raw = json.dumps({"price": "$5.00 (a.b)"})
        result = patch_text(raw, "(a.b)", "[x]")
        assert result.count == 1
        assert json.loads(result.text) == {"price": "$5.00 [x]"}

    def test_inverse_patch_restores_text(self):
        patched = patch_text(RAW, "red", "teal")
        restored = patch_text(patched.text, "teal", "red")
        assert restored.text == RAW

    def test_unbalanced_quote_is_rejected(self):
        with pytest.raises(PostConditionError, match="invalid JSON"):
            patch_text('{"a":"b"}', '"b"', '"b')

    def test_structural_damage_is_rejected(self):
        with pytest.raises(PostConditionError):
            patch_text(RAW, ",", ";")

    def test_empty_find_rejected(self):
        with pytest.raises(ValidationError, match="Find string is required"):
            patch_text(RAW, "", "x")

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_json_number_literals_are_rejected(self, literal):
        with pytest.raises(PostConditionError, match="invalid JSON"):
            patch_text('{"a":"b"}', '"b"', literal)


class TestPatternMode:
    def test_regex_with_groups(self):
        result = patch_text(RAW, r"http://(\w+)\.test", r"https://\1.test", use_pattern=True)
        assert result.count == 1
        assert "https://a.test" in result.text

    def test_dollar_group_references(self):
        result = patch_text(RAW, r"http://(\w+)", "https://$1", use_pattern=True)
        assert "https://a.test" in result.text
        result = patch_text(RAW, r"http://(\w+)", "https://${1}", use_pattern=True)
        assert "https://a.test" in result.text

    def test_delimited_pattern_with_modifier(self):
        result = patch_text(RAW, "/RED/i", "blue", use_pattern=True)
        assert result.count == 2
        assert "red" not in result.text

    def test_delimited_syntax_can_be_disabled(self):
        result = patch_text(RAW, "/RED/i", "blue", use_pattern=True, allow_delimited=False)
        assert result.count == 0

    def test_invalid_pattern(self):
        with pytest.raises(PatternCompileError, match="Invalid regex pattern"):
            patch_text(RAW, "(unclosed", "x", use_pattern=True)

    def test_invalid_group_reference(self):
        with pytest.raises(PatternCompileError, match="Invalid replacement"):
            patch_text(RAW, "red", r"\2", use_pattern=True)

    def test_pattern_breaking_json_is_rejected(self):
        with pytest.raises(PostConditionError):
            patch_text(RAW, r"[{}]", "", use_pattern=True)

    def test_zero_matches_is_success(self):
        result = patch_text(RAW, r"\d{9}", "x", use_pattern=True)
        assert result.count == 0
        assert result.text == RAW

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_json_number_literals_are_rejected(self, literal):
        with pytest.raises(PostConditionError, match="invalid JSON"):
            patch_text('{"a":"40"}', r'"\d+"', literal, use_pattern=True)

    def test_escape_sequences_in_replacement_are_literal(self):
        raw = json.dumps({"t": "Hello world"})
        result = patch_text(raw, r"Hello (\w+)", r"Hello\n$1", use_pattern=True)
        assert json.loads(result.text) == {"t": "Hello\nworld"}

    def test_unicode_escape_in_replacement(self):
        raw = json.dumps({"t": "cafe"})
        result = patch_text(raw, r"cafe", r"caf\u00e9", use_pattern=True)
        assert json.loads(result.text) == {"t": "caf\u00e9"}

    def test_escaped_slash_in_replacement(self):
        raw = json.dumps({"url": "http://a.test"})
        result = patch_text(raw, r"http://a\.test", r"https:\/\/b.test", use_pattern=True)
        assert r"https:\/\/b.test" in result.text
        assert json.loads(result.text) == {"url": "https://b.test"}


class TestHelpers:
    def test_unknown_modifier(self):
        with pytest.raises(PatternCompileError, match="unsupported modifier"):
            compile_pattern("/x/q")

    def test_plain_pattern_compiles_as_is(self):
        assert compile_pattern(r"a+b").pattern == r"a+b"

    def test_translate_template(self):
        assert translate_template("$1-${2}") == r"\g<1>-\g<2>"
        assert translate_template("no refs") == "no refs"
        assert translate_template(r"\1\9") == r"\g<1>\g<9>"
        assert translate_template(r"a\\b") == r"a\\b"
        assert translate_template(r"a\nb") == r"a\\nb"
