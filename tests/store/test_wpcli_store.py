"""Tests for the WP-CLI store, with subprocess.run mocked out."""

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from elementor_abilities.core.errors import StoreError
from elementor_abilities.store.wpcli import WPCLIStore, _clean_output, _parse_json_output


def _done(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def wp():
    return WPCLIStore(Path("/var/www/site"), timeout=30)


class TestOutputCleaning:
    def test_strips_php_noise_and_ansi(self):
        text = "PHP Notice: Undefined index\n\x1b[32m[1,2]\x1b[0m\n"
        assert _clean_output(text) == "[1,2]"

    def test_parse_json_output(self):
        assert _parse_json_output('Warning: x\n{"a": 1}') == {"a": 1}
        assert _parse_json_output("") is None
        assert _parse_json_output("not json") is None


class TestCommandLine:
    def test_read_adds_format_and_path(self, wp):
        with patch("subprocess.run", return_value=_done('"builder"')) as mock_run:
            assert wp.get_meta(12, "_elementor_edit_mode") == "builder"

        argv = mock_run.call_args[0][0]
        assert argv[:2] == ["wp", "--path=/var/www/site"]
        assert argv[2:7] == ["post", "meta", "get", "12", "_elementor_edit_mode"]
        assert "--format=json" in argv
        assert "--no-color" in argv and "--quiet" in argv
        assert mock_run.call_args.kwargs["timeout"] == 30

    def test_run_as_prefixes_sudo(self):
        wp = WPCLIStore(Path("/srv/wp"), run_as="www-data")
        with patch("subprocess.run", return_value=_done("{}")) as mock_run:
            wp.get_option("elementor_active_kit")
        assert mock_run.call_args[0][0][:4] == ["sudo", "-u", "www-data", "wp"]

    def test_large_values_go_through_stdin(self, wp):
        raw = '[{"id":"hero","elType":"container"}]'
        with patch("subprocess.run", return_value=_done()) as mock_run:
            wp.save_raw_text(12, raw)

        argv = mock_run.call_args[0][0]
        assert raw not in argv
        assert mock_run.call_args.kwargs["input"] == raw
        assert "--format=json" not in argv

    def test_structured_values_sent_as_json(self, wp):
        with patch("subprocess.run", return_value=_done()) as mock_run:
            wp.save_page_settings(7, {"container_width": {"size": 1200}})

        assert "--format=json" in mock_run.call_args[0][0]
        assert json.loads(mock_run.call_args.kwargs["input"]) == {
            "container_width": {"size": 1200}
        }


class TestPrimitives:
    def test_get_post(self, wp):
        row = {
            "ID": 12,
            "post_title": "Home",
            "post_type": "page",
            "post_status": "publish",
            "post_date": "2025-01-01 10:00:00",
            "post_modified": "2025-01-02 10:00:00",
        }
        with patch("subprocess.run", return_value=_done(json.dumps(row))):
            post = wp.get_post(12)
        assert post.id == 12
        assert post.title == "Home"
        assert post.modified == "2025-01-02 10:00:00"

    def test_get_post_missing(self, wp):
        with patch("subprocess.run", return_value=_done("", 1, "Error: Could not find the post")):
            assert wp.get_post(999) is None

    def test_load_raw_text_returns_stored_string(self, wp):
        raw = '[{"id":"a","elType":"widget"}]'
        with patch("subprocess.run", return_value=_done(json.dumps(raw))):
            assert wp.load_raw_text(12) == raw

    def test_write_failure_raises(self, wp):
        with patch("subprocess.run", return_value=_done("", 1, "Error: boom")):
            with pytest.raises(StoreError, match="boom"):
                wp.touch_post(12)

    def test_delete_meta_tolerates_missing_key(self, wp):
        with patch("subprocess.run", return_value=_done("", 1, "Error: no such key")):
            wp.invalidate_derived_cache(12)

    def test_permalink(self, wp):
        with patch("subprocess.run", return_value=_done("https://site.test/home/\n")):
            assert wp.permalink(12) == "https://site.test/home/"

    def test_flush_css(self, wp):
        with patch("subprocess.run", return_value=_done("Success: flushed")) as mock_run:
            assert wp.invalidate_all_derived_caches() is True
        assert mock_run.call_args[0][0][2:4] == ["elementor", "flush-css"]

    def test_flush_css_fallback(self, wp):
        results = [_done("", 1, "Error: 'elementor' is not a registered wp command."), _done()]
        with patch("subprocess.run", side_effect=results) as mock_run:
            assert wp.invalidate_all_derived_caches() is False
        fallback = mock_run.call_args_list[1][0][0]
        assert fallback[2] == "eval"
        assert "delete_post_meta_by_key" in fallback[3]

    def test_query_templates(self, wp):
        rows = [
            {"ID": 100, "post_title": "Header", "post_date": "d1", "post_modified": "m1"},
        ]
        results = [_done(json.dumps(rows)), _done('"header"')]
        with patch("subprocess.run", side_effect=results) as mock_run:
            templates = wp.list_templates("header", limit=5)

        list_argv = mock_run.call_args_list[0][0][0]
        assert "--post_type=elementor_library" in list_argv
        assert "--meta_value=header" in list_argv
        assert "--posts_per_page=5" in list_argv
        assert [t.to_dict() for t in templates] == [
            {"id": 100, "title": "Header", "type": "header", "created_at": "d1", "modified_at": "m1"}
        ]


class TestFailures:
    def test_timeout(self, wp):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="wp", timeout=30)):
            with pytest.raises(StoreError, match="timed out"):
                wp.get_post(12)

    def test_missing_binary(self, wp):
        with patch("subprocess.run", side_effect=FileNotFoundError("wp")):
            with pytest.raises(StoreError, match="could not be started"):
                wp.get_post(12)

    def test_unreadable_meta_output(self, wp):
        with patch("subprocess.run", return_value=_done("Fatal: <html>")):
            with pytest.raises(StoreError, match="Unreadable WP-CLI output"):
                wp.get_meta(12, "_elementor_data")

    def test_empty_meta_output_reads_as_missing(self, wp):
        with patch("subprocess.run", return_value=_done("")):
            assert wp.get_meta(12, "_elementor_data") is None

    @pytest.mark.parametrize("rows", [[{"post_title": "No ID"}], ["100"], {"ID": 100}])
    def test_malformed_template_rows(self, wp, rows):
        with patch("subprocess.run", return_value=_done(json.dumps(rows))):
            with pytest.raises(StoreError, match="template query"):
                wp.list_templates("all", limit=5)
