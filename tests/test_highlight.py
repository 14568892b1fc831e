"""Tests for the keyword highlight programs."""

import json

import pytest

from chmread.lib.exceptions import EmptyKeywordError
from chmread.lib.highlight import MARKER_CLASS, build_clear_script, build_highlight_script


def test_highlight_script_embeds_keyword():
    script = build_highlight_script("install")
    assert script.keyword == "install"
    assert "var keyword = " + json.dumps("install") + ";" in script.source
    assert f'"{MARKER_CLASS}"' in script.source
    assert '"gi"' in script.source


def test_highlight_script_removes_prior_markers_first():
    source = build_highlight_script("install").source
    assert source.index(f'querySelectorAll("mark.{MARKER_CLASS}")') < source.index("createTreeWalker")


def test_highlight_script_skips_script_and_style():
    source = build_highlight_script("install").source
    assert 'tag === "script"' in source
    assert 'tag === "style"' in source


def test_highlight_script_scrolls_first_marker_into_view():
    source = build_highlight_script("install").source
    assert 'scrollIntoView({behavior: "smooth", block: "center"})' in source


def test_program_removes_markers_before_marking():
    """Each program carries one removal pass, ahead of its one marking pass."""
    first = build_highlight_script("install").source
    second = build_highlight_script("install").source
    assert first == second
    assert first.count("querySelectorAll") == 1
    assert first.count("createTreeWalker") == 1
    assert first.index("querySelectorAll") < first.index("createTreeWalker")


def test_keyword_is_escaped_for_javascript():
    keyword = 'say "hi" (now)\\'
    source = build_highlight_script(keyword).source
    assert "var keyword = " + json.dumps(keyword) + ";" in source
    assert 'keyword.replace(/[.*+?^${}()|[\\]\\\\]/g, "\\\\$&")' in source


def test_keyword_is_kept_verbatim():
    script = build_highlight_script("install ")
    assert script.keyword == "install "
    assert 'var keyword = "install ";' in script.source


def test_empty_keyword_is_rejected():
    with pytest.raises(EmptyKeywordError):
        build_highlight_script("")
    with pytest.raises(EmptyKeywordError):
        build_highlight_script(" \t ")


def test_clear_script_only_removes_markers():
    script = build_clear_script()
    assert script.keyword == ""
    assert f'querySelectorAll("mark.{MARKER_CLASS}")' in script.source
    assert "createTreeWalker" not in script.source
    assert script.source.startswith("(function () {")
