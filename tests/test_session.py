"""Tests for the reading session and its display interaction."""

import os

import pytest

from chmread.lib import encoding
from chmread.lib.exceptions import EmptyKeywordError, NoSourceError
from chmread.lib.highlight import MARKER_CLASS
from chmread.lib.outline import OutlineNode
from chmread.lib.session import ReaderSession


class FakeDisplay:
    """Records the requests a session sends to the display."""

    def __init__(self):
        self.navigations = []
        self.scripts = []

    def navigate_to(self, path):
        self.navigations.append(path)

    def run_script(self, source):
        self.scripts.append(source)


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def session(display, sample_copy):
    session = ReaderSession(display)
    session.open(sample_copy)
    return session


def test_open_shows_start_page(session, display, sample_copy):
    assert display.navigations == [os.path.join(sample_copy, "index.html")]
    assert session.source.outline_kind == "toc"
    assert [node.title for node in session.outline] == ["简介", "Reference"]


def test_navigate_converts_gbk_page_once(session, display, sample_copy, monkeypatch):
    page = os.path.join(sample_copy, "html", "gbk.htm")

    session.navigate(page)

    assert page in session.converted
    assert display.navigations[-1] == page
    content = open(page, "rb").read().decode("utf-8")
    assert "关键字" in content
    assert "charset=UTF-8" in content

    def fail(*args, **kwargs):
        raise AssertionError("file rewritten twice")

    monkeypatch.setattr(encoding, "fix_html_encoding", fail)
    session.navigate(page)
    assert display.navigations[-2:] == [page, page]


def test_navigate_keeps_fragment(session, display, sample_copy):
    target = os.path.join(sample_copy, "html", "api.htm") + "#top"
    session.navigate(target)
    assert display.navigations[-1] == target


def test_activate_container_does_nothing(session, display):
    before = list(display.navigations)
    session.activate(OutlineNode(title="Group"))
    session.navigate("")
    assert display.navigations == before


def test_activate_leaf_navigates(session, display):
    leaf = session.outline[0].children[0]
    session.activate(leaf)
    assert display.navigations[-1] == leaf.target_path


def test_search_sets_keyword_and_highlights_after_load(session, display):
    outcome = session.search("keyword")

    assert outcome.total == 3
    assert session.keyword == "keyword"
    assert display.scripts == []

    session.navigate(outcome.results[0].path)
    session.on_load_finished(True)

    assert len(display.scripts) == 1
    assert '"keyword"' in display.scripts[0]


def test_failed_load_is_not_highlighted(session, display):
    session.search("keyword")
    session.on_load_finished(False)
    assert display.scripts == []


def test_no_highlight_without_keyword(session, display):
    session.on_load_finished(True)
    assert display.scripts == []


def test_search_rejects_empty_keyword(session):
    with pytest.raises(EmptyKeywordError):
        session.search("  ")
    assert session.keyword is None


def test_search_requires_open_source(display):
    with pytest.raises(NoSourceError):
        ReaderSession(display).search("keyword")


def test_clear_search_resets_state(session, display, sample_copy):
    session.search("keyword")
    session.navigate(os.path.join(sample_copy, "html", "gbk.htm"))
    assert len(session.converted) == 1

    outline = session.clear_search()

    assert session.keyword is None
    assert len(session.converted) == 0
    assert f'querySelectorAll("mark.{MARKER_CLASS}")' in display.scripts[-1]
    assert "createTreeWalker" not in display.scripts[-1]
    assert [node.title for node in outline] == ["简介", "Reference"]

    session.on_load_finished(True)
    assert len(display.scripts) == 1


def test_reopen_resets_state(session, display, sample_copy, tmp_path):
    session.search("keyword")
    session.navigate(os.path.join(sample_copy, "html", "gbk.htm"))

    other = tmp_path / "other"
    other.mkdir()
    (other / "page.htm").write_text("<p>other</p>")
    outline = session.open(str(other))

    assert session.keyword is None
    assert len(session.converted) == 0
    assert session.source.outline_kind == "files"
    assert [node.title for node in outline] == ["page.htm"]


def test_search_reads_converted_headless_page_as_utf8(display, tmp_path):
    """A page converted without a charset declaration is still found by search."""
    root = tmp_path / "headless"
    root.mkdir()
    page = root / "page.htm"
    page.write_bytes("<p>这是一个没有头部的页面，包含关键字。</p>".encode("gbk"))

    session = ReaderSession(display)
    session.open(str(root))
    session.navigate(str(page))

    assert str(page) in session.converted
    assert encoding.detect_encoding(str(page)) == "GBK"

    outcome = session.search("关键字")

    assert outcome.found
    assert [r.path for r in outcome.results] == [str(page)]
    assert "关键字" in outcome.results[0].snippet


def test_start_page_falls_back_to_first_toc_target(display, tmp_path):
    root = tmp_path / "noindex"
    (root / "html").mkdir(parents=True)
    (root / "html" / "intro.htm").write_text("<p>intro</p>")
    (root / "toc.hhc").write_text(
        '<ul><li><object><param name="Name" value="Intro">'
        '<param name="Local" value="html\\intro.htm"></object></ul>'
    )

    session = ReaderSession(display)
    session.open(str(root))

    assert display.navigations == [str(root / "html" / "intro.htm")]
