"""JavaScript programs that mark search keywords inside a rendered page.

The display runs these after a page finishes loading. Every highlight
program first removes the markers left by a previous run, so applying it
again, with the same or another keyword, never nests markers.
"""

import json

from pydantic import BaseModel

from .search import normalize_keyword

MARKER_CLASS = "chmread-highlight"
MARKER_STYLE = "background-color: #ffff00; color: #000000; font-weight: bold;"

_CLEAR_JS = """\
  var marks = document.querySelectorAll("mark.%(marker)s");
  for (var i = 0; i < marks.length; i++) {
    var mark = marks[i];
    var parent = mark.parentNode;
    parent.replaceChild(document.createTextNode(mark.textContent), mark);
    parent.normalize();
  }
"""

_HIGHLIGHT_JS = """\
  var keyword = %(keyword)s;
  var pattern = new RegExp(keyword.replace(/[.*+?^${}()|[\\]\\\\]/g, "\\\\$&"), "gi");
  var root = document.body;
  if (!root) { return 0; }
  var walker = document.createTreeWalker(root, NodeFilter.SHOW_TEXT, {
    acceptNode: function (node) {
      for (var el = node.parentNode; el && el !== root; el = el.parentNode) {
        var tag = el.nodeName.toLowerCase();
        if (tag === "script" || tag === "style" ||
            (tag === "mark" && el.classList.contains("%(marker)s"))) {
          return NodeFilter.FILTER_REJECT;
        }
      }
      pattern.lastIndex = 0;
      return pattern.test(node.nodeValue) ? NodeFilter.FILTER_ACCEPT : NodeFilter.FILTER_SKIP;
    }
  });
  var nodes = [];
  while (walker.nextNode()) { nodes.push(walker.currentNode); }
  var first = null;
  nodes.forEach(function (node) {
    var text = node.nodeValue;
    var fragment = document.createDocumentFragment();
    var last = 0;
    var match;
    pattern.lastIndex = 0;
    while ((match = pattern.exec(text)) !== null) {
      if (match[0].length === 0) { pattern.lastIndex++; continue; }
      fragment.appendChild(document.createTextNode(text.slice(last, match.index)));
      var mark = document.createElement("mark");
      mark.className = "%(marker)s";
      mark.setAttribute("style", "%(style)s");
      mark.textContent = match[0];
      fragment.appendChild(mark);
      if (!first) { first = mark; }
      last = match.index + match[0].length;
    }
    fragment.appendChild(document.createTextNode(text.slice(last)));
    node.parentNode.replaceChild(fragment, node);
  });
  if (first) { first.scrollIntoView({behavior: "smooth", block: "center"}); }
  return nodes.length;
"""


class HighlightScript(BaseModel):
    """A program for the display; keyword is empty for the clear-only program."""

    keyword: str = ""
    source: str


def _wrap(body: str) -> str:
    return "(function () {\n" + body + "})();\n"


def build_clear_script() -> HighlightScript:
    """Build the program that removes all highlight markers from the page."""
    return HighlightScript(source=_wrap(_CLEAR_JS % {"marker": MARKER_CLASS} + "  return 0;\n"))


def build_highlight_script(keyword: str) -> HighlightScript:
    """
    Build the program that marks every occurrence of keyword in the page.

    The keyword is embedded as a JSON string and regex-escaped by the
    program itself. Markers from earlier runs are removed first and the
    first new marker is scrolled to the middle of the view.

    Raises:
        EmptyKeywordError: If the keyword is empty
    """
    keyword = normalize_keyword(keyword)
    values = {"marker": MARKER_CLASS, "style": MARKER_STYLE, "keyword": json.dumps(keyword)}
    source = _wrap(_CLEAR_JS % values + _HIGHLIGHT_JS % values)
    return HighlightScript(keyword=keyword, source=source)
