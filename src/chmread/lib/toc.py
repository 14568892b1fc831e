"""Parser for the .hhc table of contents of an extracted CHM file."""

import logging
import os
import re
from typing import List, Optional

from pydantic import BaseModel, Field

from .encoding import detect_encoding, read_text
from .outline import OutlineNode
from .text_utils import decode_entities

logger = logging.getLogger(__name__)

_UL_START_RE = re.compile(r"<\s*ul(?:\s[^>]*)?>", re.IGNORECASE)
_UL_END_RE = re.compile(r"<\s*/\s*ul\s*>", re.IGNORECASE)
_LI_START_RE = re.compile(r"<\s*li(?:\s[^>]*)?>", re.IGNORECASE)
_OBJECT_END_RE = re.compile(r"<\s*/\s*object\s*>", re.IGNORECASE)
_PARAM_RE = re.compile(
    r"<\s*param\s+name\s*=\s*(?P<q1>[\"'])(?P<name>.*?)(?P=q1)\s+value\s*=\s*(?P<q2>[\"'])(?P<value>.*?)(?P=q2)",
    re.IGNORECASE | re.DOTALL,
)

UL_START = "ul_start"
UL_END = "ul_end"
LI_START = "li_start"

_MARKERS = ((UL_START, _UL_START_RE), (UL_END, _UL_END_RE), (LI_START, _LI_START_RE))


def _next_marker(content: str, pos: int):
    """
    Find the nearest structural marker at or after pos.

    Returns:
        Tuple of (kind, match), or (None, None) past the last marker
    """
    best_kind = None
    best_match = None
    for kind, pattern in _MARKERS:
        match = pattern.search(content, pos)
        if match and (best_match is None or match.start() < best_match.start()):
            best_kind, best_match = kind, match
    return best_kind, best_match


def _find_block_end(content: str, item: re.Match) -> int:
    """
    Bound the parameter block of a list item.

    The block runs to the nearest </object>; failing that to the next <li>;
    failing that to the end of the document.
    """
    match = _OBJECT_END_RE.search(content, item.start())
    if match:
        return match.start()
    match = _LI_START_RE.search(content, item.end())
    if match:
        return match.start()
    return len(content)


def parse_params(block: str) -> dict:
    """
    Extract <param name=... value=...> pairs from an item block.

    Names are lowercased. When a name repeats, the last value wins.
    """
    params = {}
    for match in _PARAM_RE.finditer(block):
        params[match.group("name").strip().lower()] = match.group("value")
    return params


def resolve_local(base_dir: str, local: str) -> str:
    """Resolve a TOC "Local" value against the directory holding the TOC."""
    local = local.strip().replace("\\", "/")
    if not local:
        return ""
    return os.path.abspath(os.path.join(base_dir, local))


def parse_toc(content: str, base_dir: str) -> List[OutlineNode]:
    """
    Turn the markup of a TOC document into a nested outline.

    A single scan keeps an explicit stack of parents; None at the bottom means
    top level. <ul> alone does nothing, </ul> pops (never past the bottom),
    and each <li> creates a node under the stack top. A node is pushed when
    the first marker after its block is a <ul>, even if that list turns out
    to be empty.

    Args:
        content: Decoded TOC markup
        base_dir: Directory that Local values are relative to

    Returns:
        Top-level outline nodes in document order
    """
    outline: List[OutlineNode] = []
    stack: List[Optional[OutlineNode]] = [None]
    pos = 0

    while pos < len(content):
        kind, match = _next_marker(content, pos)
        if kind is None:
            break

        if kind == UL_START:
            pos = match.end()
            continue

        if kind == UL_END:
            if len(stack) > 1:
                stack.pop()
            pos = match.end()
            continue

        block_end = _find_block_end(content, match)
        params = parse_params(content[match.start() : block_end])

        title = decode_entities(params.get("name", "")).strip()
        if title:
            node = OutlineNode(title=title, target_path=resolve_local(base_dir, params.get("local", "")))
            parent = stack[-1]
            if parent is None:
                outline.append(node)
            else:
                parent.add_child(node)

            next_kind, _ = _next_marker(content, block_end)
            if next_kind == UL_START:
                stack.append(node)

        pos = max(block_end, match.end())

    return outline


class TocFile(BaseModel):
    """
    A parsed .hhc table of contents.

    The file is read and parsed on construction. An unreadable file gives an
    empty outline rather than an error.
    """

    filepath: str
    encoding: str = Field(default="UTF-8", description="Detected encoding label of the TOC")
    outline: List[OutlineNode] = []

    def __init__(self, filepath: str, **data):
        super().__init__(filepath=filepath, **data)
        self._parse()

    def _parse(self):
        self.encoding = detect_encoding(self.filepath)
        try:
            content = read_text(self.filepath, self.encoding)
        except OSError as e:
            logger.warning("Failed to read table of contents %s: %s", self.filepath, e)
            return

        base_dir = os.path.dirname(os.path.abspath(self.filepath))
        self.outline = parse_toc(content, base_dir)
        logger.debug("Parsed %d top-level TOC entries from %s", len(self.outline), self.filepath)

    @property
    def is_empty(self) -> bool:
        return not self.outline
