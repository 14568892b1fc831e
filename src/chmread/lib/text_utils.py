"""Text decoding and plain-text extraction for extracted CHM documents.

This module provides centralized decoding with encoding fallbacks, so that
the TOC parser, the search engine and the encoding fixer all turn bytes into
text the same way, plus the lossy markup stripper used by search.
"""

import codecs
import re
from typing import Optional

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)

# Order matters: &amp; goes last so "&amp;lt;" yields "&lt;" and not "<".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)

# Labels produced by detect_encoding that Python spells differently.
_CODEC_ALIASES = {
    "UTF-8": "utf-8",
    "GBK": "gbk",
    "BIG5": "big5",
}


def python_codec(label: str) -> str:
    """Map an encoding label (e.g. "GBK", "Big5", "WINDOWS-1252") to a Python codec name."""
    return _CODEC_ALIASES.get(label.upper(), label.lower())


def decode_help_text(data: bytes, label: Optional[str] = None) -> str:
    """
    Decode byte string to text using the detected encoding label.

    Invalid byte sequences are replaced rather than raising, matching the way
    a browser renders a mislabelled page.

    Args:
        data: Byte data to decode
        label: Encoding label as returned by detect_encoding
               If None or unknown to Python, falls back through common encodings

    Returns:
        Decoded string, never raises on bad data
    """
    if not data:
        return ""

    if label:
        try:
            return data.decode(python_codec(label), errors="replace")
        except LookupError:
            pass

    # Fall back through the encodings CHM files are usually authored in:
    # - utf-8: newer compilers and converted files
    # - gbk: simplified Chinese help files
    # - cp1252: Western European
    for encoding in ("utf-8", "gbk", "cp1252"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue

    return data.decode("cp1252", errors="replace")


def is_known_codec(label: str) -> bool:
    """Return True when Python has a codec for the given encoding label."""
    try:
        codecs.lookup(python_codec(label))
    except LookupError:
        return False
    return True


def decode_entities(text: str) -> str:
    """Decode the fixed set of named character references used by help pages."""
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return text


def strip_html(html: str) -> str:
    """
    Project markup to plain text.

    Removes script and style elements with their content, drops every
    remaining tag, decodes a handful of character references and collapses
    whitespace. Best-effort and lossy, but deterministic.
    """
    text = _SCRIPT_RE.sub(" ", html)
    text = _STYLE_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    text = decode_entities(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_title(html: str) -> Optional[str]:
    """Return the text of the <title> element, or None if missing or blank."""
    match = _TITLE_RE.search(html)
    if not match:
        return None
    title = strip_html(match.group(1))
    return title or None
