"""Encoding detection and in-place UTF-8 conversion of extracted CHM pages.

CHM sources compiled on Chinese Windows are usually GBK or Big5, and a single
extracted tree can mix encodings, so every file is inspected on its own.
"""

import logging
import os
import re
import threading
from typing import Iterator, Optional, Set

from .text_utils import decode_help_text, is_known_codec

logger = logging.getLogger(__name__)

UTF8 = "UTF-8"
GBK = "GBK"
BIG5 = "Big5"

# Only the head of a file is inspected.
DETECT_BYTES = 8192

# Minimum number of GBK-looking byte pairs before the heuristic fires.
GBK_THRESHOLD = 5

HTML_SUFFIXES = (".html", ".htm")

CANONICAL_META = '<meta http-equiv="Content-Type" content="text/html; charset=UTF-8">'

_CHARSET_RE = re.compile(r"charset\s*=\s*['\"]?([^'\"\s>]+)", re.IGNORECASE)
_META_CHARSET_RE = re.compile(r"<meta\s+[^>]*charset\s*=\s*['\"]?[^'\"\s>]+['\"]?[^>]*>", re.IGNORECASE)
_HEAD_RE = re.compile(r"<head[^>]*>", re.IGNORECASE)


def normalize_charset(token: str) -> str:
    """
    Normalize a charset token from a declaration to an encoding label.

    The GB family collapses to GBK (a superset of GB2312), anything Big5-ish
    to Big5 and both UTF-8 spellings to UTF-8. Other tokens are returned
    uppercased.
    """
    charset = token.upper()
    if "GBK" in charset or "GB2312" in charset or "GB-2312" in charset or "CP936" in charset:
        return GBK
    if "BIG5" in charset:
        return BIG5
    if "UTF-8" in charset or "UTF8" in charset:
        return UTF8
    return charset


def count_byte_patterns(data: bytes):
    """
    Count adjacent byte pairs that look like GBK and like UTF-8 multi-byte sequences.

    Returns:
        Tuple of (gbk_like, utf8_like) pair counts
    """
    gbk_like = 0
    utf8_like = 0
    for c1, c2 in zip(data, data[1:]):
        if 0x81 <= c1 <= 0xFE and 0x40 <= c2 <= 0xFE:
            gbk_like += 1
        if (c1 & 0xE0) == 0xE0 and (c2 & 0x80) == 0x80:
            utf8_like += 1
    return gbk_like, utf8_like


def detect_encoding_from_bytes(data: bytes) -> str:
    """
    Guess the encoding label of a document head.

    An explicit charset declaration always wins. Without one, a byte-pair
    heuristic decides between GBK and the UTF-8 default.

    Args:
        data: Leading bytes of the document

    Returns:
        Encoding label: "UTF-8", "GBK", "Big5" or an uppercased charset token
    """
    match = _CHARSET_RE.search(data.decode("latin-1"))
    if match:
        return normalize_charset(match.group(1))

    gbk_like, utf8_like = count_byte_patterns(data)
    if gbk_like > utf8_like and gbk_like > GBK_THRESHOLD:
        return GBK

    return UTF8


def detect_encoding(filepath: str) -> str:
    """
    Detect the encoding label of a file from its first DETECT_BYTES bytes.

    Never fails: a file that cannot be opened is reported as UTF-8.
    """
    try:
        with open(filepath, "rb") as f:
            data = f.read(DETECT_BYTES)
    except OSError as e:
        logger.debug("Cannot read %s for encoding detection: %s", filepath, e)
        return UTF8
    return detect_encoding_from_bytes(data)


def read_text(filepath: str, label: Optional[str] = None) -> str:
    """
    Read a whole file as text, detecting its encoding unless a label is given.

    Raises:
        OSError: If the file cannot be read
    """
    with open(filepath, "rb") as f:
        data = f.read()
    if label is None:
        label = detect_encoding_from_bytes(data[:DETECT_BYTES])
    return decode_help_text(data, label)


def rewrite_charset_declaration(content: str) -> str:
    """
    Point the document's charset declaration at UTF-8.

    Existing <meta ... charset=...> tags are replaced. Without one, the
    canonical tag is inserted after the <head> opening tag; a document with
    no head is returned unchanged.
    """
    if _META_CHARSET_RE.search(content):
        return _META_CHARSET_RE.sub(CANONICAL_META, content)

    match = _HEAD_RE.search(content)
    if match:
        pos = match.end()
        return content[:pos] + "\n" + CANONICAL_META + content[pos:]
    return content


def fix_html_encoding(filepath: str, encoding: str) -> bool:
    """
    Rewrite an HTML file in place as UTF-8 with a matching charset declaration.

    This is destructive and one-way: running it again on the converted file
    with the old label would mis-decode it. Callers track converted files
    with ConvertedFileSet.

    Args:
        filepath: Path to the HTML file
        encoding: Encoding label the file is currently written in

    Returns:
        True if the file was rewritten, False otherwise
    """
    if not is_known_codec(encoding):
        logger.warning("Unknown encoding %s for %s, leaving file untouched", encoding, filepath)
        return False

    try:
        content = read_text(filepath, encoding)
    except OSError as e:
        logger.warning("Cannot read %s for conversion: %s", filepath, e)
        return False

    content = rewrite_charset_declaration(content)
    if not _CHARSET_RE.search(content):
        # Detection falls back to the byte heuristic for this file, which can
        # report the UTF-8 bytes as GBK once the path leaves ConvertedFileSet.
        logger.warning("%s has no <head>, converting without a charset declaration", filepath)

    try:
        with open(filepath, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        logger.warning("Failed to write converted %s: %s", filepath, e)
        return False

    logger.debug("Converted %s from %s to UTF-8", filepath, encoding)
    return True


def normalize_path(filepath: str) -> str:
    """Normalize a path to the key used by ConvertedFileSet."""
    return os.path.normcase(os.path.abspath(filepath))


class ConvertedFileSet:
    """
    The set of files already rewritten to UTF-8 in the current session.

    Once a path is in the set its bytes on disk are UTF-8 and it must not be
    detected or converted again. Paths are keyed by their normalized absolute
    form. All access goes through one lock.
    """

    def __init__(self):
        self._paths: Set[str] = set()
        self.lock = threading.RLock()

    def add(self, filepath: str) -> None:
        with self.lock:
            self._paths.add(normalize_path(filepath))

    def clear(self) -> None:
        with self.lock:
            self._paths.clear()

    def __contains__(self, filepath: str) -> bool:
        with self.lock:
            return normalize_path(filepath) in self._paths

    def __len__(self) -> int:
        with self.lock:
            return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        with self.lock:
            return iter(sorted(self._paths))


def convert_once(filepath: str, converted: ConvertedFileSet) -> bool:
    """
    Convert an HTML file to UTF-8 unless it was converted before.

    Membership test, detection, rewrite and insertion happen under the set's
    lock, so a path is rewritten at most once per session.

    Args:
        filepath: Path of the document about to be displayed
        converted: Session's ConvertedFileSet

    Returns:
        True if the file was rewritten by this call
    """
    if not filepath.lower().endswith(HTML_SUFFIXES):
        return False

    with converted.lock:
        if filepath in converted:
            return False

        encoding = detect_encoding(filepath)
        if encoding == UTF8:
            return False

        if not fix_html_encoding(filepath, encoding):
            return False

        converted.add(filepath)
        return True
