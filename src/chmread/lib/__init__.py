"""
chmread.lib - Core library components

Encoding handling, TOC parsing, file tree, search and highlighting for
extracted CHM trees.
"""

from .source import HelpSource
from .session import ReaderSession, DisplaySurface
from .outline import OutlineNode
from .toc import TocFile, parse_toc
from .filetree import build_file_tree
from .search import SearchEngine, SearchOutcome, SearchResult
from .highlight import HighlightScript, build_highlight_script, build_clear_script
from .encoding import ConvertedFileSet, detect_encoding, fix_html_encoding, convert_once
from .text_utils import strip_html
from .exceptions import CHMError, InvalidSourceError, EmptyKeywordError, NoSourceError

__all__ = [
    "HelpSource",
    "ReaderSession",
    "DisplaySurface",
    "OutlineNode",
    "TocFile",
    "parse_toc",
    "build_file_tree",
    "SearchEngine",
    "SearchOutcome",
    "SearchResult",
    "HighlightScript",
    "build_highlight_script",
    "build_clear_script",
    "ConvertedFileSet",
    "detect_encoding",
    "fix_html_encoding",
    "convert_once",
    "strip_html",
    "CHMError",
    "InvalidSourceError",
    "EmptyKeywordError",
    "NoSourceError",
]
