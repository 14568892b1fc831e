"""
chmread - navigate and search extracted CHM help files

A pure Python library that turns the files unpacked from a compiled HTML
help (.chm) file into a navigation outline, with per-file encoding
detection, full-text search and keyword highlighting.
"""

from .lib.source import HelpSource
from .lib.session import ReaderSession
from .lib.search import SearchEngine
from .lib.exceptions import CHMError, InvalidSourceError, EmptyKeywordError, NoSourceError

__version__ = "0.0.1"

__all__ = [
    "HelpSource",
    "ReaderSession",
    "SearchEngine",
    "CHMError",
    "InvalidSourceError",
    "EmptyKeywordError",
    "NoSourceError",
]
