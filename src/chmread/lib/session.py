"""Reading session tying a loaded source to a display."""

import logging
from typing import List, Optional, Protocol

from .encoding import ConvertedFileSet, convert_once
from .exceptions import NoSourceError
from .highlight import build_clear_script, build_highlight_script
from .outline import OutlineNode
from .search import SearchEngine, SearchOutcome, normalize_keyword
from .source import HelpSource

logger = logging.getLogger(__name__)


class DisplaySurface(Protocol):
    """What the session needs from the HTML rendering side."""

    def navigate_to(self, path: str) -> None: ...

    def run_script(self, source: str) -> None: ...


def split_fragment(path: str):
    """Split "page.htm#anchor" into ("page.htm", "anchor")."""
    filepath, _, fragment = path.partition("#")
    return filepath, fragment


class ReaderSession:
    """
    State of one reader window: the open source, the active keyword and the
    files converted to UTF-8 so far.

    The display must call on_load_finished() after every page load; that is
    when the keyword, if any, is highlighted again.
    """

    def __init__(self, display: DisplaySurface, engine: Optional[SearchEngine] = None):
        self.display = display
        self.engine = engine or SearchEngine()
        self.source: Optional[HelpSource] = None
        self.keyword: Optional[str] = None
        self.converted = ConvertedFileSet()

    def _require_source(self) -> HelpSource:
        if self.source is None:
            raise NoSourceError("No CHM source is open")
        return self.source

    def open(self, root_dir: str, toc_path: Optional[str] = None) -> List[OutlineNode]:
        """
        Load an extracted CHM tree and show its start page.

        Resets the keyword and the converted-file tracking of the previous
        source before loading.
        """
        self.keyword = None
        self.converted.clear()
        self.source = HelpSource(root_dir=root_dir, toc_path=toc_path)
        if self.source.start_page:
            self.navigate(self.source.start_page)
        return self.source.outline

    @property
    def outline(self) -> List[OutlineNode]:
        return self.source.outline if self.source else []

    def navigate(self, path: str) -> None:
        """Convert the page to UTF-8 if needed, then ask the display to load it."""
        if not path:
            return
        filepath, _ = split_fragment(path)
        if convert_once(filepath, self.converted):
            logger.info("Converted %s to UTF-8", filepath)
        self.display.navigate_to(path)

    def activate(self, node: OutlineNode) -> None:
        """Navigate to an outline node's target; containers do nothing."""
        if node.has_target:
            self.navigate(node.target_path)

    def search(self, keyword: str) -> SearchOutcome:
        """
        Search the open source and make keyword the active highlight term.

        Raises:
            EmptyKeywordError: If keyword is empty
            NoSourceError: If no source is open
        """
        keyword = normalize_keyword(keyword)
        source = self._require_source()
        outcome = self.engine.search(source.root_dir, keyword, self.converted)
        self.keyword = keyword
        return outcome

    def clear_search(self) -> List[OutlineNode]:
        """
        Drop the active keyword and go back to the source outline.

        Highlights on the current page are removed and the converted-file
        tracking is reset.
        """
        self.keyword = None
        self.converted.clear()
        self.display.run_script(build_clear_script().source)
        if self.source is None:
            return []
        return self.source.rebuild_outline()

    def on_load_finished(self, ok: bool = True) -> None:
        """Re-apply the active keyword's highlight after a page load."""
        if not ok or not self.keyword:
            return
        self.display.run_script(build_highlight_script(self.keyword).source)
