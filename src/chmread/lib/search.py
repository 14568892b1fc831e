"""Full-text keyword search across the HTML pages of an extracted CHM tree."""

import logging
import os
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from .encoding import UTF8, ConvertedFileSet, read_text
from .exceptions import EmptyKeywordError
from .filetree import iter_files
from .outline import OutlineNode
from .text_utils import extract_title, strip_html

logger = logging.getLogger(__name__)

NO_RESULTS_TITLE = "No results found"


class SearchResult(BaseModel):
    """A page containing the keyword, with the text around its first match."""

    title: str
    path: str
    snippet: str

    @property
    def display_text(self) -> str:
        return f"{self.title} - {self.snippet}"


class SearchOutcome(BaseModel):
    """
    Results of one search, in file discovery order.

    An outcome with no results is still a completed search; check `found`
    rather than the length of `results`.
    """

    keyword: str
    results: List[SearchResult] = []

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def found(self) -> bool:
        return bool(self.results)

    def as_outline(self) -> List[OutlineNode]:
        """
        Shape the results as an outline for the navigation list.

        One synthetic root carries the keyword and match count. Its children
        are the matches, or a single placeholder when nothing matched.
        """
        root = OutlineNode(title=f'Search results for "{self.keyword}" ({self.total})')
        if not self.found:
            root.add_child(OutlineNode(title=NO_RESULTS_TITLE))
        for result in self.results:
            root.add_child(OutlineNode(title=result.display_text, target_path=result.path))
        return [root]


def make_snippet(text: str, start: int, end: int, context: int = 50) -> str:
    """
    Cut a window of text around a match.

    The window spans `context` characters before start and after end,
    clamped to the text. "..." marks each side that was truncated.
    """
    begin = max(0, start - context)
    finish = min(len(text), end + context)
    snippet = text[begin:finish]
    if begin > 0:
        snippet = "..." + snippet
    if finish < len(text):
        snippet = snippet + "..."
    return snippet


def find_keyword(text: str, keyword: str) -> Optional[Tuple[int, int]]:
    """Return the (start, end) span of the first case-insensitive match."""
    match = re.search(re.escape(keyword), text, re.IGNORECASE)
    if match is None:
        return None
    return match.start(), match.end()


def normalize_keyword(keyword: Optional[str]) -> str:
    """
    Validate a user-entered keyword.

    The keyword is returned as given, surrounding whitespace included, so a
    trailing space still matches only at a word end.

    Raises:
        EmptyKeywordError: If the keyword is empty or only whitespace
    """
    if not keyword or not keyword.strip():
        raise EmptyKeywordError("Search keyword must not be empty")
    return keyword


class SearchEngine(BaseModel):
    """
    Scans every HTML page under a root on each call.

    There is no index: each search re-reads the tree, detecting the encoding
    of every page separately. Only the first match of each page is reported.
    """

    context_chars: int = Field(default=50, description="Characters of context on each side of a match")
    extensions: Tuple[str, ...] = Field(default=(".html", ".htm"), description="Suffixes of searchable pages")

    def search_file(
        self, filepath: str, keyword: str, converted: Optional[ConvertedFileSet] = None
    ) -> Optional[SearchResult]:
        """
        Search one page.

        Pages in `converted` are already UTF-8 on disk and are read as such
        without detection.

        Returns:
            A SearchResult, or None if the page does not contain the keyword

        Raises:
            OSError: If the page cannot be read
        """
        label = UTF8 if converted is not None and filepath in converted else None
        html = read_text(filepath, label)
        text = strip_html(html)
        span = find_keyword(text, keyword)
        if span is None:
            return None

        title = extract_title(html) or os.path.basename(filepath)
        snippet = make_snippet(text, span[0], span[1], self.context_chars)
        return SearchResult(title=title, path=filepath, snippet=snippet)

    def search(
        self, root_dir: str, keyword: str, converted: Optional[ConvertedFileSet] = None
    ) -> SearchOutcome:
        """
        Search all pages under root_dir for keyword, case-insensitively.

        Args:
            root_dir: Extracted CHM root
            keyword: Term to look for, matched verbatim
            converted: Files rewritten to UTF-8 in the current session

        Returns:
            SearchOutcome with one result per matching page

        Raises:
            EmptyKeywordError: If the keyword is empty, before anything is read
        """
        keyword = normalize_keyword(keyword)
        outcome = SearchOutcome(keyword=keyword)

        scanned = 0
        for filepath in iter_files(root_dir, self.extensions):
            scanned += 1
            try:
                result = self.search_file(filepath, keyword, converted)
            except OSError as e:
                logger.warning("Skipping unreadable page %s: %s", filepath, e)
                continue
            if result is not None:
                outcome.results.append(result)

        logger.info('Search for "%s" matched %d of %d pages', keyword, outcome.total, scanned)
        return outcome
