"""An extracted CHM tree, loaded for navigation."""

import logging
import os
from typing import List, Optional

from pydantic import BaseModel, Field

from .exceptions import InvalidSourceError
from .filetree import build_file_tree, iter_files
from .outline import OutlineNode, count_nodes, first_target
from .toc import TocFile

logger = logging.getLogger(__name__)

TOC_SUFFIX = ".hhc"

START_PAGE_CANDIDATES = ("index.html", "index.htm", "default.html", "default.htm")

OUTLINE_TOC = "toc"
OUTLINE_FILES = "files"


def find_toc_file(root_dir: str) -> Optional[str]:
    """Return the first .hhc file under root_dir, or None."""
    for filepath in iter_files(root_dir, (TOC_SUFFIX,)):
        return filepath
    return None


def find_start_page(root_dir: str) -> Optional[str]:
    """
    Return the page to show when the source is opened.

    Looks for index.html, index.htm, default.html and default.htm, in that
    order, directly in root_dir. Names are compared case-insensitively since
    CHM compilers often write them in uppercase.
    """
    try:
        names = {name.lower(): name for name in os.listdir(root_dir)}
    except OSError as e:
        logger.warning("Cannot list %s: %s", root_dir, e)
        return None

    for candidate in START_PAGE_CANDIDATES:
        name = names.get(candidate)
        if name and os.path.isfile(os.path.join(root_dir, name)):
            return os.path.abspath(os.path.join(root_dir, name))
    return None


class HelpSource(BaseModel):
    """
    The main class for an extracted CHM tree.

    Loading discovers the table of contents and builds the navigation outline
    from it. When there is no TOC, or it parses to nothing, the outline mirrors
    the files on disk instead. Without an index or default page in the root,
    the first TOC entry with a target is the start page.
    """

    root_dir: str
    toc_path: Optional[str] = None
    toc: Optional[TocFile] = None
    outline: List[OutlineNode] = []
    outline_kind: str = Field(default=OUTLINE_FILES, description='"toc" or "files"')
    start_page: Optional[str] = None

    def __init__(self, root_dir: str, **data):
        super().__init__(root_dir=root_dir, **data)
        if not os.path.isdir(self.root_dir):
            raise InvalidSourceError(f"Not a directory: {self.root_dir}")
        self.root_dir = os.path.abspath(self.root_dir)
        self.load()

    def load(self):
        """(Re)build the outline and find the start page."""
        if self.toc_path is None:
            self.toc_path = find_toc_file(self.root_dir)

        self.toc = None
        if self.toc_path:
            self.toc = TocFile(filepath=self.toc_path)

        if self.toc is not None and not self.toc.is_empty:
            self.outline = self.toc.outline
            self.outline_kind = OUTLINE_TOC
        else:
            if self.toc_path:
                logger.info("Table of contents %s is empty, using file tree", self.toc_path)
            self.outline = build_file_tree(self.root_dir)
            self.outline_kind = OUTLINE_FILES

        self.start_page = find_start_page(self.root_dir)
        if self.start_page is None and self.outline_kind == OUTLINE_TOC:
            self.start_page = first_target(self.outline)
        logger.info("Loaded %s with %d %s entries", self.root_dir, count_nodes(self.outline), self.outline_kind)

    def rebuild_outline(self) -> List[OutlineNode]:
        """Discard the outline and build a fresh one from disk."""
        self.load()
        return self.outline
