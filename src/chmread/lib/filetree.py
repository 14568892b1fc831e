"""Fallback outline built from the layout of an extracted CHM tree."""

import logging
import os
from typing import Dict, Iterator, List, Tuple

from .outline import OutlineNode

logger = logging.getLogger(__name__)

# Names starting with these are CHM system artifacts (#SYSTEM, $FIftiMain, ...).
RESERVED_PREFIXES = ("#", "$")


def is_reserved(name: str) -> bool:
    return name.startswith(RESERVED_PREFIXES)


def _log_walk_error(error: OSError):
    logger.warning("Skipping unreadable directory %s: %s", error.filename, error)


def walk_tree(root_dir: str) -> Iterator[Tuple[str, List[str], List[str]]]:
    """
    Walk an extracted tree in a stable order, skipping reserved entries.

    Directories and files are sorted by name. A reserved directory is pruned
    together with everything below it. Unreadable directories are logged and
    skipped.
    """
    for dirpath, dirnames, filenames in os.walk(root_dir, onerror=_log_walk_error):
        dirnames[:] = sorted(d for d in dirnames if not is_reserved(d))
        yield dirpath, dirnames, sorted(f for f in filenames if not is_reserved(f))


def iter_files(root_dir: str, suffixes: Tuple[str, ...] = ()) -> Iterator[str]:
    """
    Yield absolute paths of the non-reserved files under root_dir.

    Args:
        root_dir: Extracted CHM root
        suffixes: Lowercase suffixes to keep (all files when empty)
    """
    root_dir = os.path.abspath(root_dir)
    for dirpath, _, filenames in walk_tree(root_dir):
        for filename in filenames:
            if not suffixes or filename.lower().endswith(suffixes):
                yield os.path.join(dirpath, filename)


def build_file_tree(root_dir: str) -> List[OutlineNode]:
    """
    Build an outline mirroring the directory structure.

    Each directory becomes a grouping node and each file a leaf whose target
    is its absolute path. Within a directory, sub-directories come before
    files.

    Args:
        root_dir: Extracted CHM root

    Returns:
        Top-level outline nodes
    """
    root_dir = os.path.abspath(root_dir)
    outline: List[OutlineNode] = []
    dir_nodes: Dict[str, OutlineNode] = {}

    def attach(parent_dir: str, node: OutlineNode):
        parent = dir_nodes.get(parent_dir)
        if parent is None:
            outline.append(node)
        else:
            parent.add_child(node)

    for dirpath, dirnames, filenames in walk_tree(root_dir):
        for dirname in dirnames:
            node = OutlineNode(title=dirname)
            attach(dirpath, node)
            dir_nodes[os.path.join(dirpath, dirname)] = node
        for filename in filenames:
            attach(dirpath, OutlineNode(title=filename, target_path=os.path.join(dirpath, filename)))

    return outline
