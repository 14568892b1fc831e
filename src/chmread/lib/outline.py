"""Navigation outline shared by the TOC, the file tree and search results."""

from pydantic import BaseModel, Field
from typing import Iterator, List, Optional


class OutlineNode(BaseModel):
    """
    One entry of the navigation tree.

    A node with a target_path is something the display can navigate to; a
    node without one is a pure grouping container.
    """

    title: str
    target_path: str = Field(default="", description="Absolute path to open, empty for containers")
    children: List["OutlineNode"] = []

    @property
    def has_target(self) -> bool:
        return bool(self.target_path)

    def add_child(self, node: "OutlineNode") -> "OutlineNode":
        self.children.append(node)
        return node

    def walk(self) -> Iterator["OutlineNode"]:
        """Yield this node and all descendants, depth-first in document order."""
        yield self
        for child in self.children:
            yield from child.walk()


def walk_outline(outline: List[OutlineNode]) -> Iterator[OutlineNode]:
    """Yield every node of a top-level outline, depth-first in document order."""
    for node in outline:
        yield from node.walk()


def count_nodes(outline: List[OutlineNode]) -> int:
    return sum(1 for _ in walk_outline(outline))


def first_target(outline: List[OutlineNode]) -> Optional[str]:
    """Return the first navigable path in the outline, if any."""
    for node in walk_outline(outline):
        if node.has_target:
            return node.target_path
    return None
