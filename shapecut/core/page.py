"""
ShapeCut Page Model

The Page is the root of the shape tree. It has no position of its own,
so coordinate resolution stops when it is reached.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .shapes import Shape, Container, attach_child


@dataclass
class Page:
    """
    The root of a shape tree.

    A Page owns its top-level shapes the same way a Container owns its
    children; the selection handed to the generator is usually a subset
    of the shapes somewhere below a page.
    """
    name: str = "Page 1"
    children: List[Shape] = field(default_factory=list)

    def __post_init__(self):
        initial, self.children = self.children, []
        for child in initial:
            self.add_child(child)

    def add_child(self, shape: Shape) -> 'Page':
        """Add a top-level shape to the page."""
        attach_child(self, self.children, shape)
        return self

    def get_all_shapes(self) -> List[Shape]:
        """Flatten the whole tree, depth first, in declared order."""
        shapes = []
        stack = list(reversed(self.children))
        while stack:
            shape = stack.pop()
            shapes.append(shape)
            if isinstance(shape, Container):
                stack.extend(reversed(shape.children))
        return shapes


def find_page(shape: Shape) -> Optional[Page]:
    """Return the page a shape lives on, or None for a detached tree."""
    node = shape.parent
    while node is not None and not isinstance(node, Page):
        node = node.parent
    return node
