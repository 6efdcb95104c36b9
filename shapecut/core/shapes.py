"""
ShapeCut Core Shapes Module

Defines the fundamental geometry types (Point, BoundingBox), the vector
network used by freeform paths, and one class per shape kind.

Shapes form a tree: containers own their children exclusively and every
shape knows its parent, so a shape's global position can be resolved by
walking towards the page.
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import math

import numpy as np


# Number of straight segments used to approximate one cubic Bezier curve
BEZIER_SEGMENTS = 16


@dataclass(frozen=True)
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.sqrt((self.x - other.x)**2 + (self.y - other.y)**2)

    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0


@dataclass
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_rect(cls, x: float, y: float,
                  width: float, height: float) -> 'BoundingBox':
        return cls(min_x=x, min_y=y, max_x=x + width, max_y=y + height)

    @property
    def top_left(self) -> Point:
        return Point(self.min_x, self.min_y)


class ShapeKind(Enum):
    """Shape kind tag, named after the host's node types."""
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    POLYGON = "POLYGON"
    STAR = "STAR"
    LINE = "LINE"
    VECTOR = "VECTOR"
    BOOLEAN_OPERATION = "BOOLEAN_OPERATION"
    INSTANCE = "INSTANCE"
    SLICE = "SLICE"
    TEXT = "TEXT"
    FRAME = "FRAME"
    GROUP = "GROUP"
    SECTION = "SECTION"
    UNSUPPORTED = "UNSUPPORTED"


CONTAINER_KINDS = (ShapeKind.FRAME, ShapeKind.GROUP, ShapeKind.SECTION)


class Shape(ABC):
    """
    Abstract base class for all shapes.

    Every shape has a local position (relative to its parent container),
    a size, and a display name. Shapes exported by the host may also carry
    an absolute position hint and a cached absolute bounding box; when
    present these win over the parent chain.
    """

    kind: ShapeKind = ShapeKind.UNSUPPORTED

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 width: float = 0.0, height: float = 0.0, name: str = ""):
        self.name: str = name
        self.position: Point = Point(x, y)
        self.width: float = width
        self.height: float = height

        # Containers without an explicit position contribute nothing
        # when composing global coordinates
        self.has_position: bool = True

        self.absolute_position: Optional[Point] = None
        self.absolute_bounding_box: Optional[BoundingBox] = None

        # Set by the owning container or page
        self.parent = None

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def type_name(self) -> str:
        """Host-style type name used in comments."""
        return self.kind.value

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed"

    def get_bounding_box(self) -> BoundingBox:
        """Return the local axis-aligned bounding box."""
        return BoundingBox.from_rect(self.position.x, self.position.y,
                                     self.width, self.height)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(name={self.name!r}, "
                f"x={self.x}, y={self.y}, "
                f"width={self.width}, height={self.height})")


class Rectangle(Shape):
    """A rectangle shape."""
    kind = ShapeKind.RECTANGLE


class Ellipse(Shape):
    """An ellipse inscribed in its bounding box."""
    kind = ShapeKind.ELLIPSE

    @property
    def radius_x(self) -> float:
        return self.width / 2

    @property
    def radius_y(self) -> float:
        return self.height / 2

    @property
    def is_circle(self) -> bool:
        return self.radius_x == self.radius_y


class Polygon(Shape):
    """A regular polygon inscribed in its bounding box."""
    kind = ShapeKind.POLYGON

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 width: float = 0.0, height: float = 0.0, name: str = "",
                 point_count: int = 3):
        super().__init__(x, y, width, height, name)
        self.point_count = point_count


class Star(Shape):
    """
    A star with point_count outer vertices.

    inner_radius is the ratio of the inner radius to the outer radius,
    in (0, 1]. None means the default ratio of 0.5.
    """
    kind = ShapeKind.STAR

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 width: float = 0.0, height: float = 0.0, name: str = "",
                 point_count: int = 5, inner_radius: Optional[float] = None):
        super().__init__(x, y, width, height, name)
        if inner_radius is not None and not 0 < inner_radius <= 1:
            raise ValueError(
                f"inner_radius must be in (0, 1], got {inner_radius!r}"
            )
        self.point_count = point_count
        self.inner_radius = inner_radius


class Line(Shape):
    """A straight line; width and height encode the directed length."""
    kind = ShapeKind.LINE

    @property
    def start_point(self) -> Point:
        return self.position

    @property
    def end_point(self) -> Point:
        return Point(self.position.x + self.width,
                     self.position.y + self.height)


@dataclass
class VectorSegment:
    """
    A directed edge of a vector network.

    start/end index into VectorNetwork.vertices. Tangents are offsets
    relative to their vertex; a nonzero tangent on either end makes the
    segment a cubic curve.
    """
    start: int
    end: int
    tangent_start: Optional[Point] = None
    tangent_end: Optional[Point] = None

    @property
    def is_curved(self) -> bool:
        return any(t is not None and not t.is_zero()
                   for t in (self.tangent_start, self.tangent_end))


@dataclass
class VectorNetwork:
    """A graph of vertices and directed segments describing an outline."""
    vertices: List[Point] = field(default_factory=list)
    segments: List[VectorSegment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.segments


class VectorPath(Shape):
    """
    A freeform path.

    The outline comes from the vector network when it has segments, or
    else from raw path-description strings (SVG-style "d" data).
    """
    kind = ShapeKind.VECTOR

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 width: float = 0.0, height: float = 0.0, name: str = "",
                 vector_network: Optional[VectorNetwork] = None,
                 path_data: Optional[List[str]] = None):
        super().__init__(x, y, width, height, name)
        self.vector_network = vector_network
        self.path_data: List[str] = list(path_data or [])

    @property
    def has_network(self) -> bool:
        return self.vector_network is not None and not self.vector_network.is_empty


class BooleanOperation(Shape):
    """Boolean-combined shapes; only the bounding box is cut."""
    kind = ShapeKind.BOOLEAN_OPERATION


class ComponentInstance(Shape):
    """An instance of a component; only the bounding box is cut."""
    kind = ShapeKind.INSTANCE


class Slice(Shape):
    """An export slice; only the bounding box is cut."""
    kind = ShapeKind.SLICE


class Text(Shape):
    """
    A text shape.

    Font outlines are not extracted; the text is cut as its bounding box.
    """
    kind = ShapeKind.TEXT

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 width: float = 0.0, height: float = 0.0, name: str = "",
                 text: str = ""):
        super().__init__(x, y, width, height, name)
        self.text = text


class UnsupportedShape(Shape):
    """A node of a type ShapeCut does not know how to cut."""
    kind = ShapeKind.UNSUPPORTED

    def __init__(self, type_name: str, x: float = 0.0, y: float = 0.0,
                 width: float = 0.0, height: float = 0.0, name: str = ""):
        super().__init__(x, y, width, height, name)
        self._type_name = type_name

    @property
    def type_name(self) -> str:
        return self._type_name


def attach_child(owner, children: List[Shape], child: Shape) -> None:
    """
    Append child to an owner's children, enforcing exclusive ownership.

    Shared by Container and Page.
    """
    if child.parent is not None:
        raise ValueError(
            f"{child.display_name!r} already belongs to {child.parent!r}"
        )
    # Walking up from the owner must never reach the child
    node = owner
    while node is not None:
        if node is child:
            raise ValueError(f"Adding {child.display_name!r} would create a cycle")
        node = getattr(node, 'parent', None)
    child.parent = owner
    children.append(child)


class Container(Shape):
    """
    A frame, group or section holding an ordered list of child shapes.

    Pass x=None/y=None for containers without an explicit position
    (groups in most hosts); they add nothing to their children's
    global coordinates.
    """

    def __init__(self, kind: ShapeKind = ShapeKind.GROUP,
                 x: Optional[float] = None, y: Optional[float] = None,
                 width: float = 0.0, height: float = 0.0, name: str = "",
                 children: Optional[List[Shape]] = None):
        if kind not in CONTAINER_KINDS:
            raise ValueError(f"Not a container kind: {kind}")
        super().__init__(x or 0.0, y or 0.0, width, height, name)
        self.kind = kind
        self.has_position = x is not None and y is not None
        self.children: List[Shape] = []
        for child in children or []:
            self.add_child(child)

    def add_child(self, child: Shape) -> 'Container':
        """Add a child shape; returns self for chaining."""
        attach_child(self, self.children, child)
        return self


def flatten_cubic_bezier(p0: Point, p1: Point, p2: Point, p3: Point,
                         segments: int = BEZIER_SEGMENTS) -> List[Point]:
    """
    Sample a cubic bezier curve at uniform parameter steps.

    Returns the points for t in (0, 1], so the caller is expected to be
    positioned at p0 already. When both control points coincide with their
    end points the curve is a straight line and only p3 is returned.
    """
    if p1 == p0 and p2 == p3:
        return [p3]

    t = np.linspace(0.0, 1.0, segments + 1)[1:]
    mt = 1.0 - t
    # Bernstein weights, one row per sample
    weights = np.stack([mt**3, 3 * mt**2 * t, 3 * mt * t**2, t**3], axis=1)
    control = np.array([[p.x, p.y] for p in (p0, p1, p2, p3)], dtype=float)
    samples = weights @ control
    return [Point(float(x), float(y)) for x, y in samples]


def sample_ellipse(center: Point, radius_x: float, radius_y: float,
                   segments: int = 32) -> List[Point]:
    """
    Sample an ellipse parametrically from angle 0 to 2*pi.

    Returns segments + 1 points; the first (rightmost) point is repeated
    at the end to close the outline.
    """
    angles = np.arange(segments + 1) * (2 * math.pi / segments)
    xs = center.x + radius_x * np.cos(angles)
    ys = center.y + radius_y * np.sin(angles)
    return [Point(float(x), float(y)) for x, y in zip(xs, ys)]
