"""
Shape-to-path compilation.

ShapeCompiler turns one shape into an ordered CommandList, with one
routine per shape kind. ShapeCompiler.compile is the single entry point and
walks container children with an explicit stack, so nesting depth is not
bounded by the interpreter recursion limit; a compiler holds nothing but its
settings, so a fresh one is built for each generation run.

This module also holds the two helpers the travel optimizer depends on:
flatten_nodes() breaks a selection into independently drawable shapes,
and get_anchor_points() gives each of them a start/end point without
tracing its geometry.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, TYPE_CHECKING

from ..core.coordinates import get_global_position
from ..core.shapes import (
    Point, Shape, Rectangle, Ellipse, Polygon, Star, Line, VectorPath,
    BooleanOperation, ComponentInstance, Slice, Text, Container,
    sample_ellipse
)
from .commands import CommandList, ArcMove, rapid_to, cut_to
from .vector_paths import trace_vector_network, parse_path_data

if TYPE_CHECKING:
    from .gcode_generator import GCodeSettings

logger = logging.getLogger(__name__)

ELLIPSE_SEGMENTS = 32
DEFAULT_STAR_POINTS = 5
DEFAULT_STAR_INNER_RATIO = 0.5
MIN_POLYGON_SIDES = 3

LABEL_SEPARATOR = " > "

# Shapes traced only by their bounding box
OUTLINE_ONLY_TYPES = (Text, Slice, ComponentInstance, BooleanOperation)


def _shape_comment(title: str, name: str = "") -> str:
    return f'{title} - "{name}"' if name else title


class ShapeCompiler:
    """
    Compile shapes to motion commands.

    Example:
        >>> compiler = ShapeCompiler(GCodeSettings())
        >>> commands = compiler.compile(Rectangle(0, 0, 10, 5))
    """

    def __init__(self, settings: 'GCodeSettings'):
        self.settings = settings

    def compile(self, shape: Shape,
                commands: Optional[CommandList] = None) -> CommandList:
        """
        Append the commands for a shape (and its children) to commands.

        Args:
            shape: The shape to compile
            commands: Accumulator to append to; a new one is created if None

        Returns:
            The accumulator
        """
        if commands is None:
            commands = CommandList()

        # Items are shapes still to compile or the END markers of open containers
        stack = [shape]
        while stack:
            item = stack.pop()
            if isinstance(item, _ContainerEnd):
                commands.comment(_shape_comment(f"{item.container.type_name} END",
                                                item.container.name))
                continue

            origin = get_global_position(item)
            logger.debug(f"Compiling {item.type_name} '{item.display_name}' "
                         f"at ({origin.x:.3f}, {origin.y:.3f})")

            if isinstance(item, Container):
                self._open_container(item, origin, commands, stack)
            else:
                self._compile_leaf(item, origin, commands)

        return commands

    def _compile_leaf(self, shape: Shape, origin: Point,
                      commands: CommandList) -> None:
        if isinstance(shape, Rectangle):
            commands.comment(_shape_comment("RECTANGLE", shape.name))
            self._bounding_box(origin, shape.width, shape.height, commands)
        elif isinstance(shape, Ellipse):
            self._compile_ellipse(shape, origin, commands)
        elif isinstance(shape, Polygon):
            self._compile_polygon(shape, origin, commands)
        elif isinstance(shape, Star):
            self._compile_star(shape, origin, commands)
        elif isinstance(shape, Line):
            self._compile_line(shape, origin, commands)
        elif isinstance(shape, VectorPath):
            self._compile_vector(shape, origin, commands)
        elif isinstance(shape, OUTLINE_ONLY_TYPES):
            commands.comment(_shape_comment(f"{shape.type_name} (bounding box)", shape.name))
            self._bounding_box(origin, shape.width, shape.height, commands)
        else:
            commands.comment(_shape_comment(f"Unsupported shape type: {shape.type_name}",
                                            shape.name))

    def _bounding_box(self, origin: Point, width: float, height: float,
                      commands: CommandList) -> None:
        """Trace the box clockwise from its top-left corner back to it."""
        commands.add(rapid_to(origin, self.settings))
        corners = [
            Point(origin.x + width, origin.y),
            Point(origin.x + width, origin.y + height),
            Point(origin.x, origin.y + height),
            origin,
        ]
        for corner in corners:
            commands.add(cut_to(corner, self.settings))

    def _compile_ellipse(self, shape: Ellipse, origin: Point,
                         commands: CommandList) -> None:
        commands.comment(_shape_comment("ELLIPSE", shape.name))
        center = Point(origin.x + shape.radius_x, origin.y + shape.radius_y)

        if shape.is_circle:
            # One full counter-clockwise revolution from the rightmost point
            start = Point(center.x + shape.radius_x, center.y)
            commands.add(rapid_to(start, self.settings))
            commands.add(ArcMove(
                end=start,
                center_offset=Point(-shape.radius_x, 0.0),
                clockwise=False,
                power=self.settings.laser_power,
                feed_rate=self.settings.feed_rate,
                full_circle=True
            ))
            return

        points = sample_ellipse(center, shape.radius_x, shape.radius_y,
                                ELLIPSE_SEGMENTS)
        commands.add(rapid_to(points[0], self.settings))
        for point in points[1:]:
            commands.add(cut_to(point, self.settings))

    def _compile_polygon(self, shape: Polygon, origin: Point,
                         commands: CommandList) -> None:
        commands.comment(_shape_comment("POLYGON", shape.name))
        center, radius = _inscribed_circle(shape, origin)
        sides = max(MIN_POLYGON_SIDES, shape.point_count or MIN_POLYGON_SIDES)
        angle_step = 2 * math.pi / sides

        commands.add(rapid_to(_polar(center, radius, -math.pi / 2), self.settings))
        # The last step lands back on the first vertex
        for i in range(1, sides + 1):
            angle = -math.pi / 2 + i * angle_step
            commands.add(cut_to(_polar(center, radius, angle), self.settings))

    def _compile_star(self, shape: Star, origin: Point,
                      commands: CommandList) -> None:
        commands.comment(_shape_comment("STAR", shape.name))
        center, outer_radius = _inscribed_circle(shape, origin)
        inner_radius = outer_radius * (shape.inner_radius or DEFAULT_STAR_INNER_RATIO)
        points = max(1, shape.point_count or DEFAULT_STAR_POINTS)
        angle_step = math.pi / points

        commands.add(rapid_to(_polar(center, outer_radius, -math.pi / 2), self.settings))
        # Odd steps are inner vertices, even steps outer ones
        for i in range(1, points * 2 + 1):
            radius = outer_radius if i % 2 == 0 else inner_radius
            angle = -math.pi / 2 + i * angle_step
            commands.add(cut_to(_polar(center, radius, angle), self.settings))

    def _compile_line(self, shape: Line, origin: Point,
                      commands: CommandList) -> None:
        commands.comment(_shape_comment("LINE", shape.name))
        commands.add(rapid_to(origin, self.settings))
        end = Point(origin.x + (shape.width or 0), origin.y + (shape.height or 0))
        commands.add(cut_to(end, self.settings))

    def _compile_vector(self, shape: VectorPath, origin: Point,
                        commands: CommandList) -> None:
        commands.comment(_shape_comment("VECTOR", shape.name))

        if shape.has_network:
            commands.comment("Vector Network Processing")
            trace_vector_network(shape.vector_network, origin, self.settings, commands)
        elif shape.path_data:
            commands.comment("Vector Paths Processing")
            for data in shape.path_data:
                if data:
                    parse_path_data(data, origin, self.settings, commands)
        else:
            commands.comment("VECTOR (no path data - using bounding box)")
            self._bounding_box(origin, shape.width, shape.height, commands)

    def _open_container(self, shape: Container, origin: Point,
                        commands: CommandList, stack: list) -> None:
        commands.comment(_shape_comment(f"{shape.type_name} START", shape.name))
        # The END marker is popped after every child
        stack.append(_ContainerEnd(shape))

        if shape.children:
            stack.extend(reversed(shape.children))
        else:
            commands.comment(f"{shape.type_name} (empty - drawing bounding box)")
            self._bounding_box(origin, shape.width, shape.height, commands)


@dataclass
class _ContainerEnd:
    container: Container


def _inscribed_circle(shape: Shape, origin: Point) -> Tuple[Point, float]:
    """Center and radius of the largest circle centered in the bounding box."""
    center = Point(origin.x + shape.width / 2, origin.y + shape.height / 2)
    return center, min(shape.width, shape.height) / 2


def _polar(center: Point, radius: float, angle: float) -> Point:
    return Point(center.x + radius * math.cos(angle),
                 center.y + radius * math.sin(angle))


def get_anchor_points(shape: Shape) -> Tuple[Point, Point]:
    """
    Return the (start, end) points used to route a shape.

    Closed shapes start and end at the same point. This mirrors where the
    compiled trace begins without compiling it.
    """
    origin = get_global_position(shape)

    if isinstance(shape, Ellipse):
        rightmost = Point(origin.x + shape.width, origin.y + shape.radius_y)
        return rightmost, rightmost

    if isinstance(shape, Line):
        return origin, Point(origin.x + shape.width, origin.y + shape.height)

    if isinstance(shape, (Polygon, Star)):
        center, radius = _inscribed_circle(shape, origin)
        top = Point(center.x, center.y - radius)
        return top, top

    if isinstance(shape, VectorPath) and shape.has_network:
        vertices = shape.vector_network.vertices
        if vertices:
            return origin + vertices[0], origin + vertices[-1]

    # Rectangles, outline-only shapes, empty containers and fallbacks
    return origin, origin


@dataclass
class FlatNode:
    """A drawable shape together with its ancestry label."""
    shape: Shape
    label: str


def flatten_nodes(shapes: List[Shape],
                  separator: str = LABEL_SEPARATOR) -> List[FlatNode]:
    """
    Break a selection into independently drawable shapes, depth first.

    Containers with children are replaced by their descendants; childless
    containers and everything else are kept as units. Labels join the
    names along the way, e.g. "Frame 1 > Logo > Circle".
    """
    flat = []
    stack = [(shape, "") for shape in reversed(shapes)]

    while stack:
        shape, prefix = stack.pop()
        label = f"{prefix}{separator}{shape.display_name}" if prefix else shape.display_name
        if isinstance(shape, Container) and shape.children:
            stack.extend((child, label) for child in reversed(shape.children))
        else:
            flat.append(FlatNode(shape, label))

    return flat
