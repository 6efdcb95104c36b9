"""
ShapeCut Core Module

Contains the core data structures:
- Shapes: Rectangle, Ellipse, Polygon, Star, Line, VectorPath, Container, ...
- Page: Root of a shape tree
- Coordinates: Global position resolution
"""

# Import order matters - shapes first, then page
from .shapes import (
    Point, BoundingBox, ShapeKind, Shape,
    Rectangle, Ellipse, Polygon, Star, Line,
    VectorPath, VectorNetwork, VectorSegment,
    BooleanOperation, ComponentInstance, Slice, Text,
    Container, UnsupportedShape,
    flatten_cubic_bezier, sample_ellipse
)
from .page import Page, find_page
from .coordinates import get_global_position

__all__ = [
    'Point', 'BoundingBox', 'ShapeKind', 'Shape',
    'Rectangle', 'Ellipse', 'Polygon', 'Star', 'Line',
    'VectorPath', 'VectorNetwork', 'VectorSegment',
    'BooleanOperation', 'ComponentInstance', 'Slice', 'Text',
    'Container', 'UnsupportedShape',
    'flatten_cubic_bezier', 'sample_ellipse',
    'Page', 'find_page',
    'get_global_position',
]
