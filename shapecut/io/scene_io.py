"""
Scene File I/O for ShapeCut

Loads shape trees from JSON node dumps (the layout the host application
exports its selection in) and writes generated G-code to disk.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

from ..core.page import Page
from ..core.shapes import (
    Shape, Point, BoundingBox, ShapeKind,
    Rectangle, Ellipse, Polygon, Star, Line,
    VectorPath, VectorNetwork, VectorSegment,
    BooleanOperation, ComponentInstance, Slice, Text,
    Container, UnsupportedShape, CONTAINER_KINDS
)

logger = logging.getLogger(__name__)

# Node types that map onto a plain Shape subclass
_SIMPLE_TYPES = {
    'RECTANGLE': Rectangle,
    'ELLIPSE': Ellipse,
    'LINE': Line,
    'BOOLEAN_OPERATION': BooleanOperation,
    'INSTANCE': ComponentInstance,
    'SLICE': Slice,
}

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')


class SceneFormatError(ValueError):
    """Raised when a scene document cannot be turned into shapes."""
    pass


def load_scene(filepath: str) -> Page:
    """
    Load a scene from a JSON file.

    Args:
        filepath: Path to the scene file

    Returns:
        Page whose children are the selected shapes

    Raises:
        SceneFormatError: if the file is not valid JSON or not a scene
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SceneFormatError(f"{filepath}: invalid JSON: {e}") from e

    return dict_to_page(data)


def dict_to_page(data: Any) -> Page:
    """
    Convert a scene document to a Page.

    Accepts either {"name": ..., "selection": [node, ...]} or a bare list
    of nodes.
    """
    if isinstance(data, list):
        name, nodes = "Page 1", data
    elif isinstance(data, dict):
        name = data.get('name') or "Page 1"
        nodes = data.get('selection', data.get('children', []))
    else:
        raise SceneFormatError(f"Expected an object or a list, got {type(data).__name__}")

    if not isinstance(nodes, list):
        raise SceneFormatError("'selection' must be a list of nodes")

    page = Page(name=str(name))
    for node in nodes:
        page.add_child(dict_to_shape(node))
    return page


def dict_to_shape(node: Dict[str, Any]) -> Shape:
    """Convert one node dictionary (and its children) to a Shape."""
    if not isinstance(node, dict):
        raise SceneFormatError(f"Expected a node object, got {type(node).__name__}")

    node_type = str(node.get('type', '')).upper()
    name = str(node.get('name', ''))
    width = _number(node, 'width')
    height = _number(node, 'height')

    if node_type in {kind.value for kind in CONTAINER_KINDS}:
        shape = Container(
            kind=ShapeKind(node_type),
            x=_number(node, 'x', None),
            y=_number(node, 'y', None),
            width=width, height=height, name=name
        )
        for child in _list(node, 'children'):
            shape.add_child(dict_to_shape(child))
    else:
        x = _number(node, 'x')
        y = _number(node, 'y')
        if node_type in _SIMPLE_TYPES:
            shape = _SIMPLE_TYPES[node_type](x, y, width, height, name)
        elif node_type == 'POLYGON':
            shape = Polygon(x, y, width, height, name,
                            point_count=int(_number(node, 'pointCount', 3)))
        elif node_type == 'STAR':
            inner = _number(node, 'innerRadius', None)
            shape = Star(x, y, width, height, name,
                         point_count=int(_number(node, 'pointCount', 5)),
                         inner_radius=inner or None)
        elif node_type == 'TEXT':
            shape = Text(x, y, width, height, name,
                         text=str(node.get('characters', '')))
        elif node_type == 'VECTOR':
            shape = VectorPath(x, y, width, height, name,
                               vector_network=_parse_network(_mapping(node, 'vectorNetwork')),
                               path_data=_parse_vector_paths(_list(node, 'vectorPaths')))
        else:
            shape = UnsupportedShape(node_type or 'UNKNOWN', x, y, width, height, name)

    bbox = _mapping(node, 'absoluteBoundingBox')
    if bbox:
        shape.absolute_bounding_box = BoundingBox.from_rect(
            _number(bbox, 'x'), _number(bbox, 'y'),
            _number(bbox, 'width'), _number(bbox, 'height')
        )
    position = node.get('absolutePosition')
    if position:
        shape.absolute_position = _point(position)

    return shape


def _number(data: Dict[str, Any], key: str, default: Optional[float] = 0.0) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise SceneFormatError(f"'{key}' must be a number, got {value!r}") from e


def _mapping(data: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise SceneFormatError(f"'{key}' must be an object, got {value!r}")
    return value


def _list(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise SceneFormatError(f"'{key}' must be a list, got {value!r}")
    return value


def _point(data: Any) -> Point:
    if not isinstance(data, dict):
        raise SceneFormatError(f"Expected a point object, got {data!r}")
    return Point(_number(data, 'x'), _number(data, 'y'))


def _parse_network(data: Optional[Dict[str, Any]]) -> Optional[VectorNetwork]:
    if not data:
        return None

    vertices = [_point(v) for v in _list(data, 'vertices')]
    segments = []
    for seg in _list(data, 'segments'):
        try:
            start, end = int(seg['start']), int(seg['end'])
        except (KeyError, TypeError, ValueError) as e:
            raise SceneFormatError(f"Invalid vector segment: {seg!r}") from e
        tangent_start = seg.get('tangentStart')
        tangent_end = seg.get('tangentEnd')
        segments.append(VectorSegment(
            start=start,
            end=end,
            tangent_start=_point(tangent_start) if tangent_start else None,
            tangent_end=_point(tangent_end) if tangent_end else None
        ))

    return VectorNetwork(vertices=vertices, segments=segments)


def _parse_vector_paths(data: Optional[List[Any]]) -> List[str]:
    paths = []
    for entry in data or []:
        # Either {"windingRule": ..., "data": "M 0 0 ..."} or a bare string
        if isinstance(entry, dict):
            paths.append(str(entry.get('data', '')))
        else:
            paths.append(str(entry))
    return paths


def save_gcode(gcode: str, filepath: str) -> bool:
    """
    Save G-code text to a file.

    Args:
        gcode: The program text
        filepath: Path to save the file

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(filepath, 'w', encoding='utf-8', newline='\n') as f:
            f.write(gcode)
        logger.info(f"Saved G-code to {filepath}")
        return True
    except OSError as e:
        logger.error(f"Error saving G-code to {filepath}: {e}")
        return False


def generate_filename(shapes: List[Shape], now: Optional[datetime] = None) -> str:
    """
    Derive a file name (without extension) for a selection.

    The first shape's name is used as the base, with characters that are
    invalid in file names replaced, a count of the remaining shapes, and
    a timestamp.
    """
    if not shapes:
        return "gcode"

    base_name = _INVALID_FILENAME_CHARS.sub("_", shapes[0].name or "untitled")

    if len(shapes) > 1:
        base_name += f"_and_{len(shapes) - 1}_more"

    if now is None:
        now = datetime.now()
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")

    return f"{base_name}_{timestamp}"


def default_output_path(scene_path: str, shapes: List[Shape]) -> Path:
    """Place generated G-code next to the scene file."""
    return Path(scene_path).with_name(generate_filename(shapes) + ".gcode")
