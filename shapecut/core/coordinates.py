"""
Coordinate resolution for ShapeCut.

Only translation is modelled: a shape's global position is its own local
position plus the positions of the containers above it.
"""

from .shapes import Point, Shape


def get_global_position(shape: Shape) -> Point:
    """
    Return the top-left corner of a shape in page coordinates.

    A cached absolute bounding box is authoritative, followed by an
    absolute position hint. Otherwise the local position is composed with
    every positioned ancestor up to the page (or the top of a detached
    tree).
    """
    if shape.absolute_bounding_box is not None:
        return shape.absolute_bounding_box.top_left

    if shape.absolute_position is not None:
        return shape.absolute_position

    global_x = shape.position.x
    global_y = shape.position.y
    parent = shape.parent

    # Pages have no position attribute; anything else is a container
    while parent is not None and isinstance(parent, Shape):
        if parent.has_position:
            global_x += parent.position.x
            global_y += parent.position.y
        parent = parent.parent

    return Point(global_x, global_y)
