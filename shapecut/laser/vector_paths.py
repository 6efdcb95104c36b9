"""
Freeform path processing.

Turns the two outline encodings a VectorPath can carry into motion
commands:

- a vector network (vertices + directed segments, optionally curved), and
- SVG-style path data strings (M, L, H, V, C, Z and their relative forms).

All coordinates are relative to the shape's global top-left corner.
"""

import logging
import re
from typing import List, TYPE_CHECKING

from ..core.shapes import Point, VectorNetwork, VectorSegment, flatten_cubic_bezier
from .commands import CommandList, rapid_to, cut_to

if TYPE_CHECKING:
    from .gcode_generator import GCodeSettings

logger = logging.getLogger(__name__)

# A command letter followed by everything up to the next letter
_COMMAND_PATTERN = re.compile(r'[MmLlHhVvCcSsQqTtAaZz][^MmLlHhVvCcSsQqTtAaZz]*')
_PARAM_SEPARATOR = re.compile(r'[\s,]+')
_NUMBER_PATTERN = re.compile(r'[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?')


def group_segments_into_paths(segments: List[VectorSegment]) -> List[List[int]]:
    """
    Partition segments into chains of connected segments.

    Each chain is seeded with the first unused segment and extended with
    the lowest-index unused segment that starts where the chain currently
    ends. Chains are not merged afterwards, so a loop whose closing segment
    was taken by an earlier chain stays split.

    Returns:
        List of chains, each a list of segment indices
    """
    paths = []
    used = set()

    for i, seed in enumerate(segments):
        if i in used:
            continue

        path = [i]
        used.add(i)
        current_end = seed.end

        found_connection = True
        while found_connection:
            found_connection = False
            for j, candidate in enumerate(segments):
                if j in used:
                    continue
                if candidate.start == current_end:
                    path.append(j)
                    used.add(j)
                    current_end = candidate.end
                    found_connection = True
                    break

        paths.append(path)

    return paths


def trace_vector_network(network: VectorNetwork, origin: Point,
                         settings: 'GCodeSettings',
                         commands: CommandList) -> CommandList:
    """
    Append the commands tracing every chain of a vector network.

    Raises:
        IndexError: if a segment references a vertex that does not exist
    """
    vertices = network.vertices
    segments = network.segments
    paths = group_segments_into_paths(segments)
    logger.debug(f"Vector network: {len(segments)} segments in {len(paths)} chains")

    for path in paths:
        is_first_point = True

        for segment_index in path:
            segment = segments[segment_index]
            start = origin + _vertex(vertices, segment.start)
            end = origin + _vertex(vertices, segment.end)

            if is_first_point:
                commands.add(rapid_to(start, settings))
                is_first_point = False

            if segment.is_curved:
                cp1 = start + segment.tangent_start if segment.tangent_start else start
                cp2 = end + segment.tangent_end if segment.tangent_end else end
                for point in flatten_cubic_bezier(start, cp1, cp2, end):
                    commands.add(cut_to(point, settings))
            else:
                commands.add(cut_to(end, settings))

    return commands


def _vertex(vertices: List[Point], index: int) -> Point:
    # Negative indices would silently wrap around
    if not 0 <= index < len(vertices):
        raise IndexError(
            f"Segment references vertex {index}, network has {len(vertices)}"
        )
    return vertices[index]


def _parse_params(text: str) -> List[float]:
    """Split on whitespace/commas and keep only numeric tokens."""
    return [float(token) for token in _PARAM_SEPARATOR.split(text.strip())
            if _NUMBER_PATTERN.fullmatch(token)]


def parse_path_data(path_data: str, origin: Point,
                    settings: 'GCodeSettings',
                    commands: CommandList) -> CommandList:
    """
    Append the commands for one SVG-style path data string.

    Supports M/m, L/l, H/h, V/v, C/c and Z/z. Smooth curves, quadratic
    curves and arcs are skipped.
    """
    current_x, current_y = 0.0, 0.0
    start_x, start_y = 0.0, 0.0

    for chunk in _COMMAND_PATTERN.findall(path_data):
        command = chunk[0]
        is_relative = command.islower()
        params = _parse_params(chunk[1:])
        cmd_upper = command.upper()

        if cmd_upper == 'M':
            if len(params) >= 2:
                if is_relative:
                    current_x += params[0]
                    current_y += params[1]
                else:
                    current_x, current_y = params[0], params[1]
                start_x, start_y = current_x, current_y
                commands.add(rapid_to(origin + Point(current_x, current_y), settings))

        elif cmd_upper == 'L':
            for i in range(0, len(params) - 1, 2):
                if is_relative:
                    current_x += params[i]
                    current_y += params[i + 1]
                else:
                    current_x, current_y = params[i], params[i + 1]
                commands.add(cut_to(origin + Point(current_x, current_y), settings))

        elif cmd_upper == 'H':
            if params:
                current_x = current_x + params[0] if is_relative else params[0]
                commands.add(cut_to(origin + Point(current_x, current_y), settings))

        elif cmd_upper == 'V':
            if params:
                current_y = current_y + params[0] if is_relative else params[0]
                commands.add(cut_to(origin + Point(current_x, current_y), settings))

        elif cmd_upper == 'C':
            for i in range(0, len(params) - 5, 6):
                base_x, base_y = (current_x, current_y) if is_relative else (0.0, 0.0)
                cp1 = Point(base_x + params[i], base_y + params[i + 1])
                cp2 = Point(base_x + params[i + 2], base_y + params[i + 3])
                end = Point(base_x + params[i + 4], base_y + params[i + 5])

                points = flatten_cubic_bezier(
                    origin + Point(current_x, current_y),
                    origin + cp1, origin + cp2, origin + end
                )
                for point in points:
                    commands.add(cut_to(point, settings))
                current_x, current_y = end.x, end.y

        elif cmd_upper == 'Z':
            commands.add(cut_to(origin + Point(start_x, start_y), settings))
            current_x, current_y = start_x, start_y

        else:
            logger.debug(f"Skipping unsupported path command '{command}'")

    return commands
