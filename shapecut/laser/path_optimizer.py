"""
Path Optimization for Laser Cutting

Minimizes non-cutting travel distance by reordering compiled shapes
and choosing the direction each one is entered from.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..core.shapes import Point

logger = logging.getLogger(__name__)


@dataclass
class ToolpathSegment:
    """
    One drawable shape's compiled G-code and its routing anchors.

    The optimizer only looks at start/end; the G-code itself is never
    re-traced.
    """
    gcode: str
    start: Point
    end: Point
    label: str
    reversed: bool = False

    def reverse(self) -> None:
        """Swap the anchors and mark the segment as entered from its end."""
        self.start, self.end = self.end, self.start
        self.reversed = not self.reversed
        self.gcode = f"; Reversed: entered from the end of {self.label}\n" + self.gcode


def optimize_paths(segments: List[ToolpathSegment],
                   start_point: Point = None) -> List[ToolpathSegment]:
    """
    Optimize segment order to minimize travel distance.

    Uses nearest neighbor heuristic for TSP approximation: from the
    current pen position, go to the closest start or end anchor among the
    remaining segments. Ties go to the earliest segment, and to its start
    anchor over its end anchor. Segments entered from their end anchor are
    reversed in place.

    Args:
        segments: Segments to optimize
        start_point: Starting position (default: origin)

    Returns:
        The same segments, reordered; each appears exactly once
    """
    if not segments:
        return []

    if start_point is None:
        start_point = Point(0, 0)

    # Row 2*i is segment i's start anchor, row 2*i+1 its end anchor
    anchors = np.array(
        [[s.start.x, s.start.y, s.end.x, s.end.y] for s in segments],
        dtype=float
    ).reshape(-1, 2)
    visited = np.zeros(len(anchors), dtype=bool)

    ordered = []
    current_pos = start_point

    while len(ordered) < len(segments):
        distances = np.hypot(anchors[:, 0] - current_pos.x,
                             anchors[:, 1] - current_pos.y)
        distances[visited] = np.inf

        # argmin returns the first minimum, which gives the tie-break order
        best = int(np.argmin(distances))
        best_idx, best_reversed = divmod(best, 2)
        visited[2 * best_idx:2 * best_idx + 2] = True

        segment = segments[best_idx]
        if best_reversed:
            segment.reverse()
        logger.debug(f"Next: {segment.label} at distance {distances[best]:.3f}"
                     f"{' (reversed)' if best_reversed else ''}")

        ordered.append(segment)
        current_pos = segment.end

    return ordered


def calculate_travel_distance(segments: List[ToolpathSegment],
                              start_point: Optional[Point] = None) -> float:
    """
    Calculate total rapid travel distance for an ordered list of segments.

    Args:
        segments: Ordered segments
        start_point: Starting position (default: origin)

    Returns:
        Sum of the distances from each position to the next start anchor
    """
    if start_point is None:
        start_point = Point(0, 0)

    travel_dist = 0.0
    current_pos = start_point

    for segment in segments:
        # Travel to segment start
        travel_dist += current_pos.distance_to(segment.start)
        current_pos = segment.end

    return travel_dist
