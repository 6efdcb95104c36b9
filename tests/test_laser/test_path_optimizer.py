"""
Tests for travel optimization.
"""

import unittest

from shapecut.core.shapes import Point
from shapecut.laser.path_optimizer import (
    ToolpathSegment, optimize_paths, calculate_travel_distance
)


def square_at(x, label=None):
    point = Point(x, 0)
    return ToolpathSegment(gcode=f"; square {x}\n", start=point, end=point,
                           label=label or f"x={x}")


class TestOptimizePaths(unittest.TestCase):
    """Test optimize_paths."""

    def test_nearest_neighbor_order(self):
        segments = [square_at(0), square_at(100), square_at(50)]
        ordered = optimize_paths(segments, Point(0, 0))
        self.assertEqual([s.start.x for s in ordered], [0, 50, 100])

    def test_no_segment_lost_or_duplicated(self):
        segments = [square_at(x) for x in (30, 10, 70, 20, 90, 0)]
        ids = {id(s) for s in segments}
        ordered = optimize_paths(list(segments), Point(45, 45))
        self.assertEqual(len(ordered), len(segments))
        self.assertEqual({id(s) for s in ordered}, ids)

    def test_empty(self):
        self.assertEqual(optimize_paths([]), [])

    def test_default_start_is_origin(self):
        ordered = optimize_paths([square_at(10), square_at(5)])
        self.assertEqual(ordered[0].start.x, 5)

    def test_tie_goes_to_earliest(self):
        ordered = optimize_paths([square_at(10, "a"), square_at(-10, "b")], Point(0, 0))
        self.assertEqual([s.label for s in ordered], ["a", "b"])

    def test_enters_line_from_nearer_end(self):
        line = ToolpathSegment(gcode="G1 X0 Y0\n", start=Point(100, 0),
                               end=Point(10, 0), label="line")
        ordered = optimize_paths([line], Point(0, 0))
        self.assertIs(ordered[0], line)
        self.assertTrue(line.reversed)
        self.assertEqual(line.start, Point(10, 0))
        self.assertEqual(line.end, Point(100, 0))
        self.assertTrue(line.gcode.startswith("; Reversed: entered from the end of line\n"))

    def test_start_anchor_preferred_on_tie(self):
        loop = ToolpathSegment(gcode="", start=Point(3, 4), end=Point(3, 4), label="loop")
        optimize_paths([loop], Point(0, 0))
        self.assertFalse(loop.reversed)

    def test_reduces_travel(self):
        segments = [square_at(x) for x in (90, 10, 80, 20, 70, 30)]
        before = calculate_travel_distance(segments)
        after = calculate_travel_distance(optimize_paths(segments))
        self.assertLess(after, before)
        self.assertEqual(after, 90)


class TestTravelDistance(unittest.TestCase):
    """Test calculate_travel_distance."""

    def test_sums_gaps_between_anchors(self):
        segments = [
            ToolpathSegment("", Point(3, 4), Point(10, 0), "a"),
            ToolpathSegment("", Point(10, 10), Point(0, 0), "b"),
        ]
        self.assertAlmostEqual(calculate_travel_distance(segments), 15.0)

    def test_custom_start(self):
        segments = [square_at(10)]
        self.assertAlmostEqual(calculate_travel_distance(segments, Point(10, 0)), 0.0)


if __name__ == '__main__':
    unittest.main()
