"""
Tests for command rendering.
"""

import unittest

from shapecut.core.shapes import Point
from shapecut.laser.commands import (
    RapidMove, CutMove, ArcMove, LaserEnable, LaserDisable,
    Setup, EndProgram, Comment, CommandList
)
from shapecut.laser.emitter import GCodeEmitter, format_coordinate, format_number


class TestFormatting(unittest.TestCase):
    """Test number formatting helpers."""

    def test_coordinates_have_three_decimals(self):
        self.assertEqual(format_coordinate(0), "0.000")
        self.assertEqual(format_coordinate(1.23456), "1.235")
        self.assertEqual(format_coordinate(-2.5), "-2.500")

    def test_no_negative_zero(self):
        self.assertEqual(format_coordinate(-0.0), "0.000")
        self.assertEqual(format_coordinate(-0.0001), "0.000")

    def test_rates(self):
        self.assertEqual(format_number(1000.0), "1000")
        self.assertEqual(format_number(255), "255")
        self.assertEqual(format_number(12.5), "12.5")

    def test_rates_never_use_exponents(self):
        self.assertEqual(format_number(1e-7), "0.0000001")
        self.assertEqual(format_number(2.5e16), "25000000000000000")
        self.assertEqual(format_number(-0.0), "0")


class TestEmitter(unittest.TestCase):
    """Test GCodeEmitter.render_command."""

    def setUp(self):
        self.emitter = GCodeEmitter()

    def test_rapid_always_has_s0(self):
        self.assertEqual(self.emitter.render_command(RapidMove(Point(1, 2), 3000)),
                         "G0 X1.000 Y2.000 F3000 S0\n")
        self.assertEqual(self.emitter.render_command(RapidMove(Point(1, 2))),
                         "G0 X1.000 Y2.000 S0\n")

    def test_cut_optional_words(self):
        self.assertEqual(self.emitter.render_command(CutMove(Point(10, 0), 500, 1000)),
                         "G1 X10.000 Y0.000 F1000 S500\n")
        self.assertEqual(self.emitter.render_command(CutMove(Point(10, 0))),
                         "G1 X10.000 Y0.000\n")

    def test_arc_direction_and_full_circle(self):
        ccw = ArcMove(Point(20, 10), Point(-10, 0), power=255, feed_rate=1000,
                      full_circle=True)
        self.assertEqual(self.emitter.render_command(ccw),
                         "G3 X20.000 Y10.000 I-10.000 J0.000 F1000 S255 ; Full circle\n")
        cw = ArcMove(Point(0, 10), Point(0, 5), clockwise=True)
        self.assertEqual(self.emitter.render_command(cw),
                         "G2 X0.000 Y10.000 I0.000 J5.000\n")

    def test_laser_control(self):
        self.assertEqual(self.emitter.render_command(LaserEnable()),
                         "M3 I ; Enable laser inline mode\n")
        self.assertEqual(self.emitter.render_command(LaserDisable(inline=False)),
                         "M5 ; Disable laser\n")
        self.assertEqual(self.emitter.render_command(EndProgram()),
                         "M30 ; Program end\n")

    def test_setup_block(self):
        text = self.emitter.render_command(Setup(1000, 3000, 255))
        self.assertEqual(text.splitlines(), [
            "G21 ; Set units to millimeters",
            "G90 ; Absolute positioning",
            "G0 F3000 S0 ; Set rapid feed rate and ensure laser is off",
            "G1 F1000 ; Set cutting feed rate",
        ])

    def test_comments(self):
        self.assertEqual(self.emitter.render_command(Comment("hello")), "; hello\n")
        self.assertEqual(self.emitter.render_command(Comment()), ";\n")

    def test_render_list(self):
        commands = CommandList().comment("a").add(RapidMove(Point(0, 0)))
        self.assertEqual(self.emitter.render(commands), "; a\nG0 X0.000 Y0.000 S0\n")

    def test_unknown_command(self):
        with self.assertRaises(TypeError):
            self.emitter.render_command("G1 X0")


class TestCommandList(unittest.TestCase):
    """Test the command accumulator."""

    def test_geometry_detection(self):
        commands = CommandList().comment("only a comment")
        self.assertFalse(commands.has_geometry())
        commands.add(CutMove(Point(1, 1)))
        self.assertTrue(commands.has_geometry())
        self.assertEqual(len(commands), 2)
        self.assertIsInstance(commands[1], CutMove)

    def test_commands_property_is_a_copy(self):
        commands = CommandList()
        commands.commands.append(Comment("x"))
        self.assertEqual(len(commands), 0)


if __name__ == '__main__':
    unittest.main()
