"""
G-code emitter.

Renders motion commands to the toolpath text dialect: one instruction per
line, ';' comments, coordinates with exactly three decimals.
"""

from typing import Iterable

import numpy as np

from .commands import (
    MotionCommand, RapidMove, CutMove, ArcMove,
    LaserEnable, LaserDisable, Setup, EndProgram, Comment
)


def format_coordinate(value: float) -> str:
    """Format a coordinate with three decimals; never renders -0.000."""
    text = f"{float(value):.3f}"
    if text == "-0.000":
        return "0.000"
    return text


def format_number(value: float) -> str:
    """
    Format a rate or power value.

    Shortest round-tripping decimal, never in exponent notation; integral
    values drop the decimal point.
    """
    # Adding 0.0 folds -0.0 into 0.0
    return np.format_float_positional(float(value) + 0.0, trim='-')


class GCodeEmitter:
    """Render commands to G-code text."""

    def render(self, commands: Iterable[MotionCommand]) -> str:
        """Render a command sequence; every line ends with a newline."""
        return ''.join(self.render_command(cmd) for cmd in commands)

    def render_command(self, cmd: MotionCommand) -> str:
        """Render one command, including its trailing newline."""
        if isinstance(cmd, RapidMove):
            return (f"G0 X{format_coordinate(cmd.point.x)} "
                    f"Y{format_coordinate(cmd.point.y)}"
                    f"{self._feed(cmd.feed_rate)} S0\n")

        if isinstance(cmd, CutMove):
            return (f"G1 X{format_coordinate(cmd.point.x)} "
                    f"Y{format_coordinate(cmd.point.y)}"
                    f"{self._feed(cmd.feed_rate)}{self._power(cmd.power)}\n")

        if isinstance(cmd, ArcMove):
            word = "G2" if cmd.clockwise else "G3"
            line = (f"{word} X{format_coordinate(cmd.end.x)} "
                    f"Y{format_coordinate(cmd.end.y)} "
                    f"I{format_coordinate(cmd.center_offset.x)} "
                    f"J{format_coordinate(cmd.center_offset.y)}"
                    f"{self._feed(cmd.feed_rate)}{self._power(cmd.power)}")
            # End point == start point: the controller must run a full turn
            if cmd.full_circle:
                line += " ; Full circle"
            return line + "\n"

        if isinstance(cmd, LaserEnable):
            if cmd.inline:
                return "M3 I ; Enable laser inline mode\n"
            return "M3 ; Enable laser\n"

        if isinstance(cmd, LaserDisable):
            if cmd.inline:
                return "M5 I ; Disable laser inline mode\n"
            return "M5 ; Disable laser\n"

        if isinstance(cmd, Setup):
            return (
                "G21 ; Set units to millimeters\n"
                "G90 ; Absolute positioning\n"
                f"G0 F{format_number(cmd.rapid_feed_rate)} S0 ; "
                "Set rapid feed rate and ensure laser is off\n"
                f"G1 F{format_number(cmd.feed_rate)} ; Set cutting feed rate\n"
            )

        if isinstance(cmd, EndProgram):
            return "M30 ; Program end\n"

        if isinstance(cmd, Comment):
            if not cmd.text:
                return ";\n"
            return f"; {cmd.text}\n"

        raise TypeError(f"Cannot render command: {cmd!r}")

    @staticmethod
    def _feed(feed_rate) -> str:
        # A zero or missing feed rate keeps the modal value
        return f" F{format_number(feed_rate)}" if feed_rate else ""

    @staticmethod
    def _power(power) -> str:
        return f" S{format_number(power)}" if power is not None else ""
