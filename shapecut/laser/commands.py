"""
Motion commands: the vocabulary between shapes and G-code text.

Every command is an immutable dataclass. Shape compilation appends
commands to a CommandList; turning them into text is the emitter's job,
so a command sequence can be inspected and tested without string
formatting getting in the way.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Iterator, List, Optional

from ..core.shapes import Point


@dataclass(frozen=True)
class MotionCommand(ABC):
    """Base class for all commands."""
    pass


@dataclass(frozen=True)
class RapidMove(MotionCommand):
    """Reposition with the laser off. Always rendered with S0."""
    point: Point
    feed_rate: Optional[float] = None


@dataclass(frozen=True)
class CutMove(MotionCommand):
    """Straight cutting move."""
    point: Point
    power: Optional[float] = None
    feed_rate: Optional[float] = None


@dataclass(frozen=True)
class ArcMove(MotionCommand):
    """
    Circular cutting move.

    center_offset is relative to the current position (I/J words).
    full_circle marks an arc whose end point equals its start point and
    which must be read as one whole revolution, not as a no-op.
    """
    end: Point
    center_offset: Point
    clockwise: bool = False
    power: Optional[float] = None
    feed_rate: Optional[float] = None
    full_circle: bool = False


@dataclass(frozen=True)
class LaserEnable(MotionCommand):
    inline: bool = True


@dataclass(frozen=True)
class LaserDisable(MotionCommand):
    inline: bool = True


@dataclass(frozen=True)
class Setup(MotionCommand):
    """Units, positioning mode and the two feed rates."""
    feed_rate: float
    rapid_feed_rate: float
    power: float


@dataclass(frozen=True)
class EndProgram(MotionCommand):
    pass


@dataclass(frozen=True)
class Comment(MotionCommand):
    text: str = ""


# Commands that move the head
GEOMETRY_COMMANDS = (RapidMove, CutMove, ArcMove)


def rapid_to(point: Point, settings) -> RapidMove:
    """Rapid move at the settings' rapid feed rate."""
    return RapidMove(point, settings.rapid_feed_rate)


def cut_to(point: Point, settings) -> CutMove:
    """Cutting move at the settings' feed rate and laser power."""
    return CutMove(point, settings.laser_power, settings.feed_rate)


class CommandList:
    """
    Append-only, ordered sequence of commands.

    add() and comment() return self so calls can be chained.
    """

    def __init__(self, commands: Optional[List[MotionCommand]] = None):
        self._commands: List[MotionCommand] = list(commands or [])

    def add(self, command: MotionCommand) -> 'CommandList':
        self._commands.append(command)
        return self

    def comment(self, text: str) -> 'CommandList':
        return self.add(Comment(text))

    def extend(self, commands) -> 'CommandList':
        for command in commands:
            self.add(command)
        return self

    def has_geometry(self) -> bool:
        """True if any command actually moves the head."""
        return any(isinstance(cmd, GEOMETRY_COMMANDS) for cmd in self._commands)

    @property
    def commands(self) -> List[MotionCommand]:
        """A copy of the commands, in order."""
        return list(self._commands)

    def __iter__(self) -> Iterator[MotionCommand]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __getitem__(self, index):
        return self._commands[index]
