"""
G-Code Generator for ShapeCut

Assembles complete programs from a selection of shapes: validation,
flattening, optional travel optimization, per-shape compilation and the
setup/laser/footer framing around it.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from ..core.page import find_page
from ..core.shapes import Point, Shape
from .commands import (
    CommandList, MotionCommand, Setup, LaserEnable, LaserDisable, EndProgram
)
from .emitter import GCodeEmitter, format_number
from .path_optimizer import ToolpathSegment, optimize_paths, calculate_travel_distance
from .shape_compiler import ShapeCompiler, FlatNode, flatten_nodes, get_anchor_points

logger = logging.getLogger(__name__)

GENERATOR_NAME = "ShapeCut"


class ValidationError(ValueError):
    """Raised before any compilation when the selection or settings are invalid."""
    pass


class ShapeCompileError(Exception):
    """Raised when a single shape cannot be compiled; the shape is skipped."""

    def __init__(self, label: str, shape: Shape, cause: Exception):
        super().__init__(f"Failed to generate G-code for {label} ({shape.type_name}): {cause}")
        self.label = label
        self.shape = shape
        self.cause = cause


class EmptyResultError(RuntimeError):
    """Raised when no shape in the selection produced any geometry."""
    pass


@dataclass
class GCodeSettings:
    """Settings for G-code generation."""

    # Speed settings
    feed_rate: float = 1000.0         # mm/min for G1 moves
    rapid_feed_rate: float = 3000.0   # mm/min for G0 moves

    # Laser settings
    laser_power: float = 255.0        # S value for cutting moves
    inline_laser: bool = True         # M3 I / M5 I instead of M3 / M5

    # Optimization
    optimize_travel: bool = True      # Reorder shapes to reduce travel
    start_position: Point = field(default_factory=lambda: Point(0, 0))

    def validate(self) -> Tuple[bool, str]:
        """
        Check the settings invariants.

        Returns:
            (is_valid, error_message)
        """
        if not self.feed_rate > 0:
            return False, f"Feed rate must be positive, got {self.feed_rate}"
        if not self.rapid_feed_rate > 0:
            return False, f"Rapid feed rate must be positive, got {self.rapid_feed_rate}"
        if not self.laser_power >= 0:
            return False, f"Laser power must be non-negative, got {self.laser_power}"
        return True, ""


@dataclass
class _CompiledUnit:
    node: FlatNode
    commands: CommandList


class GCodeGenerator:
    """Generate G-code programs from shape selections."""

    def __init__(self, settings: GCodeSettings = None):
        self.settings = settings or GCodeSettings()
        self._emitter = GCodeEmitter()
        self._lines: List[str] = []
        self.warnings: List[str] = []
        self.skipped_shapes: int = 0

    def generate(self, shapes: List[Shape]) -> str:
        """
        Generate a program for a selection, one block per drawable shape.

        Containers are flattened into their drawable descendants, which are
        reordered to reduce travel when settings.optimize_travel is set.

        Raises:
            ValidationError: empty selection or invalid settings
            EmptyResultError: nothing in the selection produced geometry
        """
        self._validate(shapes)
        self._reset_state()

        nodes = flatten_nodes(shapes)
        logger.info(f"Generating G-code for {len(shapes)} selected shapes "
                    f"({len(nodes)} drawable)")

        compiler = ShapeCompiler(self.settings)
        segments: List[ToolpathSegment] = []
        empty_units: List[_CompiledUnit] = []
        failures: List[ShapeCompileError] = []

        for node in nodes:
            try:
                commands = self._compile(compiler, node.shape, node.label)
            except ShapeCompileError as e:
                failures.append(e)
                continue

            if not commands.has_geometry():
                empty_units.append(_CompiledUnit(node, commands))
                self.warnings.append(f"No geometry generated for {node.label}")
                continue

            start, end = get_anchor_points(node.shape)
            segments.append(ToolpathSegment(
                gcode=self._emitter.render(commands),
                start=start,
                end=end,
                label=node.label
            ))

        if not segments:
            raise EmptyResultError(
                "No valid geometry was generated from the selected objects. "
                "Please check that you have selected supported shape types."
            )

        header = [f"Drawable shapes: {len(nodes)}"]
        start_position = self.settings.start_position
        if self.settings.optimize_travel:
            before = calculate_travel_distance(segments, start_position)
            segments = optimize_paths(segments, start_position)
            after = calculate_travel_distance(segments, start_position)
            saved = (before - after) / before * 100 if before > 0 else 0.0
            logger.info(f"Travel distance {before:.3f} -> {after:.3f} ({saved:.1f}% saved)")
            header += [
                "Travel optimization: enabled",
                f"Travel distance without optimization: {before:.3f} mm",
                f"Travel distance with optimization: {after:.3f} mm",
                f"Travel saved: {saved:.1f}%",
            ]
        else:
            header.append("Travel optimization: disabled")

        self._add_header(shapes, header)

        for failure in failures:
            self._emit_comment(f"Error processing shape: {failure.label} "
                               f"({failure.shape.type_name})")
        for unit in empty_units:
            self._emit_comment(f"Skipped shape: {unit.node.label} - no geometry generated")
            self._emit_commands(unit.commands)

        total = len(segments)
        for position, segment in enumerate(segments, start=1):
            self._emit_comment("")
            self._emit_comment(f"Begin shape {position}/{total}: {segment.label}")
            self._lines.append(segment.gcode)
            self._emit_comment(f"End shape {position}/{total}: {segment.label}")

        self._add_footer()
        return ''.join(self._lines)

    def generate_classic(self, shapes: List[Shape]) -> str:
        """
        Generate a program compiling each selected shape as a whole.

        Containers are not flattened; their children are traced in declared
        order inside the container's START/END comments. No travel
        optimization is applied.

        Raises:
            ValidationError: empty selection or invalid settings
            EmptyResultError: nothing in the selection produced geometry
        """
        self._validate(shapes)
        self._reset_state()

        compiler = ShapeCompiler(self.settings)
        self._add_header(shapes, [])

        processed = 0
        for shape in shapes:
            title = f"{shape.display_name} ({shape.type_name})"
            try:
                commands = self._compile(compiler, shape, shape.display_name)
            except ShapeCompileError:
                self._emit_comment("")
                self._emit_comment(f"Error processing node: {title}")
                continue

            self._emit_comment("")
            if commands.has_geometry():
                self._emit_comment(f"Processing node: {title}")
                processed += 1
            else:
                self._emit_comment(f"Skipped node: {title} - no geometry generated")
                self.warnings.append(f"No geometry generated for {shape.display_name}")
            self._emit_commands(commands)

        if processed == 0:
            raise EmptyResultError(
                "No valid geometry was generated from the selected objects. "
                "Please check that you have selected supported shape types."
            )

        self._add_footer()
        return ''.join(self._lines)

    def _reset_state(self):
        """Reset generator state."""
        self._lines = []
        self.warnings = []
        self.skipped_shapes = 0

    def _validate(self, shapes: List[Shape]) -> None:
        if not shapes:
            raise ValidationError("No shapes provided for G-code generation.")

        is_valid, error = self.settings.validate()
        if not is_valid:
            raise ValidationError(f"Invalid parameters: {error}")

    def _compile(self, compiler: ShapeCompiler, shape: Shape, label: str) -> CommandList:
        """Compile one shape, turning any failure into a ShapeCompileError."""
        try:
            return compiler.compile(shape)
        except Exception as e:
            error = ShapeCompileError(label, shape, e)
            logger.warning(str(error))
            self.warnings.append(str(error))
            self.skipped_shapes += 1
            raise error from e

    def _emit(self, command: MotionCommand) -> None:
        self._lines.append(self._emitter.render_command(command))

    def _emit_comment(self, text: str) -> None:
        self._emit_commands(CommandList().comment(text))

    def _emit_commands(self, commands: CommandList) -> None:
        self._lines.append(self._emitter.render(commands))

    def _add_header(self, shapes: List[Shape], extra: List[str]):
        """Add header comments, the setup block and laser enable."""
        settings = self.settings
        header = CommandList().comment(f"Generated by {GENERATOR_NAME}")

        page = find_page(shapes[0])
        if page is not None:
            header.comment(f"Page: {page.name}")

        header.comment(f"Selected objects: {len(shapes)}")
        header.comment(f"Feed Rate: {format_number(settings.feed_rate)} mm/min")
        header.comment(f"Rapid Feed Rate: {format_number(settings.rapid_feed_rate)} mm/min")
        header.comment(f"Laser Power: {format_number(settings.laser_power)} (S parameter)")
        for line in extra:
            header.comment(line)

        header.comment("")
        header.add(Setup(settings.feed_rate, settings.rapid_feed_rate, settings.laser_power))
        header.add(LaserEnable(inline=settings.inline_laser))
        self._emit_commands(header)

    def _add_footer(self):
        """Add footer comments, laser disable and program end."""
        self._emit_comment("")
        self._emit_comment("End of G-code")
        if self.skipped_shapes:
            self._emit_comment(f"Skipped shapes: {self.skipped_shapes}")
        self._emit(LaserDisable(inline=self.settings.inline_laser))
        self._emit(EndProgram())


def generate_gcode_for_node(shape: Shape,
                            laser_power: float = 255.0,
                            rapid_feed_rate: float = 3000.0,
                            feed_rate: float = 1000.0) -> str:
    """Generate a complete program for a single shape."""
    settings = GCodeSettings(
        feed_rate=feed_rate,
        rapid_feed_rate=rapid_feed_rate,
        laser_power=laser_power
    )
    return GCodeGenerator(settings).generate([shape])


def laser_inline_on() -> str:
    return GCodeEmitter().render_command(LaserEnable(inline=True))


def laser_inline_off() -> str:
    return GCodeEmitter().render_command(LaserDisable(inline=True))
