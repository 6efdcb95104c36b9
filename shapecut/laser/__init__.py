"""
ShapeCut Laser Module

Shape compilation, travel optimization and G-code generation.
"""

from .commands import (
    MotionCommand, RapidMove, CutMove, ArcMove, LaserEnable, LaserDisable,
    Setup, EndProgram, Comment, CommandList
)
from .emitter import GCodeEmitter, format_coordinate, format_number
from .shape_compiler import ShapeCompiler, FlatNode, flatten_nodes, get_anchor_points
from .vector_paths import group_segments_into_paths, trace_vector_network, parse_path_data
from .path_optimizer import ToolpathSegment, optimize_paths, calculate_travel_distance
from .gcode_generator import (
    GCodeGenerator, GCodeSettings,
    ValidationError, ShapeCompileError, EmptyResultError,
    generate_gcode_for_node, laser_inline_on, laser_inline_off
)

__all__ = [
    # Commands
    'MotionCommand', 'RapidMove', 'CutMove', 'ArcMove', 'LaserEnable',
    'LaserDisable', 'Setup', 'EndProgram', 'Comment', 'CommandList',
    # Rendering
    'GCodeEmitter', 'format_coordinate', 'format_number',
    # Compilation
    'ShapeCompiler', 'FlatNode', 'flatten_nodes', 'get_anchor_points',
    'group_segments_into_paths', 'trace_vector_network', 'parse_path_data',
    # Path optimization
    'ToolpathSegment', 'optimize_paths', 'calculate_travel_distance',
    # G-code generation
    'GCodeGenerator', 'GCodeSettings',
    'ValidationError', 'ShapeCompileError', 'EmptyResultError',
    'generate_gcode_for_node', 'laser_inline_on', 'laser_inline_off',
]
