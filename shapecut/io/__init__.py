"""
ShapeCut I/O Module

Handles scene import and G-code export.
"""

from .scene_io import (
    load_scene, dict_to_page, dict_to_shape,
    save_gcode, generate_filename, default_output_path, SceneFormatError
)

__all__ = [
    'load_scene', 'dict_to_page', 'dict_to_shape',
    'save_gcode', 'generate_filename', 'default_output_path', 'SceneFormatError',
]
