#!/usr/bin/env python3
"""
ShapeCut - Main Entry Point

Converts a JSON scene (a dump of the host application's selection) into a
G-code program.
Run with: python -m shapecut.main scene.json -o out.gcode
"""

import argparse
import logging
import sys

from . import __version__
from .core.shapes import Point
from .io.scene_io import load_scene, save_gcode, default_output_path
from .laser.gcode_generator import (
    GCodeGenerator, GCodeSettings, ValidationError, EmptyResultError
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shapecut",
        description="Convert vector shapes to laser G-code"
    )
    parser.add_argument("scene", help="JSON scene file")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("-o", "--output",
                        help="Output file (default: standard output)")
    output.add_argument("--auto-name", action="store_true",
                        help="Write next to the scene, named after the selection")
    parser.add_argument("--feed-rate", type=float, default=1000.0,
                        help="Cutting feed rate in mm/min (default: 1000)")
    parser.add_argument("--rapid-feed-rate", type=float, default=3000.0,
                        help="Rapid feed rate in mm/min (default: 3000)")
    parser.add_argument("--laser-power", type=float, default=255.0,
                        help="Laser power S value (default: 255)")
    parser.add_argument("--no-optimize", action="store_true",
                        help="Keep the selection order instead of minimizing travel")
    parser.add_argument("--classic", action="store_true",
                        help="Compile each selected shape whole, without flattening")
    parser.add_argument("--start-x", type=float, default=0.0,
                        help="Starting head X position for travel optimization")
    parser.add_argument("--start-y", type=float, default=0.0,
                        help="Starting head Y position for travel optimization")
    parser.add_argument("--no-inline", action="store_true",
                        help="Use plain M3/M5 instead of inline laser mode")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def main(argv=None) -> int:
    """Main entry point for the ShapeCut command line."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )

    try:
        page = load_scene(args.scene)
    except (OSError, ValueError) as e:
        # SceneFormatError is a ValueError, as are shape invariant violations
        logger.error(f"Could not load scene: {e}")
        return 1

    logger.info(f"Loaded page '{page.name}': {len(page.children)} selected, "
                f"{len(page.get_all_shapes())} shapes in total")

    settings = GCodeSettings(
        feed_rate=args.feed_rate,
        rapid_feed_rate=args.rapid_feed_rate,
        laser_power=args.laser_power,
        inline_laser=not args.no_inline,
        optimize_travel=not args.no_optimize,
        start_position=Point(args.start_x, args.start_y)
    )
    generator = GCodeGenerator(settings)
    shapes = page.children

    try:
        if args.classic:
            gcode = generator.generate_classic(shapes)
        else:
            gcode = generator.generate(shapes)
    except (ValidationError, EmptyResultError) as e:
        logger.error(str(e))
        return 1

    for warning in generator.warnings:
        logger.warning(warning)

    if args.output or args.auto_name:
        path = args.output or str(default_output_path(args.scene, shapes))
        return 0 if save_gcode(gcode, path) else 1

    sys.stdout.write(gcode)
    return 0


if __name__ == "__main__":
    sys.exit(main())
