"""
ShapeCut - vector shapes to laser toolpaths.
"""

__version__ = "0.1.0"
