"""
Tests for scene loading and G-code export.
"""

import json
import os
import tempfile
import unittest
from datetime import datetime

from shapecut.core.coordinates import get_global_position
from shapecut.core.shapes import (
    Point, ShapeKind, Rectangle, Polygon, Star, Text, VectorPath,
    Container, UnsupportedShape
)
from shapecut.io.scene_io import (
    load_scene, dict_to_page, dict_to_shape,
    save_gcode, generate_filename, default_output_path, SceneFormatError
)


SCENE = {
    "name": "Page 1",
    "selection": [
        {
            "type": "FRAME", "name": "Frame 1", "x": 100, "y": 50,
            "width": 200, "height": 200,
            "children": [
                {"type": "RECTANGLE", "name": "Box", "x": 10, "y": 10,
                 "width": 20, "height": 10},
                {"type": "GROUP", "name": "Logo", "children": [
                    {"type": "STAR", "name": "Star", "x": 0, "y": 0,
                     "width": 10, "height": 10, "pointCount": 6, "innerRadius": 0.4},
                ]},
            ],
        },
        {
            "type": "VECTOR", "name": "Curve", "x": 0, "y": 0, "width": 10, "height": 10,
            "vectorNetwork": {
                "vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 0}],
                "segments": [{"start": 0, "end": 1,
                              "tangentStart": {"x": 0, "y": 5},
                              "tangentEnd": {"x": 0, "y": 5}}],
            },
            "vectorPaths": [{"windingRule": "NONZERO", "data": "M 0 0 L 10 0"}],
        },
        {"type": "STICKY", "name": "Note"},
    ],
}


class TestDictToPage(unittest.TestCase):
    """Test scene document conversion."""

    def setUp(self):
        self.page = dict_to_page(SCENE)

    def test_page_and_selection(self):
        self.assertEqual(self.page.name, "Page 1")
        self.assertEqual(len(self.page.children), 3)

    def test_container_tree(self):
        frame = self.page.children[0]
        self.assertIsInstance(frame, Container)
        self.assertEqual(frame.kind, ShapeKind.FRAME)
        self.assertTrue(frame.has_position)
        group = frame.children[1]
        self.assertEqual(group.kind, ShapeKind.GROUP)
        self.assertFalse(group.has_position)

    def test_positions_resolve(self):
        box = self.page.children[0].children[0]
        self.assertIsInstance(box, Rectangle)
        self.assertEqual(get_global_position(box), Point(110, 60))
        star = self.page.children[0].children[1].children[0]
        self.assertEqual(get_global_position(star), Point(100, 50))

    def test_star_fields(self):
        star = self.page.children[0].children[1].children[0]
        self.assertIsInstance(star, Star)
        self.assertEqual(star.point_count, 6)
        self.assertAlmostEqual(star.inner_radius, 0.4)

    def test_vector_fields(self):
        curve = self.page.children[1]
        self.assertIsInstance(curve, VectorPath)
        self.assertTrue(curve.has_network)
        self.assertTrue(curve.vector_network.segments[0].is_curved)
        self.assertEqual(curve.path_data, ["M 0 0 L 10 0"])

    def test_unknown_type(self):
        note = self.page.children[2]
        self.assertIsInstance(note, UnsupportedShape)
        self.assertEqual(note.type_name, "STICKY")

    def test_bare_list(self):
        page = dict_to_page([{"type": "RECTANGLE", "width": 1, "height": 1}])
        self.assertEqual(page.name, "Page 1")
        self.assertIsInstance(page.children[0], Rectangle)

    def test_invalid_documents(self):
        for data in ("nope", {"selection": "nope"}, [42],
                     [{"type": "RECTANGLE", "x": "left"}],
                     [{"type": "VECTOR", "vectorNetwork": {"segments": [{"start": 0}]}}]):
            with self.assertRaises(SceneFormatError):
                dict_to_page(data)

    def test_wrong_container_types(self):
        for node in (
            {"type": "RECTANGLE", "absoluteBoundingBox": [1, 2]},
            {"type": "RECTANGLE", "absolutePosition": "0,0"},
            {"type": "VECTOR", "vectorNetwork": [1]},
            {"type": "VECTOR", "vectorNetwork": {"vertices": 3}},
            {"type": "VECTOR", "vectorNetwork": {"segments": {"start": 0}}},
            {"type": "VECTOR", "vectorNetwork": {"segments": ["0-1"]}},
            {"type": "VECTOR", "vectorPaths": "M 0 0"},
            {"type": "FRAME", "children": {"type": "RECTANGLE"}},
        ):
            with self.assertRaises(SceneFormatError, msg=repr(node)):
                dict_to_shape(node)


class TestDictToShape(unittest.TestCase):
    """Test individual node conversion."""

    def test_absolute_hints(self):
        shape = dict_to_shape({
            "type": "RECTANGLE", "x": 1, "y": 1, "width": 5, "height": 5,
            "absoluteBoundingBox": {"x": 40, "y": 41, "width": 5, "height": 5},
            "absolutePosition": {"x": 7, "y": 7},
        })
        self.assertEqual(shape.absolute_bounding_box.top_left, Point(40, 41))
        self.assertEqual(shape.absolute_position, Point(7, 7))
        self.assertEqual(get_global_position(shape), Point(40, 41))

    def test_polygon_and_text(self):
        polygon = dict_to_shape({"type": "POLYGON", "pointCount": 8})
        self.assertIsInstance(polygon, Polygon)
        self.assertEqual(polygon.point_count, 8)
        text = dict_to_shape({"type": "TEXT", "characters": "Hello"})
        self.assertIsInstance(text, Text)
        self.assertEqual(text.text, "Hello")

    def test_type_is_case_insensitive(self):
        self.assertIsInstance(dict_to_shape({"type": "rectangle"}), Rectangle)

    def test_invalid_star_ratio(self):
        with self.assertRaises(ValueError):
            dict_to_shape({"type": "STAR", "innerRadius": 2})


class TestLoadAndSave(unittest.TestCase):
    """Test file round trips through disk."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def test_load_scene(self):
        path = self.path("scene.json")
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(SCENE, f)
        page = load_scene(path)
        self.assertEqual(len(page.get_all_shapes()), 6)

    def test_load_invalid_json(self):
        path = self.path("broken.json")
        with open(path, 'w', encoding='utf-8') as f:
            f.write("{not json")
        with self.assertRaises(SceneFormatError):
            load_scene(path)

    def test_load_invalid_utf8(self):
        path = self.path("latin1.json")
        with open(path, 'wb') as f:
            f.write(b'{"name": "P\xe9ge", "selection": []}')
        with self.assertRaises(SceneFormatError):
            load_scene(path)

    def test_save_gcode(self):
        path = self.path("out.gcode")
        self.assertTrue(save_gcode("G21\nM30\n", path))
        with open(path, 'r', encoding='utf-8') as f:
            self.assertEqual(f.read(), "G21\nM30\n")

    def test_save_gcode_failure(self):
        path = self.path(os.path.join("missing", "out.gcode"))
        with self.assertLogs('shapecut.io.scene_io', level='ERROR'):
            self.assertFalse(save_gcode("M30\n", path))


class TestFilenames(unittest.TestCase):
    """Test output file naming."""

    NOW = datetime(2024, 3, 9, 14, 5, 7)

    def test_single_shape(self):
        name = generate_filename([Rectangle(name="Logo")], now=self.NOW)
        self.assertEqual(name, "Logo_2024-03-09T14-05-07")

    def test_invalid_characters_replaced(self):
        name = generate_filename([Rectangle(name='a/b:c*d?"e"<f>|g\\h')], now=self.NOW)
        self.assertEqual(name, "a_b_c_d__e__f__g_h_2024-03-09T14-05-07")

    def test_multiple_shapes(self):
        shapes = [Rectangle(name="First"), Rectangle(), Rectangle()]
        name = generate_filename(shapes, now=self.NOW)
        self.assertEqual(name, "First_and_2_more_2024-03-09T14-05-07")

    def test_unnamed_and_empty(self):
        self.assertEqual(generate_filename([Rectangle()], now=self.NOW),
                         "untitled_2024-03-09T14-05-07")
        self.assertEqual(generate_filename([]), "gcode")

    def test_default_output_path(self):
        path = default_output_path(os.path.join("designs", "scene.json"), [])
        self.assertEqual(str(path), os.path.join("designs", "gcode.gcode"))


if __name__ == '__main__':
    unittest.main()
