import unittest
import numpy as np
from pathlib import Path
import tempfile
import os

import trimesh

from clipping_planes.types.errors import FileParseError
from clipping_planes.types.mesh import Mesh


class TestMeshOBJ(unittest.TestCase):
    def setUp(self):
        # Create a simple cube mesh for testing
        self.points = np.array([
            [0, 0, 0],  # 0
            [1, 0, 0],  # 1
            [1, 1, 0],  # 2
            [0, 1, 0],  # 3
            [0, 0, 1],  # 4
            [1, 0, 1],  # 5
            [1, 1, 1],  # 6
            [0, 1, 1],  # 7
        ], dtype=np.float64)

        self.triangles = np.array([
            [0, 1, 2],  # front
            [0, 2, 3],
            [1, 5, 6],  # right
            [1, 6, 2],
            [5, 4, 7],  # back
            [5, 7, 6],
            [4, 0, 3],  # left
            [4, 3, 7],
            [3, 2, 6],  # top
            [3, 6, 7],
            [0, 4, 5],  # bottom
            [0, 5, 1]
        ], dtype=np.int64)

        self.mesh = Mesh(self.points, self.triangles)
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        # Clean up temporary files
        for file in Path(self.temp_dir).glob("*.obj"):
            file.unlink()
        os.rmdir(self.temp_dir)

    def test_bounding_box(self):
        np.testing.assert_array_equal(self.mesh.bounding_box.min, [0, 0, 0])
        np.testing.assert_array_equal(self.mesh.bounding_box.max, [1, 1, 1])

    def test_save_and_load_simple(self):
        """Test basic save and load functionality"""
        file_path = Path(self.temp_dir) / "test_cube.obj"

        self.mesh.to_obj(file_path)
        loaded_mesh = Mesh.from_obj(file_path)

        np.testing.assert_array_equal(self.mesh.points, loaded_mesh.points)
        np.testing.assert_array_equal(self.mesh.triangles, loaded_mesh.triangles)

    def test_full_precision(self):
        """Coordinates survive a write/read cycle bit for bit"""
        points = np.random.default_rng(0).random((50, 3)) * 1e3
        triangles = np.arange(48).reshape(16, 3)
        mesh = Mesh(points, triangles)

        file_path = Path(self.temp_dir) / "precise.obj"
        mesh.to_obj(file_path, chunk_size=256)
        loaded_mesh = Mesh.from_obj(file_path)

        np.testing.assert_array_equal(mesh.points, loaded_mesh.points)
        np.testing.assert_array_equal(mesh.triangles, loaded_mesh.triangles)

    def test_header(self):
        file_path = Path(self.temp_dir) / "header.obj"
        self.mesh.to_obj(file_path, header="cube")
        self.assertTrue(file_path.read_text().startswith("# cube\n"))
        self.mesh.to_obj(file_path, header=None)
        self.assertTrue(file_path.read_text().startswith("v "))

    def test_invalid_obj_format(self):
        """Test handling of invalid OBJ files"""
        file_path = Path(self.temp_dir) / "invalid.obj"

        with open(file_path, 'w') as f:
            f.write("v 0 0\n")  # Invalid vertex (missing z)
            f.write("f 1 2\n")  # Invalid face (missing third vertex)

        with self.assertRaises(FileParseError):
            Mesh.from_obj(file_path)

    def test_invalid_face_index(self):
        file_path = Path(self.temp_dir) / "bad_face.obj"
        with open(file_path, 'w') as f:
            f.write("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 4\n")

        with self.assertRaises(FileParseError):
            Mesh.from_obj(file_path)

    def test_empty_obj(self):
        """Test handling of empty OBJ files"""
        file_path = Path(self.temp_dir) / "empty.obj"

        with open(file_path, 'w') as f:
            f.write("# Empty OBJ file\n")

        with self.assertRaises(FileParseError):
            Mesh.from_obj(file_path)

    def test_faces_optional(self):
        file_path = Path(self.temp_dir) / "points.obj"
        with open(file_path, 'w') as f:
            f.write("v 0 0 0\nv 1 0 0\nv 0 1 0\n")

        with self.assertRaises(FileParseError):
            Mesh.from_obj(file_path)
        with self.assertLogs('clipping_planes.types.mesh', level='WARNING'):
            mesh = Mesh.from_obj(file_path, require_faces=False)
        self.assertEqual(len(mesh.points), 3)
        self.assertEqual(mesh.triangles.shape, (0, 3))

    def test_obj_with_comments(self):
        """Test handling of OBJ files with comments and empty lines"""
        file_path = Path(self.temp_dir) / "commented.obj"

        with open(file_path, 'w') as f:
            f.write("# This is a comment\n")
            f.write("\n")  # Empty line
            f.write("v 0 0 0\n")
            f.write("# Another comment\n")
            f.write("v 1 0 0\n")
            f.write("v 0 1 0\n")
            f.write("\n")
            f.write("f 1 2 3")  # no trailing newline

        mesh = Mesh.from_obj(file_path)
        self.assertEqual(len(mesh.points), 3)
        self.assertEqual(len(mesh.triangles), 1)

    def test_obj_with_texture_coords(self):
        """Test handling of OBJ files with texture coordinates"""
        file_path = Path(self.temp_dir) / "textured.obj"

        with open(file_path, 'w') as f:
            f.write("v 0 0 0\n")
            f.write("v 1 0 0\n")
            f.write("v 0 1 0\n")
            f.write("vt 0 0\n")  # Texture coordinates (should be ignored)
            f.write("vt 1 0\n")
            f.write("vt 0 1\n")
            f.write("f 1/1 2/2 3/3\n")  # Face with texture indices

        mesh = Mesh.from_obj(file_path)
        self.assertEqual(len(mesh.points), 3)
        self.assertEqual(len(mesh.triangles), 1)
        np.testing.assert_array_equal(mesh.triangles[0], [0, 1, 2])

    def test_quad_face_truncated(self):
        file_path = Path(self.temp_dir) / "quad.obj"
        with open(file_path, 'w') as f:
            f.write("v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n")

        with self.assertLogs('clipping_planes.types.mesh', level='WARNING'):
            mesh = Mesh.from_obj(file_path)
        np.testing.assert_array_equal(mesh.triangles, [[0, 1, 2]])

    def test_trimesh_conversion(self):
        tm = self.mesh.as_trimesh()
        self.assertIsInstance(tm, trimesh.Trimesh)
        self.assertAlmostEqual(tm.area, 6.0)
        round_tripped = Mesh.from_trimesh(tm)
        np.testing.assert_array_equal(round_tripped.points, self.points)

    def test_from_trimesh_rejects_other_types(self):
        with self.assertRaises(ValueError):
            Mesh.from_trimesh(self.points)


if __name__ == "__main__":
    unittest.main()
