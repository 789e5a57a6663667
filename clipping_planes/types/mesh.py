import logging
from pathlib import Path

import numpy as np
import trimesh

from clipping_planes.types.bounding_box_3d import BoundingBox
from clipping_planes.types.errors import FileParseError

logger = logging.getLogger(__name__)

# Record kinds that are valid OBJ but carry nothing a Mesh needs
_IGNORED_OBJ_ELEMENTS = {'vt', 'vn', 'vp', 'o', 'g', 's', 'l', 'usemtl', 'mtllib'}


class Mesh:
    def __init__(self, points, triangles):
        points = np.asarray(points, dtype=np.float64)
        triangles = np.asarray(triangles, dtype=np.int64)
        if triangles.size == 0:
            triangles = triangles.reshape(0, 3)
        assert points.shape[-1] == 3
        assert len(points.shape) == 2
        assert triangles.shape[-1] == 3
        assert len(triangles.shape) == 2

        self.points = points
        self.triangles = triangles
        self.bounding_box = BoundingBox.from_points(self.points)

    def as_trimesh(self) -> trimesh.Trimesh:
        return trimesh.Trimesh(vertices=self.points, faces=self.triangles, process=False)

    @staticmethod
    def from_trimesh(tm: trimesh.Trimesh) -> 'Mesh':
        if not isinstance(tm, trimesh.Trimesh):
            raise ValueError("Input must be a trimesh.Trimesh object")
        return Mesh(tm.vertices, tm.faces)

    @staticmethod
    def _stream_obj_elements(file_path: Path | str, chunk_size: int = 8192):
        """
        Stream elements from an OBJ file line by line using a generator.

        Args:
            file_path: Path to the OBJ file
            chunk_size: Size of buffer for reading file chunks

        Yields:
            tuple: (line_number, element_type, values) for every non-empty, non-comment line
        """
        remainder = ""
        line_number = 0
        with open(file_path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    # Process any remaining data
                    line = remainder.strip()
                    line_number += 1
                    if line and not line.startswith('#'):
                        values = line.split()
                        yield line_number, values[0], values[1:]
                    break

                # Decode chunk and combine with remainder
                text = remainder + chunk.decode('utf-8')
                lines = text.split('\n')

                # Save the last partial line for the next iteration
                remainder = lines[-1]

                for line in lines[:-1]:
                    line_number += 1
                    line = line.strip()
                    if line and not line.startswith('#'):
                        values = line.split()
                        yield line_number, values[0], values[1:]

    @staticmethod
    def from_obj(file_path: Path | str, require_faces: bool = True) -> 'Mesh':
        """
        Read a mesh from an OBJ file using streaming.

        Parser warnings (unknown records, polygon faces, a missing face list when
        require_faces is False) are logged and do not abort the load.

        Args:
            file_path: Path to the OBJ file
            require_faces: Treat a file without face records as invalid

        Returns:
            Mesh: A new Mesh instance

        Raises:
            FileParseError: If the file cannot be read or is not a valid OBJ file
        """
        vertices = []
        faces = []
        try:
            for line_number, elem_type, values in Mesh._stream_obj_elements(file_path):
                if elem_type == 'v':
                    try:
                        if len(values) < 3:
                            raise ValueError(values)
                        vertices.append([float(x) for x in values[:3]])
                    except ValueError:
                        raise FileParseError(file_path, f"invalid vertex format on line {line_number}: {values}")

                elif elem_type == 'f':
                    if len(values) < 3:
                        raise FileParseError(file_path, f"invalid face format on line {line_number}: {values}")
                    if len(values) > 3:
                        logger.warning(f"{file_path}:{line_number}: face with {len(values)} vertices, keeping only the first triangle")
                    try:
                        # Convert to 0-based index, dropping any /vt/vn suffix
                        face = [int(v.split('/')[0]) - 1 for v in values[:3]]
                    except ValueError:
                        raise FileParseError(file_path, f"invalid face format on line {line_number}: {values}")
                    faces.append(face)

                elif elem_type not in _IGNORED_OBJ_ELEMENTS:
                    logger.warning(f"{file_path}:{line_number}: ignoring unknown element '{elem_type}'")
        except (OSError, UnicodeDecodeError) as e:
            raise FileParseError(file_path, str(e)) from e

        if len(vertices) == 0:
            raise FileParseError(file_path, "no vertices found in OBJ file")
        if len(faces) == 0:
            if require_faces:
                raise FileParseError(file_path, "no faces found in OBJ file")
            logger.warning(f"{file_path}: no faces found in OBJ file")

        triangles = np.array(faces, dtype=np.int64).reshape(-1, 3)
        if np.any(triangles < 0) or np.any(triangles >= len(vertices)):
            raise FileParseError(file_path, f"face references a vertex outside 1..{len(vertices)}")

        return Mesh(np.array(vertices, dtype=np.float64), triangles)

    def to_obj(self, file_path: Path | str, chunk_size: int = 8192, header: str | None = "OBJ file created by Mesh class") -> None:
        """
        Write the mesh to an OBJ file using streaming.

        Coordinates are written with full float precision so a write/read
        round trip reproduces them exactly.

        Args:
            file_path: Path where to save the OBJ file
            chunk_size: Size of buffer for writing file chunks
            header: Comment written on the first line, or None for no comment
        """
        def generate_obj_lines():
            if header is not None:
                yield f"# {header}\n"

            for vertex in self.points:
                yield f"v {float(vertex[0])!r} {float(vertex[1])!r} {float(vertex[2])!r}\n"

            # Faces (OBJ uses 1-based indexing)
            for face in self.triangles:
                yield f"f {face[0]+1} {face[1]+1} {face[2]+1}\n"

        with open(file_path, 'w') as f:
            buffer = ""
            for line in generate_obj_lines():
                buffer += line
                if len(buffer) >= chunk_size:
                    f.write(buffer)
                    buffer = ""

            # Write any remaining data
            if buffer:
                f.write(buffer)
