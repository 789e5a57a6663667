"""
Finite planar quadrilaterals used as bounding/clipping planes.

A Plane is four ordered corners p0, p1, p2, p3. It can be built from a
directed edge plus a normal, or from a convex hull facet equation, in both
cases scaled to cover a bounding box, and it can be written to and read back
from a four-vertex, two-triangle OBJ file.
"""

import logging
from pathlib import Path
from typing import Sequence

import numpy as np

from clipping_planes.types.bounding_box_3d import BoundingBox
from clipping_planes.types.config import DEFAULT_CONFIG, PlaneConfig
from clipping_planes.types.errors import MalformedInputError, NotCoplanarError
from clipping_planes.types.mesh import Mesh
from clipping_planes.types.types import Edge, HullPlaneEquation, Point3D

logger = logging.getLogger(__name__)

# Fixed triangulation of the quad, 0-based: (p1, p2, p0) and (p1, p3, p2)
PLANE_TRIANGLES = np.array([[1, 2, 0], [1, 3, 2]], dtype=np.int64)
PLANE_TRIANGLES.setflags(write=False)

# |edge direction x normal| below this means the two are parallel
_PARALLEL_TOLERANCE = 1e-12


def _normalized(vector: Point3D | np.ndarray, name: str) -> np.ndarray:
    vector = np.asarray(vector, dtype=np.float64)
    if vector.shape != (3,):
        raise MalformedInputError(f"{name} must have 3 components, got shape {vector.shape}")
    length = np.linalg.norm(vector)
    if not np.isfinite(length) or length == 0:
        raise MalformedInputError(f"Unable to normalize {name}: vector has length {length}")
    return vector / length


def planarity_determinant(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, p3: np.ndarray) -> float:
    """
    Signed volume of the parallelepiped spanned by the edge vectors
    (p1 - p0), (p2 - p0), (p3 - p0). Zero for four coplanar points.
    """
    mat = np.stack([p1 - p0, p2 - p0, p3 - p0], axis=-1)
    return float(np.linalg.det(mat))


def check_coplanar(
        p0: np.ndarray,
        p1: np.ndarray,
        p2: np.ndarray,
        p3: np.ndarray,
        tolerance: float = DEFAULT_CONFIG.planarity_tolerance,
        ) -> None:
    """
    Raise NotCoplanarError unless |det| < tolerance.

    The tolerance applies as-is to quads up to unit size and grows with the
    cube of the longest edge vector beyond that, since the determinant does.
    """
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    determinant = planarity_determinant(p0, p1, p2, p3)
    scale = max(np.linalg.norm(p - p0) for p in (p1, p2, p3))
    threshold = tolerance * max(1.0, float(scale)) ** 3
    # written so that a nan determinant fails too
    if not abs(determinant) < threshold:
        raise NotCoplanarError(determinant, threshold)


def deduplicate_vertices(points: np.ndarray, tolerance: float = DEFAULT_CONFIG.dedup_tolerance) -> np.ndarray:
    """
    Drop vertices within `tolerance` of an earlier vertex. The first occurrence
    wins, so the result keeps file order.
    """
    unique: list[np.ndarray] = []
    for point in np.asarray(points, dtype=np.float64):
        if not any(np.linalg.norm(point - kept) <= tolerance for kept in unique):
            unique.append(point)
    return np.array(unique, dtype=np.float64).reshape(-1, 3)


class Plane:
    def __init__(
            self,
            p0: Point3D | np.ndarray,
            p1: Point3D | np.ndarray,
            p2: Point3D | np.ndarray,
            p3: Point3D | np.ndarray,
            *,
            tolerance: float = DEFAULT_CONFIG.planarity_tolerance,
            dedup_tolerance: float = DEFAULT_CONFIG.dedup_tolerance,
            ):
        corners = np.array([p0, p1, p2, p3], dtype=np.float64)
        if corners.shape != (4, 3):
            raise MalformedInputError(f"Plane needs four 3D corners, got shape {corners.shape}")
        if not np.all(np.isfinite(corners)):
            raise MalformedInputError(f"Plane corners must be finite, got {corners.tolist()}")
        # Collapsed corners would not survive a save/load cycle
        distinct = len(deduplicate_vertices(corners, dedup_tolerance))
        if distinct < 4:
            raise MalformedInputError(f"Plane needs four distinct corners, got {distinct}")

        check_coplanar(*corners, tolerance=tolerance)

        corners.setflags(write=False)
        self._corners = corners

    @property
    def p0(self) -> np.ndarray:
        return self._corners[0]

    @property
    def p1(self) -> np.ndarray:
        return self._corners[1]

    @property
    def p2(self) -> np.ndarray:
        return self._corners[2]

    @property
    def p3(self) -> np.ndarray:
        return self._corners[3]

    @property
    def corners(self) -> np.ndarray:
        """(4, 3) read-only array of p0, p1, p2, p3"""
        return self._corners

    @property
    def triangles(self) -> np.ndarray:
        return PLANE_TRIANGLES

    @property
    def centroid(self) -> np.ndarray:
        return self._corners.mean(axis=0)

    @property
    def normal(self) -> np.ndarray:
        # Largest cross product over the corner triples, so that any
        # non-degenerate pair of edge vectors defines the orientation
        edges = self._corners[1:] - self._corners[0]
        crosses = [np.cross(edges[a], edges[b]) for a, b in ((0, 1), (0, 2), (1, 2))]
        best = max(crosses, key=np.linalg.norm)
        length = np.linalg.norm(best)
        if length == 0:
            raise MalformedInputError("Plane is degenerate: its corners do not span a surface")
        return best / length

    def signed_distance(self, points: np.ndarray) -> np.ndarray:
        """Signed distance of (..., 3) points to the infinite plane through the quad"""
        points = np.asarray(points, dtype=np.float64)
        assert points.shape[-1] == 3, "Points must have shape (..., 3)"
        return (points - self.p0) @ self.normal

    def as_mesh(self) -> Mesh:
        return Mesh(self._corners.copy(), PLANE_TRIANGLES.copy())

    def allclose(self, other: 'Plane', atol: float = 1e-9) -> bool:
        return bool(np.allclose(self._corners, other.corners, rtol=0, atol=atol))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Plane):
            return NotImplemented
        return bool(np.array_equal(self._corners, other.corners))

    def __hash__(self) -> int:
        # + 0.0 folds -0.0 into 0.0, which compare equal
        return hash((self._corners + 0.0).tobytes())

    def __repr__(self) -> str:
        return f"Plane(p0={self.p0.tolist()}, p1={self.p1.tolist()}, p2={self.p2.tolist()}, p3={self.p3.tolist()})"

    @classmethod
    def from_edge(
            cls,
            edge: Edge | Sequence[Point3D],
            normal: Point3D | np.ndarray,
            bbox: BoundingBox,
            config: PlaneConfig | None = None,
            ) -> 'Plane':
        """
        Build the quad containing `edge`, spanned by the edge direction and
        `normal`, extended by the bounding box diagonal past both edge
        endpoints and to both sides of the edge along the normal.

        Raises:
            MalformedInputError: for a zero-length edge or normal, a normal
                parallel to the edge, or a bounding box with zero diagonal
        """
        config = config or DEFAULT_CONFIG
        edge = Edge(*edge)
        e0 = np.asarray(edge.start, dtype=np.float64)
        e1 = np.asarray(edge.end, dtype=np.float64)

        # Diagonal of the bounding box is the extension scale
        dist_diag = bbox.diagonal_length
        if dist_diag == 0:
            raise MalformedInputError(f"Bounding box {tuple(bbox)} has a zero-length diagonal")

        direction = _normalized(edge.direction(), "edge direction")
        norm = _normalized(normal, "plane normal")
        if np.linalg.norm(np.cross(direction, norm)) < _PARALLEL_TOLERANCE:
            raise MalformedInputError("Plane normal is parallel to the edge; the quad would be degenerate")

        # Extend edge endpoints outward along the edge
        e0 = e0 - dist_diag * direction
        e1 = e1 + dist_diag * direction

        # Offset the extended endpoints to both sides along the normal
        p0 = e0 + dist_diag * norm
        p1 = e0 - dist_diag * norm
        p2 = e1 - dist_diag * norm
        p3 = e1 + dist_diag * norm

        return cls(p0, p1, p2, p3, tolerance=config.planarity_tolerance, dedup_tolerance=config.dedup_tolerance)

    @classmethod
    def from_hull_equation(
            cls,
            equation: HullPlaneEquation,
            bbox: BoundingBox,
            config: PlaneConfig | None = None,
            ) -> 'Plane':
        """
        Build a finite quad on a convex hull facet plane covering the padded
        bounding box.

        The footprint is spanned by the two axes along which the plane normal
        is smallest (X and Y for a mostly-horizontal plane). p0 sits over the
        padded min corner, p1 and p2 over the opposite padded faces along the
        first and second footprint axis, p3 over the opposite footprint corner.
        Each corner is lifted onto the plane along the remaining axis.
        """
        config = config or DEFAULT_CONFIG
        length = np.linalg.norm(equation.normal)
        normal = _normalized(equation.normal, "hull plane normal")
        # Keep normal . x + offset = 0 valid for a non-unit input normal
        plane_point = HullPlaneEquation(normal, equation.offset / length).point_on_plane()

        pad = config.padding_distance
        lo = bbox.min - pad
        hi = bbox.max + pad

        k = int(np.argmax(np.abs(normal)))
        i, j = [axis for axis in range(3) if axis != k]

        corners = []
        for u, v in ((lo[i], lo[j]), (hi[i], lo[j]), (lo[i], hi[j]), (hi[i], hi[j])):
            corner = np.empty(3, dtype=np.float64)
            corner[i] = u
            corner[j] = v
            # Intersect the axis-aligned line through (u, v) with the plane
            corner[k] = plane_point[k] - (normal[i] * (u - plane_point[i]) + normal[j] * (v - plane_point[j])) / normal[k]
            corners.append(corner)

        return cls(*corners, tolerance=config.planarity_tolerance, dedup_tolerance=config.dedup_tolerance)

    @classmethod
    def load_from_file(cls, path: Path | str, config: PlaneConfig | None = None) -> 'Plane':
        """
        Read a plane from an OBJ file. Faces are ignored; the first four
        distinct vertices become p0..p3.

        Raises:
            FileParseError: If the file cannot be read or parsed
            MalformedInputError: If it has fewer than four distinct vertices
            NotCoplanarError: If those vertices are not coplanar
        """
        config = config or DEFAULT_CONFIG
        absolute_path = Path(path).resolve()
        logger.debug(f"Loading plane from {absolute_path} (base directory {absolute_path.parent})")

        mesh = Mesh.from_obj(absolute_path, require_faces=False)
        verts = deduplicate_vertices(mesh.points, config.dedup_tolerance)

        if len(verts) < 4:
            raise MalformedInputError(
                f"Plane file {absolute_path} has {len(verts)} distinct vertices, at least 4 are required"
            )
        if len(verts) > 4:
            logger.warning(f"{absolute_path}: {len(verts)} distinct vertices, using the first 4")

        return cls(verts[0], verts[1], verts[2], verts[3], tolerance=config.planarity_tolerance, dedup_tolerance=config.dedup_tolerance)

    def save_to_file(self, path: Path | str) -> None:
        """
        Write the four corners and the two-triangle face list as an OBJ file,
        overwriting `path`. Output depends only on the corners.
        """
        try:
            self.as_mesh().to_obj(path, header=None)
        except OSError as e:
            logger.error(f"Failed to write plane to {path}: {str(e)}")
            raise
        logger.debug(f"Saved plane to {path}")
