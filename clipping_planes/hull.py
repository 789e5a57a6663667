import logging

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from clipping_planes.types.bounding_box_3d import BoundingBox
from clipping_planes.types.config import PlaneConfig
from clipping_planes.types.errors import MalformedInputError
from clipping_planes.types.mesh import Mesh
from clipping_planes.types.plane import Plane
from clipping_planes.types.types import HullPlaneEquation

logger = logging.getLogger(__name__)


def hull_plane_equations(points: np.ndarray, decimals: int = 9) -> list[HullPlaneEquation]:
    """
    Plane equations of the convex hull facets of a point cloud.

    Qhull triangulates the hull, so a flat face shows up as several facets
    with (numerically) the same equation; those are merged after rounding to
    `decimals`. Equations keep the order of their first facet.

    Args:
        points: (N, 3) points, N >= 4 and not all coplanar
        decimals: rounding applied when merging coplanar facets

    Returns:
        One HullPlaneEquation per distinct facet plane, normals pointing outward
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[-1] != 3:
        raise MalformedInputError(f"Expected an (N, 3) array of points, got shape {points.shape}")
    if len(points) < 4:
        raise MalformedInputError(f"Convex hull needs at least 4 points, got {len(points)}")

    try:
        hull = ConvexHull(points)
    except QhullError as e:
        raise MalformedInputError(f"Unable to compute convex hull: {e}") from e

    # + 0.0 folds -0.0 into 0.0 so mirrored zero components merge
    rounded = np.round(hull.equations, decimals) + 0.0
    _, first_index = np.unique(rounded, axis=0, return_index=True)
    equations = hull.equations[np.sort(first_index)]
    logger.debug(f"Convex hull of {len(points)} points: {len(hull.equations)} facets, {len(equations)} distinct planes")

    return [HullPlaneEquation.from_array(equation) for equation in equations]


def bounding_planes(mesh: Mesh, config: PlaneConfig | None = None) -> list[Plane]:
    """
    One finite Plane per distinct convex hull facet of `mesh`, each sized to
    cover the mesh's bounding box.
    """
    return planes_for_equations(hull_plane_equations(mesh.points), mesh.bounding_box, config)


def planes_for_equations(
        equations: list[HullPlaneEquation],
        bbox: BoundingBox,
        config: PlaneConfig | None = None,
        ) -> list[Plane]:
    return [Plane.from_hull_equation(equation, bbox, config) for equation in equations]
