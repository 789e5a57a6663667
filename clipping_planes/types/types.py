from typing import NamedTuple
import numpy as np

Point3D = tuple[float, float, float]


class Edge(NamedTuple):
    start: Point3D | np.ndarray
    end: Point3D | np.ndarray

    def direction(self) -> np.ndarray:
        return np.asarray(self.end, dtype=np.float64) - np.asarray(self.start, dtype=np.float64)


class HullPlaneEquation:
    """
    A plane as unit normal and signed offset, so that points x on the plane
    satisfy normal . x + offset = 0 (the layout of ConvexHull.equations).
    """
    normal: np.ndarray
    offset: float

    def __init__(self, normal: Point3D | np.ndarray, offset: float):
        normal = np.asarray(normal, dtype=np.float64)
        if normal.shape != (3,):
            raise ValueError(f"Unable to construct plane equation: normal must have 3 components, got shape {normal.shape}")
        self.normal = normal
        self.offset = float(offset)

    @staticmethod
    def from_array(equation: np.ndarray) -> 'HullPlaneEquation':
        equation = np.asarray(equation, dtype=np.float64)
        if equation.shape != (4,):
            raise ValueError(f"Plane equation must have 4 values (a, b, c, d), got shape {equation.shape}")
        return HullPlaneEquation(equation[:3], equation[3])

    def point_on_plane(self) -> np.ndarray:
        return -self.offset * self.normal

    def __repr__(self) -> str:
        return f"HullPlaneEquation(normal={self.normal.tolist()}, offset={self.offset})"
