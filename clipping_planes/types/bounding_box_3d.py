from typing import NamedTuple, Sequence
import numpy as np


class BoundingBox(NamedTuple):
    x_start: int | float
    x_end: int | float
    y_start: int | float
    y_end: int | float
    z_start: int | float
    z_end: int | float

    @property
    def min(self) -> np.ndarray:
        return np.array([self.x_start, self.y_start, self.z_start], dtype=np.float64)

    @property
    def max(self) -> np.ndarray:
        return np.array([self.x_end, self.y_end, self.z_end], dtype=np.float64)

    @property
    def extent(self) -> np.ndarray:
        return self.max - self.min

    @property
    def diagonal_length(self) -> float:
        """Euclidean distance between the min and max corners"""
        return float(np.linalg.norm(self.max - self.min))

    @classmethod
    def from_min_max(cls, min_coords: Sequence[int | float], max_coords: Sequence[int | float]) -> 'BoundingBox':
        if len(min_coords) != 3 or len(max_coords) != 3:
            raise ValueError("Both min_coords and max_coords must have exactly 3 values")

        # Zero-volume boxes are allowed, inverted ones are not
        for min_val, max_val, dim in zip(min_coords, max_coords, ['x', 'y', 'z']):
            if min_val > max_val:
                raise ValueError(f"Min {dim} coordinate ({min_val}) must not exceed max {dim} coordinate ({max_val})")

        return cls(
            x_start=float(min_coords[0]),
            x_end=float(max_coords[0]),
            y_start=float(min_coords[1]),
            y_end=float(max_coords[1]),
            z_start=float(min_coords[2]),
            z_end=float(max_coords[2])
        )

    @classmethod
    def from_array(cls, bbox: Sequence[int | float]) -> 'BoundingBox':
        """
        Build from the flat (min x, min y, min z, max x, max y, max z) layout.
        """
        if len(bbox) != 6:
            raise ValueError(f"Bounding box array must have exactly 6 values, got {len(bbox)}")
        return cls.from_min_max(bbox[:3], bbox[3:])

    @classmethod
    def from_points(cls, points: np.ndarray) -> 'BoundingBox':
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[-1] != 3 or len(points) == 0:
            raise ValueError(f"Expected a non-empty (N, 3) array of points, got shape {points.shape}")
        return cls.from_min_max(points.min(axis=0), points.max(axis=0))
