from pathlib import Path


class PlaneError(ValueError):
    pass


class GeometryError(PlaneError):
    pass


class NotCoplanarError(GeometryError):
    def __init__(self, determinant: float, tolerance: float):
        self.determinant = determinant
        self.tolerance = tolerance
        super().__init__(
            f"Corner points are not coplanar: |det| = {abs(determinant):.3e} exceeds tolerance {tolerance:.3e}"
        )


class MalformedInputError(PlaneError):
    pass


class FileParseError(PlaneError):
    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load/parse .obj file {self.path}: {reason}")
