from dataclasses import dataclass


@dataclass(frozen=True)
class PlaneConfig:
    # outward offset applied to corners derived from a bounding box
    padding_distance: float = 1.0
    planarity_tolerance: float = 1e-9
    # loaded vertices closer than this are treated as the same vertex
    dedup_tolerance: float = 1e-9

    def __post_init__(self):
        if self.padding_distance < 0:
            raise ValueError(f"Padding distance must be non-negative, got {self.padding_distance}")
        if self.planarity_tolerance <= 0:
            raise ValueError(f"Planarity tolerance must be positive, got {self.planarity_tolerance}")
        if self.dedup_tolerance < 0:
            raise ValueError(f"Dedup tolerance must be non-negative, got {self.dedup_tolerance}")


DEFAULT_CONFIG = PlaneConfig()
