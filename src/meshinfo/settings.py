"""Tunable constants for the mesh engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineSettings:
    """Thresholds and checkpoint sizes shared by all passes.

    Attributes:
        weld_epsilon: Squared distance below which two vertices are the same point.
            This detects exact duplicates, it is not a merge radius.
        convexity_epsilon: Minimum squared magnitude of the corner cross product
            for a polygon vertex to count as convex.
        weld_step: Vertices processed between two suspension points of the welder
        scan_step: Triangles processed between two suspension points of the edge scans
        volume_step: Triangles processed between two suspension points of the volume pass
        clip_step: Ears clipped between two suspension points of the triangulator
        weld_before_fill: Weld coincident vertices before looking for holes
    """
    weld_epsilon: float = 1e-10
    convexity_epsilon: float = 1e-6
    weld_step: int = 500
    scan_step: int = 300
    volume_step: int = 300
    clip_step: int = 200
    weld_before_fill: bool = True

    def __post_init__(self):
        for name in ("weld_step", "scan_step", "volume_step", "clip_step"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        if self.weld_epsilon < 0 or self.convexity_epsilon < 0:
            raise ValueError("Epsilons must be non-negative")


DEFAULT_SETTINGS = EngineSettings()
