import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .edges import count_edges, incidence_steps
from .mesh import Mesh
from .progress import CancellationToken, ReportSteps, Task, stage
from .settings import DEFAULT_SETTINGS, EngineSettings
from .volume import volume_steps
from .weld import canonical_count, weld_steps, weld_vertices


@dataclass
class AnalysisResult:
    """Results from the watertightness analysis."""
    is_closed: bool
    volume: Optional[float]
    num_vertices: int
    num_welded_vertices: int
    num_triangles: int
    num_open_edges: int
    num_non_manifold_edges: int
    num_degenerate_triangles: int
    issues: List[str] = field(default_factory=list)

    def mass(self, density: float) -> Optional[float]:
        """Mass for a uniform density in mass per cubic unit, or None if the volume is undefined."""
        if self.volume is None:
            return None
        return self.volume * density


def analyze(mesh: Mesh, token: Optional[CancellationToken] = None,
            settings: EngineSettings = DEFAULT_SETTINGS) -> Task:
    """
    Weld vertices, classify the mesh as closed or open and integrate its volume.

    The mesh is validated right away, so malformed input raises here instead
    of while stepping.

    Args:
        mesh: Mesh to analyze; it is not modified
        token: Cancellation token for the operation (a new one is created if omitted)
        settings: Engine tunables

    Returns:
        Task whose result is an AnalysisResult

    Raises:
        InvalidMeshError: if the mesh arrays are malformed

    Example:
        >>> result = analyze(mesh).run()
        >>> print(result.is_closed, result.volume)
    """
    mesh.validate()
    return Task("Mesh analysis", lambda tok: _analysis_steps(mesh, tok, settings), token)


def _analysis_steps(mesh: Mesh, token: CancellationToken, settings: EngineSettings) -> ReportSteps:
    logging.info(f"Analyzing mesh: {mesh.num_vertices:,} vertices, {mesh.num_triangles:,} triangles")
    issues = []

    remap = yield from stage(weld_steps(mesh.vertices, token, settings), "Welding vertices", 0.0, 0.4)
    ledger = yield from stage(incidence_steps(mesh.triangles, token, remap, settings),
                              "Checking closure", 0.4, 0.7)

    open_edges = sum(1 for _ in ledger.odd_edges())
    non_manifold = sum(1 for count in ledger.counts.values() if count > 2)
    degenerate = count_degenerate_triangles(mesh.triangles, remap)
    closed = open_edges == 0

    if mesh.num_triangles == 0:
        issues.append("Mesh has no triangles")
    if not closed:
        issues.append(f"Mesh is not closed ({open_edges} open edge(s))")
    if non_manifold:
        issues.append(f"Found {non_manifold} edge(s) shared by more than two triangles")
    if degenerate:
        issues.append(f"Found {degenerate} triangle(s) collapsed by welding")

    volume = None
    if closed:
        volume = yield from stage(volume_steps(mesh.vertices, mesh.triangles, token, remap, settings),
                                  "Computing volume", 0.7, 1.0)
        logging.info(f"Mesh is closed, volume={volume:.6g}")
    else:
        logging.info(f"Mesh is open: {open_edges} open edge(s)")

    return AnalysisResult(
        is_closed=closed,
        volume=volume,
        num_vertices=mesh.num_vertices,
        num_welded_vertices=canonical_count(remap),
        num_triangles=mesh.num_triangles,
        num_open_edges=open_edges,
        num_non_manifold_edges=non_manifold,
        num_degenerate_triangles=degenerate,
        issues=issues,
    )


def count_degenerate_triangles(triangles: np.ndarray, remap: Optional[np.ndarray] = None) -> int:
    """Triangles with two corners on the same (welded) vertex."""
    faces = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if remap is not None:
        faces = np.asarray(remap)[faces]
    collapsed = (faces[:, 0] == faces[:, 1]) | (faces[:, 1] == faces[:, 2]) | (faces[:, 2] == faces[:, 0])
    return int(np.count_nonzero(collapsed))


def is_closed(mesh: Mesh, remap: Optional[np.ndarray] = None,
              settings: EngineSettings = DEFAULT_SETTINGS) -> bool:
    """
    Eager closure check.

    Every edge must be used by an even number of triangles. Edges shared by
    four or more triangles pass as long as the count is even.
    """
    if remap is None:
        remap = weld_vertices(mesh.vertices, settings)
    return count_edges(mesh.triangles, remap).is_closed()
