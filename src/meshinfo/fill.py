import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .edges import boundary_steps
from .loops import build_loops, orient_loop
from .mesh import Mesh
from .progress import CancellationToken, ProgressReport, ReportSteps, Task, stage
from .settings import DEFAULT_SETTINGS, EngineSettings
from .triangulate import ear_clip_steps
from .weld import weld_steps


@dataclass
class FillResult:
    """Outcome of a hole-filling run.

    Attributes:
        mesh: New mesh, the input vertices followed by the input triangles and the fill
        holes_found: Boundary loops detected
        holes_filled: Loops closed with the full len(loop) - 2 triangles
        partial_holes: Loops where ear clipping ran out of ears
        triangles_added: Triangles appended to the mesh
        irregular_vertices: Boundary vertices with a boundary degree other than 2
        skipped_chains: Boundary chains left open because they touch an irregular vertex
        issues: Human readable problems found on the way
    """
    mesh: Mesh
    holes_found: int = 0
    holes_filled: int = 0
    partial_holes: int = 0
    triangles_added: int = 0
    irregular_vertices: List[int] = field(default_factory=list)
    skipped_chains: int = 0
    issues: List[str] = field(default_factory=list)


def fill_holes(mesh: Mesh, token: Optional[CancellationToken] = None,
               settings: EngineSettings = DEFAULT_SETTINGS) -> Task:
    """
    Close the boundary holes of a triangle mesh by ear clipping.

    Holes are found as loops of edges used by a single triangle (after
    welding coincident vertices, unless disabled in ``settings``). Each loop
    is oriented against its surrounding triangles and ear-clipped, so the
    fill is wound like the rest of the surface. No vertices are added.

    The input mesh is never modified: the result carries a new Mesh, and a
    cancelled run produces no mesh at all. Normals are not computed here;
    whoever renders or saves the result recomputes them.

    Args:
        mesh: Mesh with holes
        token: Cancellation token for the operation (a new one is created if omitted)
        settings: Engine tunables

    Returns:
        Task whose result is a FillResult

    Raises:
        InvalidMeshError: if the mesh arrays are malformed

    Example:
        >>> task = fill_holes(mesh)
        >>> result = task.run(lambda report: print(report.phase, report.progress))
        >>> print(f"Filled {result.holes_filled} of {result.holes_found} holes")
    """
    mesh.validate()
    return Task("Hole filling", lambda tok: _fill_steps(mesh, tok, settings), token)


def _fill_steps(mesh: Mesh, token: CancellationToken, settings: EngineSettings) -> ReportSteps:
    logging.info(f"Filling holes: {mesh.num_vertices:,} vertices, {mesh.num_triangles:,} triangles")

    remap = None
    if settings.weld_before_fill:
        remap = yield from stage(weld_steps(mesh.vertices, token, settings), "Welding vertices", 0.0, 0.1)

    ledger = yield from stage(boundary_steps(mesh.triangles, token, remap, settings),
                              "Analyzing boundary", 0.1, 0.3)
    logging.info(f"Found {len(ledger)} boundary edges")

    yield ProgressReport(0.3, "Building boundary loops")
    token.raise_if_cancelled()
    loop_set = build_loops(ledger.boundary_edges())
    result = FillResult(
        mesh=mesh,
        holes_found=len(loop_set),
        irregular_vertices=loop_set.irregular_vertices,
        skipped_chains=loop_set.skipped_chains,
    )
    if loop_set.irregular_vertices:
        result.issues.append(
            f"Skipped {loop_set.skipped_chains} boundary chain(s) through "
            f"{len(loop_set.irregular_vertices)} non-manifold boundary vertices"
        )

    if not loop_set.loops:
        logging.info("No holes detected - mesh is already closed")
    else:
        hole_sizes = [len(loop) for loop in loop_set.loops]
        logging.info(f"Found {len(hole_sizes)} boundary loops (holes)")
        logging.info(f"  Hole sizes (boundary edges): min={min(hole_sizes)}, max={max(hole_sizes)}, "
                     f"mean={sum(hole_sizes) / len(hole_sizes):.1f}")

    new_triangles = []
    total = len(loop_set.loops)
    for k, loop in enumerate(loop_set.loops):
        loop = orient_loop(loop, ledger)
        start = 0.3 + 0.6 * k / total
        end = 0.3 + 0.6 * (k + 1) / total
        tris = yield from stage(ear_clip_steps(mesh.vertices, loop, token, settings),
                                f"Filling hole {k + 1}/{total}", start, end)
        expected = len(loop) - 2
        added = len(tris) // 3
        if added == expected:
            result.holes_filled += 1
        else:
            result.partial_holes += 1
            result.issues.append(f"Hole {k + 1} ({len(loop)} vertices) only partially filled: "
                                 f"{added} of {expected} triangles")
        new_triangles.extend(tris)

    yield ProgressReport(0.95, "Assembling mesh")
    token.raise_if_cancelled()

    result.triangles_added = len(new_triangles) // 3
    result.mesh = mesh.with_triangles(new_triangles)
    logging.info(f"Filled {result.holes_filled} holes ({result.partial_holes} partial): "
                 f"{result.triangles_added} new faces added")
    for issue in result.issues:
        logging.warning(f"  - {issue}")
    return result
