"""Hole filling and watertightness analysis for indexed triangle meshes."""

from .analysis import AnalysisResult, analyze, is_closed
from .edges import EdgeLedger, canonical_edge, count_edges, find_boundary
from .fill import FillResult, fill_holes
from .loops import LoopSet, build_loops, orient_loop
from .mesh import InvalidMeshError, Mesh
from .progress import CancellationToken, ProgressReport, Runner, Task
from .settings import DEFAULT_SETTINGS, EngineSettings
from .triangulate import triangulate_loop
from .volume import mesh_volume, signed_volume
from .weld import weld_vertices

__all__ = [
    "analyze",
    "fill_holes",
    "is_closed",
    "AnalysisResult",
    "FillResult",
    "Mesh",
    "InvalidMeshError",
    "EdgeLedger",
    "canonical_edge",
    "count_edges",
    "find_boundary",
    "LoopSet",
    "build_loops",
    "orient_loop",
    "triangulate_loop",
    "weld_vertices",
    "mesh_volume",
    "signed_volume",
    "CancellationToken",
    "ProgressReport",
    "Task",
    "Runner",
    "EngineSettings",
    "DEFAULT_SETTINGS",
]
