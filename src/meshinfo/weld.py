"""Merge exact duplicate vertices into canonical indices."""

import logging

import numpy as np

from .progress import CancellationToken, PassSteps, drain
from .settings import DEFAULT_SETTINGS, EngineSettings


def weld_steps(vertices: np.ndarray, token: CancellationToken,
               settings: EngineSettings = DEFAULT_SETTINGS) -> PassSteps:
    """
    Build the weld map incrementally.

    Every vertex that is still its own representative claims all later,
    unclaimed vertices closer than ``settings.weld_epsilon`` (squared
    distance). The scan is quadratic in the vertex count, which is fine for
    editor-sized assets.

    Args:
        vertices: (N, 3) array of vertex positions
        token: Checked each time the pass is resumed
        settings: Supplies the epsilon and the checkpoint size

    Returns:
        (N,) int64 array mapping each vertex to the lowest index of its cluster
    """
    points = np.asarray(vertices, dtype=np.float64)
    n = len(points)
    remap = np.arange(n, dtype=np.int64)
    step = settings.weld_step

    for i in range(n):
        if remap[i] == i and i + 1 < n:
            diff = points[i + 1:] - points[i]
            dist2 = np.einsum("ij,ij->i", diff, diff)
            unclaimed = remap[i + 1:] == np.arange(i + 1, n)
            remap[i + 1:][(dist2 < settings.weld_epsilon) & unclaimed] = i

        if i % step == 0:
            yield i / n
            token.raise_if_cancelled()

    merged = n - canonical_count(remap)
    if merged:
        logging.info(f"Welded {merged} duplicate vertices ({n} -> {n - merged})")
    return remap


def weld_vertices(vertices: np.ndarray, settings: EngineSettings = DEFAULT_SETTINGS) -> np.ndarray:
    """Eager version of ``weld_steps``."""
    return drain(weld_steps(vertices, CancellationToken(), settings))


def canonical_count(remap: np.ndarray) -> int:
    """Number of distinct vertices after welding."""
    return int(np.count_nonzero(remap == np.arange(len(remap))))
