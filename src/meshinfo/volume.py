"""Enclosed volume by the divergence theorem."""

from typing import Optional

import numpy as np

from .progress import CancellationToken, PassSteps, drain
from .settings import DEFAULT_SETTINGS, EngineSettings


def signed_volume_steps(vertices: np.ndarray, triangles: np.ndarray, token: CancellationToken,
                        remap: Optional[np.ndarray] = None,
                        settings: EngineSettings = DEFAULT_SETTINGS) -> PassSteps:
    """
    Sum the signed tetrahedra spanned by the origin and every triangle.

    Positions are read through the weld map when one is given and the sum is
    kept in float64 whatever the vertex dtype. The result is only meaningful
    for a closed, consistently wound mesh; it is positive when the triangles
    wind counter-clockwise seen from outside.

    Returns:
        Signed volume
    """
    points = np.asarray(vertices, dtype=np.float64)
    faces = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if remap is not None:
        faces = np.asarray(remap)[faces]
    total = len(faces)
    step = settings.volume_step
    acc = 0.0

    for start in range(0, total, step):
        chunk = faces[start:start + step]
        p0 = points[chunk[:, 0]]
        p1 = points[chunk[:, 1]]
        p2 = points[chunk[:, 2]]
        acc += float(np.einsum("ij,ij->", p0, np.cross(p1, p2)))
        yield (start + len(chunk)) / total
        token.raise_if_cancelled()

    return acc / 6.0


def volume_steps(vertices: np.ndarray, triangles: np.ndarray, token: CancellationToken,
                 remap: Optional[np.ndarray] = None,
                 settings: EngineSettings = DEFAULT_SETTINGS) -> PassSteps:
    """Like ``signed_volume_steps`` but returns the absolute value, so winding does not matter."""
    signed = yield from signed_volume_steps(vertices, triangles, token, remap, settings)
    return abs(signed)


def signed_volume(vertices, triangles, remap=None, settings: EngineSettings = DEFAULT_SETTINGS) -> float:
    return drain(signed_volume_steps(vertices, triangles, CancellationToken(), remap, settings))


def mesh_volume(vertices, triangles, remap=None, settings: EngineSettings = DEFAULT_SETTINGS) -> float:
    return abs(signed_volume(vertices, triangles, remap, settings))
