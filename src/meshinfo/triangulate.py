"""Ear-clipping triangulation of boundary loops."""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .progress import CancellationToken, PassSteps, drain
from .settings import DEFAULT_SETTINGS, EngineSettings

# sin^2 of the smallest corner angle a triangle may have before it counts as degenerate
_DEGENERATE_SIN2 = 1e-12


def newell_normal(points: np.ndarray) -> np.ndarray:
    """Area-weighted normal of a closed polygon; its direction follows the vertex order."""
    centered = points - points.mean(axis=0)
    return np.cross(centered, np.roll(centered, -1, axis=0)).sum(axis=0)


def polygon_area(points: np.ndarray) -> float:
    """Area of a planar polygon given in order, in 3D."""
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 3:
        return 0.0
    return 0.5 * float(np.linalg.norm(newell_normal(points)))


def triangle_areas(vertices: np.ndarray, triangles: Sequence[int]) -> np.ndarray:
    faces = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    v = np.asarray(vertices, dtype=np.float64)
    cross = np.cross(v[faces[:, 1]] - v[faces[:, 0]], v[faces[:, 2]] - v[faces[:, 0]])
    return 0.5 * np.linalg.norm(cross, axis=1)


def is_convex(a, b, c, normal, epsilon: float) -> bool:
    """Corner b turns the same way as the polygon and is not (nearly) straight."""
    cross = np.cross(b - a, c - b)
    return float(cross @ cross) > epsilon and float(cross @ normal) > 0.0


def points_in_triangle(points: np.ndarray, a, b, c) -> Optional[np.ndarray]:
    """
    Barycentric containment test, boundary included.

    Returns:
        Boolean mask over ``points``, or None when the triangle is degenerate
        and the barycentric system has no solution
    """
    u = b - a
    v = c - a
    d00 = float(u @ u)
    d01 = float(u @ v)
    d11 = float(v @ v)
    denom = d00 * d11 - d01 * d01
    if denom <= _DEGENERATE_SIN2 * d00 * d11 or denom <= 0.0:
        return None
    w = points - a
    d20 = w @ u
    d21 = w @ v
    s = (d11 * d20 - d01 * d21) / denom
    t = (d00 * d21 - d01 * d20) / denom
    return (s >= 0.0) & (t >= 0.0) & (s + t <= 1.0)


def find_ear(points: np.ndarray, normal: np.ndarray, epsilon: float) -> Optional[int]:
    """Position of the first clippable corner of the polygon ``points``, or None."""
    m = len(points)
    for i in range(m):
        prev_i, next_i = (i - 1) % m, (i + 1) % m
        a, b, c = points[prev_i], points[i], points[next_i]
        if not is_convex(a, b, c, normal, epsilon):
            continue
        others = np.delete(points, [prev_i, i, next_i], axis=0)
        inside = points_in_triangle(others, a, b, c)
        if inside is None or inside.any():
            continue
        return i
    return None


def ear_clip_steps(vertices: np.ndarray, loop: Sequence[int], token: CancellationToken,
                   settings: EngineSettings = DEFAULT_SETTINGS) -> PassSteps:
    """
    Triangulate one boundary loop by clipping ears.

    Only existing vertices are referenced. Triangles follow the loop order, so
    a loop oriented with ``orient_loop`` yields a consistently wound fill.

    Args:
        vertices: (N, 3) positions of the whole mesh
        loop: Vertex indices of the hole, in order
        token: Checked each time the pass is resumed
        settings: Supplies the convexity epsilon and the checkpoint size

    Returns:
        Flat list of 3 * k indices. k is len(loop) - 2 for a simple loop and
        smaller when the loop stops offering ears (the hole is then only
        partially filled).
    """
    n = len(loop)
    if n < 3:
        return []
    loop = [int(i) for i in loop]
    points = np.asarray(vertices, dtype=np.float64)[loop]
    normal = newell_normal(points)
    remaining = list(range(n))
    triangles: List[int] = []
    expected = n - 2

    while len(remaining) > 3:
        ear = find_ear(points[remaining], normal, settings.convexity_epsilon)
        if ear is None:
            logging.warning(
                f"No ear left in a {n}-vertex loop after {len(triangles) // 3} of {expected} triangles"
            )
            return triangles
        m = len(remaining)
        a, b, c = remaining[ear - 1], remaining[ear], remaining[(ear + 1) % m]
        triangles.extend((loop[a], loop[b], loop[c]))
        del remaining[ear]

        clipped = len(triangles) // 3
        if clipped % settings.clip_step == 0:
            yield clipped / expected
            token.raise_if_cancelled()

    a, b, c = points[remaining]
    cross = np.cross(b - a, c - b)
    if float(cross @ cross) > settings.convexity_epsilon:
        triangles.extend(loop[i] for i in remaining)
    else:
        logging.warning(f"Final triangle of a {n}-vertex loop is degenerate, left open")
    return triangles


def triangulate_loop(vertices: np.ndarray, loop: Sequence[int],
                     settings: EngineSettings = DEFAULT_SETTINGS) -> List[int]:
    """Eager version of ``ear_clip_steps``."""
    return drain(ear_clip_steps(vertices, loop, CancellationToken(), settings))
