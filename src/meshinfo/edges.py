"""Edge bookkeeping for boundary extraction and closure checks."""

from collections import Counter
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .progress import CancellationToken, PassSteps, drain
from .settings import DEFAULT_SETTINGS, EngineSettings

Edge = Tuple[int, int]


def canonical_edge(a: int, b: int) -> Edge:
    """Order the endpoints so (a, b) and (b, a) give the same key."""
    a = int(a)
    b = int(b)
    return (a, b) if a < b else (b, a)


class EdgeLedger:
    """
    Tracks undirected edges either by presence parity or by incidence count.

    ``toggle`` keeps the set of edges seen an odd number of times, which after
    feeding every triangle edge is exactly the open boundary. For each edge in
    that set it also keeps the directed pair it was last inserted with, i.e.
    the traversal direction of the one triangle that owns the edge.

    ``increment`` keeps a count per edge for the closure check. Edges whose
    endpoints are equal (a triangle collapsed by welding) are ignored by both.
    """

    def __init__(self):
        self._boundary: Dict[Edge, Tuple[int, int]] = {}
        self.counts: Counter = Counter()

    def toggle(self, a: int, b: int):
        if a == b:
            return
        edge = canonical_edge(a, b)
        if edge in self._boundary:
            del self._boundary[edge]
        else:
            self._boundary[edge] = (int(a), int(b))

    def increment(self, a: int, b: int):
        if a == b:
            return
        self.counts[canonical_edge(a, b)] += 1

    def add_triangle_boundary(self, i0: int, i1: int, i2: int):
        self.toggle(i0, i1)
        self.toggle(i1, i2)
        self.toggle(i2, i0)

    def add_triangle_counts(self, i0: int, i1: int, i2: int):
        self.increment(i0, i1)
        self.increment(i1, i2)
        self.increment(i2, i0)

    def boundary_edges(self) -> List[Edge]:
        return list(self._boundary)

    def boundary_direction(self, edge: Edge) -> Tuple[int, int]:
        """Directed (from, to) pair of the triangle owning a boundary edge."""
        return self._boundary[canonical_edge(*edge)]

    def odd_edges(self) -> Iterator[Edge]:
        return (edge for edge, count in self.counts.items() if count & 1)

    def is_closed(self) -> bool:
        """True when every counted edge is shared by an even number of triangles."""
        return next(self.odd_edges(), None) is None

    def __len__(self):
        return len(self._boundary)

    def __contains__(self, edge) -> bool:
        return canonical_edge(*edge) in self._boundary


def _faces(triangles, remap):
    faces = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if remap is not None:
        faces = np.asarray(remap)[faces]
    return faces.tolist()


def boundary_steps(triangles, token: CancellationToken, remap: Optional[np.ndarray] = None,
                   settings: EngineSettings = DEFAULT_SETTINGS) -> PassSteps:
    """Toggle every triangle edge into a ledger; the survivors are the open boundary."""
    faces = _faces(triangles, remap)
    total = len(faces)
    ledger = EdgeLedger()
    for i, (i0, i1, i2) in enumerate(faces):
        ledger.add_triangle_boundary(i0, i1, i2)
        if i % settings.scan_step == 0:
            yield i / total
            token.raise_if_cancelled()
    return ledger


def incidence_steps(triangles, token: CancellationToken, remap: Optional[np.ndarray] = None,
                    settings: EngineSettings = DEFAULT_SETTINGS) -> PassSteps:
    """Count how many triangles use each edge."""
    faces = _faces(triangles, remap)
    total = len(faces)
    ledger = EdgeLedger()
    for i, (i0, i1, i2) in enumerate(faces):
        ledger.add_triangle_counts(i0, i1, i2)
        if i % settings.scan_step == 0:
            yield i / total
            token.raise_if_cancelled()
    return ledger


def find_boundary(triangles, remap=None) -> EdgeLedger:
    return drain(boundary_steps(triangles, CancellationToken(), remap))


def count_edges(triangles, remap=None) -> EdgeLedger:
    return drain(incidence_steps(triangles, CancellationToken(), remap))
