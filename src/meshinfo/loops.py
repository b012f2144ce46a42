"""Assemble open boundary edges into closed vertex loops."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .edges import Edge, EdgeLedger


@dataclass
class LoopSet:
    """Boundary loops plus whatever could not be threaded into one.

    Attributes:
        loops: Closed cycles of vertex indices, one per hole
        irregular_vertices: Boundary vertices whose boundary degree is not 2
        skipped_chains: Boundary chains abandoned because they reach an irregular vertex
    """
    loops: List[List[int]] = field(default_factory=list)
    irregular_vertices: List[int] = field(default_factory=list)
    skipped_chains: int = 0

    def __len__(self):
        return len(self.loops)

    def __iter__(self):
        return iter(self.loops)


def boundary_adjacency(edges: Iterable[Edge]) -> Dict[int, List[int]]:
    adjacency = defaultdict(list)
    for a, b in edges:
        adjacency[a].append(b)
        adjacency[b].append(a)
    return adjacency


def build_loops(edges: Iterable[Edge]) -> LoopSet:
    """
    Thread boundary edges into loops.

    Every boundary vertex of a simple hole has exactly two boundary
    neighbours, so following neighbours from any vertex walks around the
    hole and comes back to the start. Vertices with any other degree (a
    pinch point shared by two holes, a dangling edge) break that walk. Any
    chain touching such a vertex is skipped as a whole and reported instead
    of being stitched into a wrong loop.

    Args:
        edges: Canonical boundary edges

    Returns:
        LoopSet; every regular boundary vertex ends up in exactly one loop or one skipped chain
    """
    adjacency = boundary_adjacency(sorted(edges))
    result = LoopSet()
    result.irregular_vertices = [v for v, nbrs in adjacency.items() if len(nbrs) != 2]
    visited = set(result.irregular_vertices)

    for start, nbrs in adjacency.items():
        if start in visited:
            continue
        loop = [start]
        visited.add(start)
        prev, cur = start, nbrs[0]
        closed = False
        while True:
            if cur == start:
                closed = True
                break
            if cur in visited:
                # Irregular vertex, or a chain already consumed from its other end
                break
            visited.add(cur)
            loop.append(cur)
            a, b = adjacency[cur]
            prev, cur = cur, (b if a == prev else a)

        if closed and len(loop) >= 3:
            result.loops.append(loop)
            continue

        # Walk the other way so the whole chain is marked and not revisited
        prev, cur = start, nbrs[1]
        while cur not in visited:
            visited.add(cur)
            a, b = adjacency[cur]
            prev, cur = cur, (b if a == prev else a)
        result.skipped_chains += 1

    if result.irregular_vertices:
        logging.warning(
            f"Boundary has {len(result.irregular_vertices)} non-manifold vertices; "
            f"skipped {result.skipped_chains} boundary chain(s)"
        )
    return result


def orient_loop(loop: List[int], ledger: EdgeLedger) -> List[int]:
    """
    Order a loop so a fill along it is wound like the surrounding surface.

    The triangle owning edge (u, v) traverses it in one direction; the fill
    triangle must traverse it the other way.
    """
    if len(loop) < 2:
        return loop
    u, v = loop[0], loop[1]
    if ledger.boundary_direction((u, v)) == (u, v):
        return [loop[0]] + loop[:0:-1]
    return loop
