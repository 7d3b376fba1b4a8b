"""Chains -- connected strokes discovered in a flattened drawing.

A *Link* is one walked path together with its walk direction.  A *Chain*
is an ordered tuple of links forming one continuous stroke; an *endless*
chain is a closed loop whose start and end coincide.  An *orphan* is a
single-link chain for a path that touches no other path.

All three types are frozen.  Planning never edits a chain in place: the
consolidator builds new chains out of existing links, and the optimizer
threads traversal direction separately as ``OptimizedChain.reverse``.

Discovery
---------
``find_chains()`` groups path endpoints that lie within ``tolerance`` of
each other into nodes, then walks strokes through every node of degree
two.  Walks start at nodes of any other degree (free ends, junctions);
whatever is left afterwards lies on pure cycles and becomes endless
chains.  Isolated open paths are skipped here and picked up by the
orphan collector.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree

from plotter_toolpath.model.paths import DEFAULT_MAX_FACET_MM, Path, Point, distance
from plotter_toolpath.model.vector_model import FlatPath, Route

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_MM = 0.01


class PlanningError(Exception):
    """Raised when a planning invariant is violated."""

    pass


# ---------------------------------------------------------------------------
# Link / Chain / OptimizedChain
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Link:
    """One path walked in a given direction.

    Parameters
    ----------
    route : Route
        Identity of the path in the model tree.
    path : Path
        The path in absolute coordinates.
    reversed : bool
        ``True`` when the path is walked from its end point to its start.
    """

    route: Route
    path: Path
    reversed: bool = False

    @property
    def start(self) -> Point:
        return self.path.end_point if self.reversed else self.path.start_point

    @property
    def end(self) -> Point:
        return self.path.start_point if self.reversed else self.path.end_point

    def flipped(self) -> Link:
        return Link(route=self.route, path=self.path, reversed=not self.reversed)

    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        pts = self.path.key_points(max_facet)
        if self.reversed:
            pts.reverse()
        return pts


@dataclass(frozen=True, slots=True)
class Chain:
    """Ordered links forming one continuous stroke.

    Parameters
    ----------
    links : tuple[Link, ...]
        At least one link.
    endless : bool
        Closed loop with no distinct start/end.
    orphan : bool
        Single isolated path wrapped by the orphan collector.
    """

    links: tuple[Link, ...]
    endless: bool = False
    orphan: bool = False

    def __post_init__(self) -> None:
        if not self.links:
            raise ValueError("Chain requires at least one link")

    @property
    def start_point(self) -> Point:
        return self.links[0].start

    @property
    def end_point(self) -> Point:
        if self.endless:
            return self.start_point
        return self.links[-1].end

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(link.route for link in self.links)

    @property
    def length(self) -> float:
        return sum(link.path.length for link in self.links)

    def reversed_chain(self) -> Chain:
        """Same stroke walked the other way (links flipped, order reversed)."""
        return Chain(
            links=tuple(link.flipped() for link in reversed(self.links)),
            endless=self.endless,
            orphan=self.orphan,
        )

    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        """Polyline through the whole chain in walk order.

        The first point of every link after the first is dropped: it
        coincides (within the join tolerance) with the previous link end.
        """
        points: list[Point] = []
        for i, link in enumerate(self.links):
            pts = link.key_points(max_facet)
            points.extend(pts if i == 0 else pts[1:])
        return points


@dataclass(frozen=True, slots=True)
class OptimizedChain:
    """A chain plus the traversal direction chosen by the optimizer."""

    chain: Chain
    reverse: bool = False

    @property
    def entry_point(self) -> Point:
        return self.chain.end_point if self.reverse else self.chain.start_point

    @property
    def exit_point(self) -> Point:
        return self.chain.start_point if self.reverse else self.chain.end_point

    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        pts = self.chain.key_points(max_facet)
        if self.reverse:
            pts.reverse()
        return pts


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def _cluster_endpoints(points: np.ndarray, tolerance: float) -> np.ndarray:
    """Label each endpoint with a node id; endpoints within tolerance share one.

    Node ids grow with the index of the first endpoint of each node.
    """
    n = len(points)
    tree = cKDTree(points)
    pairs = tree.query_pairs(tolerance, output_type="ndarray")
    graph = coo_matrix(
        (np.ones(len(pairs)), (pairs[:, 0], pairs[:, 1])), shape=(n, n),
    )
    _, labels = connected_components(graph, directed=False)
    return labels


def find_chains(
    paths: Sequence[FlatPath],
    tolerance: float = DEFAULT_TOLERANCE_MM,
) -> list[Chain]:
    """Discover connected strokes among flattened paths.

    Parameters
    ----------
    paths : Sequence[FlatPath]
        Paths in absolute coordinates, in flattening order.
    tolerance : float
        Maximum endpoint distance (mm) treated as the same point.

    Returns
    -------
    list[Chain]
        Chains ordered by the flattening index of their first link.
        Zero-length paths and isolated open paths are not included.
    """
    found: list[tuple[int, Chain]] = []
    open_idx: list[int] = []

    for i, fp in enumerate(paths):
        p = fp.path
        if not p.length > 0:
            logger.debug("Skipping zero-length path %s", "/".join(fp.route))
            continue
        if p.is_closed or distance(p.start_point, p.end_point) <= tolerance:
            found.append((i, Chain(links=(Link(fp.route, p),), endless=True)))
            continue
        open_idx.append(i)

    if open_idx:
        found.extend(_walk_open_paths(paths, open_idx, tolerance))

    found.sort(key=lambda item: item[0])
    return [chain for _, chain in found]


def _walk_open_paths(
    paths: Sequence[FlatPath],
    open_idx: list[int],
    tolerance: float,
) -> list[tuple[int, Chain]]:
    n = len(open_idx)
    coords = np.empty((2 * n, 2), dtype=float)
    for k, i in enumerate(open_idx):
        coords[2 * k] = paths[i].path.start_point
        coords[2 * k + 1] = paths[i].path.end_point

    node_of = _cluster_endpoints(coords, tolerance)

    # node -> [(k, end)] in endpoint order; end 0 = start, 1 = end
    incident: dict[int, list[tuple[int, int]]] = {}
    for e, node in enumerate(node_of):
        incident.setdefault(int(node), []).append((e // 2, e % 2))

    visited = [False] * n

    def walk(k: int, entry: int) -> list[Link]:
        links: list[Link] = []
        while True:
            visited[k] = True
            fp = paths[open_idx[k]]
            links.append(Link(route=fp.route, path=fp.path, reversed=entry == 1))
            exit_end = 1 - entry
            inc = incident[int(node_of[2 * k + exit_end])]
            if len(inc) != 2:
                return links
            nk, nentry = inc[0] if inc[1] == (k, exit_end) else inc[1]
            if visited[nk]:
                return links
            k, entry = nk, nentry

    result: list[tuple[int, Chain]] = []

    for node in sorted(incident):
        ends = incident[node]
        if len(ends) == 2:
            continue
        for k, entry in ends:
            if visited[k]:
                continue
            links = walk(k, entry)
            isolated = (
                len(links) == 1
                and len(incident[int(node_of[2 * k])]) == 1
                and len(incident[int(node_of[2 * k + 1])]) == 1
            )
            if isolated:
                continue
            result.append((open_idx[k], Chain(links=tuple(links))))

    for k in range(n):
        if visited[k]:
            continue
        links = walk(k, 0)
        result.append((open_idx[k], Chain(links=tuple(links), endless=True)))

    logger.debug(
        "Discovered %d chains from %d open paths", len(result), n,
    )
    return result
