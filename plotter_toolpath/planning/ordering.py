"""Path order optimisation -- reduce pen-up travel between strokes.

Two strategies, neither globally optimal:

* **Serpentine** for detected parallel fields: members keep their sorted
  order and the drawing direction alternates from one member to the next
  (boustrophedon).
* **Greedy nearest neighbour** for everything else: from the current pen
  position, pick the closest viable endpoint among all remaining chains
  (start or end of an open chain, start of an endless one), draw that
  chain from there, continue from its far end.  Ties go to the first
  candidate in input order, start before end.  O(n²) in chain count.

The optimizer never touches chain geometry; it returns
``OptimizedChain(chain, reverse)`` pairs.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from plotter_toolpath.model.paths import Point
from plotter_toolpath.planning.chains import Chain, OptimizedChain
from plotter_toolpath.planning.parallel import ParallelGroup, detect_parallel_groups

DEFAULT_START: Point = (0.0, 0.0)
"""Pen position (drawing coordinates) used when the caller gives none."""


def nearest_neighbor_order(
    chains: Sequence[Chain],
    start: Point = DEFAULT_START,
) -> list[OptimizedChain]:
    """Greedy nearest-neighbour tour over *chains*.

    Parameters
    ----------
    chains : Sequence[Chain]
        Chains to order.
    start : Point
        Pen position before the first chain, in drawing coordinates.
        Exports pass the drawing point that lands on machine (0, 0).

    Returns
    -------
    list[OptimizedChain]
        Every chain exactly once.
    """
    if len(chains) <= 1:
        return [OptimizedChain(chain) for chain in chains]

    n = len(chains)
    # candidates[i] = (start_i, end_i); endless chains have no end candidate
    starts = np.array([c.start_point for c in chains], dtype=float)
    ends = np.array([c.end_point for c in chains], dtype=float)
    no_end = np.array([c.endless for c in chains])

    alive = np.ones(n, dtype=bool)
    pos = np.array(start, dtype=float)
    ordered: list[OptimizedChain] = []

    for _ in range(n):
        d = np.empty((n, 2))
        d[:, 0] = np.hypot(starts[:, 0] - pos[0], starts[:, 1] - pos[1])
        d[:, 1] = np.hypot(ends[:, 0] - pos[0], ends[:, 1] - pos[1])
        d[no_end, 1] = np.inf
        d[~alive] = np.inf

        flat = int(np.argmin(d))
        i, reverse = divmod(flat, 2)
        alive[i] = False

        oc = OptimizedChain(chain=chains[i], reverse=bool(reverse))
        ordered.append(oc)
        pos = np.array(oc.exit_point, dtype=float)

    return ordered


def serpentine_order(group: ParallelGroup) -> list[OptimizedChain]:
    """Boustrophedon traversal of a parallel field.

    Members keep their sorted order; member *k* is drawn reversed for odd
    *k*, so the flags read ``False, True, False, ...`` and neighbours
    always have opposite flags.
    """
    return [
        OptimizedChain(chain=chain, reverse=k % 2 == 1)
        for k, chain in enumerate(group.chains)
    ]


def order_chains(
    groups: Sequence[ParallelGroup],
    rest: Sequence[Chain],
    start: Point = DEFAULT_START,
) -> list[OptimizedChain]:
    """Order parallel fields first, then the remaining chains.

    Without groups this is a plain nearest-neighbour tour from *start*.
    With groups, each field is traversed as a serpentine in detection
    order, and the remaining chains follow as a nearest-neighbour tour
    starting where the last field ended.
    """
    if not groups:
        return nearest_neighbor_order(rest, start)

    ordered: list[OptimizedChain] = []
    for group in groups:
        ordered.extend(serpentine_order(group))
    ordered.extend(nearest_neighbor_order(rest, ordered[-1].exit_point))
    return ordered


def optimize_order(
    chains: Sequence[Chain],
    start: Point = DEFAULT_START,
) -> list[OptimizedChain]:
    """Detect parallel fields among *chains* and order everything."""
    groups, rest = detect_parallel_groups(chains)
    return order_chains(groups, rest, start)
