"""Chain consolidation -- merge open chains that meet end-to-end.

Discovery stops strokes at junctions (nodes where three or more paths
meet), which leaves many short chains that could be drawn in one pen-down
pass.  The consolidator glues them back together greedily:

    for each unclaimed open chain, in input order:
        while some unclaimed open chain starts or ends within tolerance
        of the current end point (first such chain in input order):
            append its links (reversed when it matched at its end)

Endless chains pass through untouched, at their input position.  The
result is order-dependent but deterministic, and every input link ends up
in exactly one output chain.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from plotter_toolpath.model.paths import distance
from plotter_toolpath.planning.chains import DEFAULT_TOLERANCE_MM, Chain, Link

logger = logging.getLogger(__name__)


def _find_continuation(
    chains: Sequence[Chain],
    claimed: list[bool],
    end: tuple[float, float],
    tolerance: float,
) -> tuple[int, bool] | None:
    """First unclaimed open chain touching *end*: ``(index, needs_reverse)``."""
    for j, candidate in enumerate(chains):
        if claimed[j] or candidate.endless:
            continue
        if distance(candidate.start_point, end) <= tolerance:
            return j, False
        if distance(candidate.end_point, end) <= tolerance:
            return j, True
    return None


def consolidate_chains(
    chains: Sequence[Chain],
    tolerance: float = DEFAULT_TOLERANCE_MM,
) -> list[Chain]:
    """Merge open chains connected end-to-end within *tolerance*.

    Parameters
    ----------
    chains : Sequence[Chain]
        Discovered chains.  Not modified.
    tolerance : float
        Maximum end-to-start distance (mm) treated as connected.

    Returns
    -------
    list[Chain]
        Consolidated chains.  Chains that took part in no merge are
        returned as the very same objects.
    """
    claimed = [False] * len(chains)
    result: list[Chain] = []
    merges = 0

    for i, chain in enumerate(chains):
        if claimed[i]:
            continue
        claimed[i] = True
        if chain.endless:
            result.append(chain)
            continue

        links: list[Link] = list(chain.links)
        end = chain.end_point
        merged = False

        while True:
            match = _find_continuation(chains, claimed, end, tolerance)
            if match is None:
                break
            j, needs_reverse = match
            claimed[j] = True
            nxt = chains[j].reversed_chain() if needs_reverse else chains[j]
            links.extend(nxt.links)
            end = nxt.end_point
            merged = True
            merges += 1

        result.append(Chain(links=tuple(links)) if merged else chain)

    if merges:
        logger.debug(
            "Consolidated %d chains into %d (%d merges)",
            len(chains), len(result), merges,
        )
    return result
