"""Orphan collection -- paths that belong to no chain.

Upstream hatch generators emit fields of disjoint segments on purpose;
each of them must be drawn as its own pen-down stroke.  Chain discovery
leaves such isolated paths out, so this module walks the flattened model
and wraps every drawable path not referenced by any chain link into a
single-link chain flagged ``orphan=True``.

Together, chains and orphans cover every drawable path of the model
exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from plotter_toolpath.model.vector_model import FlatPath, Route
from plotter_toolpath.planning.chains import Chain, Link, PlanningError

logger = logging.getLogger(__name__)


def claimed_routes(chains: Iterable[Chain]) -> set[Route]:
    """Routes referenced by the links of *chains*.

    Raises
    ------
    PlanningError
        If a route is referenced twice.
    """
    routes: set[Route] = set()
    for chain in chains:
        for route in chain.routes:
            if route in routes:
                raise PlanningError(
                    f"Path {'/'.join(route)} is claimed by more than one link"
                )
            routes.add(route)
    return routes


def collect_orphans(
    paths: Sequence[FlatPath],
    chains: Iterable[Chain],
) -> list[Chain]:
    """Wrap every unclaimed drawable path into a single-link chain.

    Parameters
    ----------
    paths : Sequence[FlatPath]
        The flattened model (absolute coordinates).
    chains : Iterable[Chain]
        Chains from discovery, before or after consolidation.

    Returns
    -------
    list[Chain]
        One orphan chain per unclaimed path, in flattening order.

    Raises
    ------
    PlanningError
        If a chain claims a path twice or references a path that is not
        part of the model.
    """
    claimed = claimed_routes(chains)
    known: set[Route] = set()
    orphans: list[Chain] = []

    for fp in paths:
        known.add(fp.route)
        if fp.route in claimed:
            continue
        if not fp.path.length > 0:
            continue
        orphans.append(
            Chain(
                links=(Link(route=fp.route, path=fp.path),),
                endless=fp.path.is_closed,
                orphan=True,
            )
        )

    unknown = claimed - known
    if unknown:
        route = sorted(unknown)[0]
        raise PlanningError(
            f"Chain references path {'/'.join(route)} which is not in the model"
        )

    logger.debug("Collected %d orphan paths", len(orphans))
    return orphans
