"""Planning pipeline -- from a vector model to an ordered stroke list.

    flatten origins → discover chains → consolidate → collect orphans
        → detect parallel fields → order

With ``optimize_paths`` off, consolidation, detection and ordering are
skipped: chains are drawn in discovery order followed by the orphans,
all in their stored direction.

The emitter and the stats estimator both consume the same
``ToolpathPlan``, so a stats estimate always describes the program an
export would produce.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from plotter_toolpath.configs.loader import PlanningConfig
from plotter_toolpath.model.paths import Point
from plotter_toolpath.model.vector_model import VectorModel, flatten
from plotter_toolpath.planning.chains import OptimizedChain, find_chains
from plotter_toolpath.planning.consolidate import consolidate_chains
from plotter_toolpath.planning.orphans import collect_orphans
from plotter_toolpath.planning.ordering import DEFAULT_START, order_chains
from plotter_toolpath.planning.parallel import detect_parallel_groups

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolpathPlan:
    """Ordered strokes of one model plus planning counters."""

    ordered: tuple[OptimizedChain, ...]
    chain_count: int
    orphan_count: int
    group_count: int = 0

    def __len__(self) -> int:
        return len(self.ordered)


def plan_toolpath(
    model: VectorModel,
    planning: PlanningConfig,
    start: Point = DEFAULT_START,
) -> ToolpathPlan:
    """Run the planning pipeline on *model*.

    Parameters
    ----------
    model : VectorModel
        Drawing with nested local origins; flattened here.
    planning : PlanningConfig
        Tolerances and the ``optimize_paths`` switch.
    start : Point
        Pen position before the first stroke, in drawing coordinates.
        Exports pass ``ToolpathConfig.home_on_canvas``.

    Returns
    -------
    ToolpathPlan
        Every drawable path of the model appears in exactly one stroke.

    Raises
    ------
    PlanningError
        If chain bookkeeping breaks (a path claimed twice).
    """
    tolerance = planning.join_tolerance_mm
    paths = flatten(model)

    chains = find_chains(paths, tolerance)
    logger.info("Found %d path chains in %d paths", len(chains), len(paths))

    if planning.optimize_paths:
        chains = consolidate_chains(chains, tolerance)

    orphans = collect_orphans(paths, chains)
    if orphans:
        logger.info("Collected %d orphan paths", len(orphans))

    strokes = chains + orphans

    if not planning.optimize_paths:
        ordered = tuple(OptimizedChain(chain) for chain in strokes)
        return ToolpathPlan(
            ordered=ordered,
            chain_count=len(chains),
            orphan_count=len(orphans),
        )

    groups, rest = detect_parallel_groups(strokes)
    ordered = tuple(order_chains(groups, rest, start))
    logger.info(
        "Optimized order of %d strokes (%d parallel groups)",
        len(ordered), len(groups),
    )
    return ToolpathPlan(
        ordered=ordered,
        chain_count=len(chains),
        orphan_count=len(orphans),
        group_count=len(groups),
    )
