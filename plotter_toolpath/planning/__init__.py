"""
Toolpath planning module.

Turns a flattened drawing into ordered strokes: chain discovery,
consolidation, orphan collection, parallel-field detection and ordering.
Chains are immutable; traversal direction travels separately as
``OptimizedChain.reverse``.
"""

from plotter_toolpath.planning.chains import (
    Chain,
    Link,
    OptimizedChain,
    PlanningError,
    find_chains,
)
from plotter_toolpath.planning.consolidate import consolidate_chains
from plotter_toolpath.planning.orphans import collect_orphans
from plotter_toolpath.planning.ordering import (
    nearest_neighbor_order,
    optimize_order,
    order_chains,
    serpentine_order,
)
from plotter_toolpath.planning.parallel import ParallelGroup, detect_parallel_groups
from plotter_toolpath.planning.pipeline import ToolpathPlan, plan_toolpath

__all__ = [
    "Chain",
    "Link",
    "OptimizedChain",
    "ParallelGroup",
    "PlanningError",
    "ToolpathPlan",
    "collect_orphans",
    "consolidate_chains",
    "detect_parallel_groups",
    "find_chains",
    "nearest_neighbor_order",
    "optimize_order",
    "order_chains",
    "plan_toolpath",
    "serpentine_order",
]
