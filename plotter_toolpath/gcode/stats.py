"""Stats estimator -- measure a program without writing it.

Runs the same planning pipeline and the same per-point transform as the
emitter (``machine_polyline``), then accumulates instead of formatting:

* ``path_count``     -- number of cut moves (drawn segments)
* ``total_length``   -- drawn length in machine coordinates, mm
* ``travel_length``  -- pen-up XY travel from machine (0, 0) between
  strokes, plus ``2 * |z_up - z_down|`` per pen lift, mm

Multi-layer stats are the sum of per-layer stats; every layer starts
from machine (0, 0).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from plotter_toolpath.configs.loader import ToolpathConfig
from plotter_toolpath.gcode.generator import GCodeError, ToolpathError, machine_polyline
from plotter_toolpath.logging_config import log_context
from plotter_toolpath.model.paths import Point, distance
from plotter_toolpath.model.vector_model import VectorModel
from plotter_toolpath.planning.chains import PlanningError
from plotter_toolpath.planning.pipeline import plan_toolpath

logger = logging.getLogger(__name__)

MACHINE_HOME: Point = (0.0, 0.0)


@dataclass(frozen=True)
class ToolpathStats:
    """Summary of a planned program."""

    path_count: int = 0
    total_length: float = 0.0
    travel_length: float = 0.0

    def __add__(self, other: ToolpathStats) -> ToolpathStats:
        if not isinstance(other, ToolpathStats):
            return NotImplemented
        return ToolpathStats(
            path_count=self.path_count + other.path_count,
            total_length=self.total_length + other.total_length,
            travel_length=self.travel_length + other.travel_length,
        )

    def estimated_seconds(self, feed_rate: float, travel_rate: float) -> int:
        """Rough duration: drawn length at feed rate plus travel at travel rate.

        Rates are mm/min.  Acceleration is ignored.
        """
        minutes = self.total_length / feed_rate + self.travel_length / travel_rate
        return round(minutes * 60.0)

    def to_dict(self) -> dict[str, float]:
        return {
            "pathCount": self.path_count,
            "totalLength": self.total_length,
            "travelLength": self.travel_length,
        }


def _model_stats(model: VectorModel, config: ToolpathConfig) -> ToolpathStats:
    plan = plan_toolpath(model, config.planning, config.home_on_canvas)
    lift = config.z_states.lift_penalty_mm

    segments = 0
    drawn = 0.0
    travel = 0.0
    pos = MACHINE_HOME

    for index, oc in enumerate(plan.ordered):
        try:
            pts = machine_polyline(oc, config)
        except (GCodeError, ValueError, ArithmeticError) as exc:
            logger.warning("Skipping chain %d in stats: %s", index, exc)
            continue
        if not pts:
            continue

        travel += distance(pos, pts[0])
        for a, b in zip(pts, pts[1:]):
            drawn += distance(a, b)
        segments += len(pts) - 1
        travel += lift
        pos = pts[-1]

    return ToolpathStats(
        path_count=segments, total_length=drawn, travel_length=travel,
    )


def estimate_stats(model: VectorModel, config: ToolpathConfig) -> ToolpathStats:
    """Stats of the program ``ToolpathExporter.export`` would write.

    Raises
    ------
    ToolpathError
        If planning fails.
    """
    try:
        stats = _model_stats(model, config)
    except Exception as exc:
        logger.error("Stats estimation failed: %s", exc)
        raise ToolpathError(f"toolpath stats failed: {exc}") from exc
    logger.debug(
        "Stats: %d segments, %.1f mm drawn, %.1f mm travel",
        stats.path_count, stats.total_length, stats.travel_length,
    )
    return stats


def estimate_layer_stats(
    layers: Mapping[str, VectorModel],
    config: ToolpathConfig,
) -> ToolpathStats:
    """Sum of per-layer stats, matching ``ToolpathExporter.export_layers``.

    A layer whose planning fails is logged and counted as empty, the same
    way the exporter leaves it empty.

    Raises
    ------
    ToolpathError
        On any other failure.
    """
    total = ToolpathStats()
    try:
        for name, model in layers.items():
            with log_context(layer=name):
                try:
                    stats = _model_stats(model, config)
                except (PlanningError, ValueError) as exc:
                    logger.error("Skipping layer %s in stats: %s", name, exc)
                    continue
                total = total + stats
    except Exception as exc:
        logger.error("Multi-layer stats estimation failed: %s", exc)
        raise ToolpathError(f"toolpath stats failed: {exc}") from exc
    return total
