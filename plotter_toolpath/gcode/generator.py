"""G-code generator -- planned strokes to program text.

All coordinate transforms (origin translation, Y flip, axis swap, axis
inversion) are applied **here**, per point, through
``ToolpathConfig.canvas_to_machine()``.  The planner works in drawing
coordinates only.

Per stroke the emitter writes::

    G0 X.. Y.. F<travel>      travel to the first point (tool up)
    G1 Z<down> F<feed>        lower the tool
    G4 P..                    optional dwell
    G1 X.. Y..                one cut per remaining point
    G0 Z<up>                  raise the tool

Header, footer and the spelling of each command come from the dialect
profile (``postprocessors``).  Feed rates are mm/min and are written
unchanged.

Failure handling:
    A stroke that cannot be emitted (non-finite coordinates) is logged
    and skipped; the rest of the program is still written.  Any other
    failure aborts the export with ``ToolpathError``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

from plotter_toolpath.configs.loader import ToolpathConfig
from plotter_toolpath.gcode.postprocessors import PostProcessor, get_post_processor
from plotter_toolpath.logging_config import log_context
from plotter_toolpath.model.paths import Point, distance
from plotter_toolpath.model.vector_model import VectorModel
from plotter_toolpath.planning.chains import OptimizedChain, PlanningError
from plotter_toolpath.planning.pipeline import ToolpathPlan, plan_toolpath

logger = logging.getLogger(__name__)

CLOSE_LOOP_EPS_MM = 0.001


class GCodeError(Exception):
    """Raised when a stroke cannot be turned into G-code."""

    pass


class ToolpathError(Exception):
    """Raised when a whole export or estimate fails."""

    pass


# ---------------------------------------------------------------------------
# Point pipeline (shared with the stats estimator)
# ---------------------------------------------------------------------------


def machine_polyline(oc: OptimizedChain, config: ToolpathConfig) -> list[Point]:
    """Key points of a planned stroke in machine coordinates.

    The chain is faceted, reversed if the optimizer asked for it,
    transformed point by point, and -- for endless chains -- closed by
    repeating the first point when the loop does not already close.

    Returns
    -------
    list[Point]
        Empty if the stroke has fewer than two points.

    Raises
    ------
    GCodeError
        If a transformed coordinate is not finite.
    """
    raw = oc.key_points(config.planning.max_arc_facet_mm)
    if len(raw) < 2:
        return []

    pts = [config.canvas_to_machine(x, y) for x, y in raw]
    for mx, my in pts:
        if not (math.isfinite(mx) and math.isfinite(my)):
            raise GCodeError(
                f"Non-finite coordinate X={mx} Y={my} in path "
                f"{'/'.join(oc.chain.links[0].route)}"
            )

    if oc.chain.endless and distance(pts[0], pts[-1]) > CLOSE_LOOP_EPS_MM:
        pts.append(pts[0])
    return pts


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class ToolpathExporter:
    """Turn vector models into G-code programs.

    Parameters
    ----------
    config : ToolpathConfig
        Validated export configuration; selects the dialect.
    """

    def __init__(self, config: ToolpathConfig) -> None:
        self._cfg = config
        self._post: PostProcessor = get_post_processor(config.dialect)

    @property
    def post_processor(self) -> PostProcessor:
        return self._post

    @property
    def file_extension(self) -> str:
        return self._post.extension

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def export(self, model: VectorModel) -> str:
        """Generate a complete program for one model.

        Returns
        -------
        str
            Newline-joined program including header and footer.

        Raises
        ------
        ToolpathError
            If planning or emission fails outside a single stroke.
        """
        try:
            with log_context(dialect=self._post.dialect.value):
                logger.info("Starting export")
                lines = list(self._post.header(self._cfg))
                plan = self._plan(model)
                segments = self._emit_plan(plan, lines)
                lines.extend(self._post.footer(self._cfg))
                logger.info(
                    "Export complete: %d strokes, %d line segments",
                    len(plan), segments,
                )
                return "\n".join(lines)
        except Exception as exc:
            logger.error("Export failed: %s", exc)
            raise ToolpathError(f"toolpath export failed: {exc}") from exc

    def export_layers(self, layers: Mapping[str, VectorModel]) -> str:
        """Generate one program for several named layers.

        Layers share a single header and footer and are emitted in
        mapping order, each introduced by a ``Layer: <name>`` comment.
        A layer whose planning fails is logged and left empty.
        """
        try:
            with log_context(dialect=self._post.dialect.value):
                logger.info("Starting multi-layer export for %d layers", len(layers))
                lines = list(self._post.header(self._cfg))
                for name, model in layers.items():
                    with log_context(layer=name):
                        lines.append(self._post.format_comment(f"Layer: {name}"))
                        try:
                            plan = self._plan(model)
                        except (PlanningError, ValueError) as exc:
                            logger.error("Skipping layer %s: %s", name, exc)
                            continue
                        self._emit_plan(plan, lines)
                lines.extend(self._post.footer(self._cfg))
                logger.info("Multi-layer export complete")
                return "\n".join(lines)
        except Exception as exc:
            logger.error("Multi-layer export failed: %s", exc)
            raise ToolpathError(f"toolpath export failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _plan(self, model: VectorModel) -> ToolpathPlan:
        return plan_toolpath(
            model, self._cfg.planning, self._cfg.home_on_canvas,
        )

    def _emit_plan(self, plan: ToolpathPlan, lines: list[str]) -> int:
        segments = 0
        for index, oc in enumerate(plan.ordered):
            try:
                stroke = self._emit_chain(oc)
            except (GCodeError, ValueError, ArithmeticError) as exc:
                logger.warning("Skipping chain %d: %s", index, exc)
                continue
            if not stroke:
                logger.debug("Chain %d has no drawable points", index)
                continue
            lines.extend(stroke)
            segments += len(stroke) - (4 if self._cfg.dwell_ms > 0 else 3)
        return segments

    def _emit_chain(self, oc: OptimizedChain) -> list[str]:
        """Commands for one stroke; empty list for a degenerate stroke."""
        pts = machine_polyline(oc, self._cfg)
        if not pts:
            return []

        post = self._post
        feeds = self._cfg.feeds
        z = self._cfg.z_states

        out = [
            post.format_travel(pts[0][0], pts[0][1], feeds.travel_rate),
            post.format_plunge(z.down_mm, feeds.feed_rate),
        ]
        if self._cfg.dwell_ms > 0:
            out.append(post.format_dwell(self._cfg.dwell_ms))
        out.extend(post.format_move(x, y) for x, y in pts[1:])
        out.append(post.format_safe_z(z.up_mm))
        return out


# ---------------------------------------------------------------------------
# Functional wrappers
# ---------------------------------------------------------------------------


def generate_gcode(model: VectorModel, config: ToolpathConfig) -> str:
    """Single-layer export, see ``ToolpathExporter.export``."""
    return ToolpathExporter(config).export(model)


def generate_gcode_for_layers(
    layers: Mapping[str, VectorModel],
    config: ToolpathConfig,
) -> str:
    """Multi-layer export, see ``ToolpathExporter.export_layers``."""
    return ToolpathExporter(config).export_layers(layers)
