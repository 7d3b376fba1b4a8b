"""Configuration loader for toolpath export.

Loads and validates a YAML configuration into typed, frozen dataclasses.
Every export parameter (canvas height, feeds, Z states, dialect, axis
mapping, planning tolerances) comes from the config -- nothing in the
planner or emitter is hardcoded.

Feed rates are stored in **mm/min**, the unit of the G-code ``F`` word,
and are written to the program unchanged.  Dwell time is in
**milliseconds**; each dialect converts it at formatting time.

Missing keys fall back to the values of ``default.yaml`` so partial
dictionaries are accepted::

    from plotter_toolpath.configs.loader import config_from_dict, load_config
    cfg = load_config()                                   # shipped defaults
    cfg = load_config("/custom/plotter.yaml")             # explicit path
    cfg = config_from_dict({"gcode": {"dialect": "linuxcnc"}})
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from plotter_toolpath.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dialect selector
# ---------------------------------------------------------------------------


class Dialect(str, Enum):
    """Machine dialect of the emitted program."""

    STANDARD = "standard"
    LINUXCNC = "linuxcnc"
    REPRAP = "reprap"

    @classmethod
    def parse(cls, value: "str | Dialect") -> "Dialect":
        """Return the dialect for *value* or raise ``ConfigError``."""
        if isinstance(value, Dialect):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise ConfigError(
                f"Unknown dialect {value!r}. Available: {choices}"
            ) from None


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CanvasConfig:
    """Drawing canvas size in mm."""

    width_mm: float
    height_mm: float


@dataclass(frozen=True)
class FeedsConfig:
    """Feed rates in mm/min."""

    feed_rate: float
    travel_rate: float


@dataclass(frozen=True)
class ZStatesConfig:
    """Tool heights in mm.

    ``safe_mm`` is the retract height used by program header and footer.
    ``None`` means "same as ``up_mm``".
    """

    up_mm: float
    down_mm: float
    safe_mm: float | None = None

    @property
    def safe_height(self) -> float:
        return self.up_mm if self.safe_mm is None else self.safe_mm

    @property
    def lift_penalty_mm(self) -> float:
        """Vertical distance of one lift-and-lower cycle."""
        return 2.0 * abs(self.up_mm - self.down_mm)


@dataclass(frozen=True)
class PlanningConfig:
    """Path planning switches and tolerances."""

    optimize_paths: bool
    join_tolerance_mm: float
    max_arc_facet_mm: float


@dataclass(frozen=True)
class AxesConfig:
    """Drawing-to-machine axis mapping.

    ``origin_x_mm`` is subtracted from X before the vertical flip;
    ``origin_y_mm`` is a cartesian (post-flip) Y origin.
    """

    origin_x_mm: float = 0.0
    origin_y_mm: float = 0.0
    swap_axes: bool = False
    invert_x: bool = False
    invert_y: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings consumed by ``logging_config.setup_logging``."""

    level: str = "INFO"
    fmt_mode: str = "human"
    log_file: str | None = None


@dataclass(frozen=True)
class ToolpathConfig:
    """Complete export configuration.

    All linear dimensions are in **millimetres**.
    All feed rates are in **mm/min**.
    """

    canvas: CanvasConfig
    feeds: FeedsConfig
    z_states: ZStatesConfig
    planning: PlanningConfig
    axes: AxesConfig
    dialect: Dialect = Dialect.STANDARD
    dwell_ms: float = 0.0
    log: LoggingConfig = LoggingConfig()

    # -- Convenience helpers ------------------------------------------------

    def canvas_to_machine(self, x: float, y: float) -> tuple[float, float]:
        """Convert a drawing point to machine coordinates.

        The steps run in a fixed order: translate X by the origin, flip Y
        against the canvas height (then apply the cartesian Y origin),
        swap axes, negate axes.

        Parameters
        ----------
        x, y : float
            Absolute drawing position in mm.

        Returns
        -------
        tuple[float, float]
            Machine X, Y in mm.
        """
        ax = self.axes
        mx = x - ax.origin_x_mm
        my = self.canvas.height_mm - y - ax.origin_y_mm
        if ax.swap_axes:
            mx, my = my, mx
        if ax.invert_x:
            mx = -mx
        if ax.invert_y:
            my = -my
        return mx, my

    def machine_to_canvas(self, mx: float, my: float) -> tuple[float, float]:
        """Inverse of ``canvas_to_machine``: machine X, Y back to drawing X, Y."""
        ax = self.axes
        if ax.invert_x:
            mx = -mx
        if ax.invert_y:
            my = -my
        if ax.swap_axes:
            mx, my = my, mx
        x = mx + ax.origin_x_mm
        y = self.canvas.height_mm - my - ax.origin_y_mm
        return x, y

    @property
    def home_on_canvas(self) -> tuple[float, float]:
        """Drawing position that lands on machine (0, 0)."""
        return self.machine_to_canvas(0.0, 0.0)


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{key}' must be a mapping, got {value!r}")
    return value


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _validate_config(cfg: ToolpathConfig) -> None:
    """Cross-field sanity checks.  Raises ``ConfigError``."""
    if cfg.canvas.width_mm <= 0 or cfg.canvas.height_mm <= 0:
        raise ConfigError(
            f"Canvas size must be positive, got "
            f"{cfg.canvas.width_mm} x {cfg.canvas.height_mm}"
        )

    if cfg.feeds.feed_rate <= 0:
        raise ConfigError(f"feed_rate must be > 0, got {cfg.feeds.feed_rate}")
    if cfg.feeds.travel_rate <= 0:
        raise ConfigError(
            f"travel_rate must be > 0, got {cfg.feeds.travel_rate}"
        )

    z = cfg.z_states
    for name, val in (("up_mm", z.up_mm), ("down_mm", z.down_mm),
                      ("safe_mm", z.safe_mm)):
        if val is not None and not math.isfinite(val):
            raise ConfigError(f"z_states.{name} must be finite, got {val}")
    if z.up_mm < z.down_mm:
        logger.warning(
            "z_states.up_mm (%s) is below down_mm (%s); check the Z direction",
            z.up_mm, z.down_mm,
        )

    p = cfg.planning
    if p.join_tolerance_mm < 0:
        raise ConfigError(
            f"join_tolerance_mm must be >= 0, got {p.join_tolerance_mm}"
        )
    if p.max_arc_facet_mm <= 0:
        raise ConfigError(
            f"max_arc_facet_mm must be > 0, got {p.max_arc_facet_mm}"
        )

    if cfg.dwell_ms < 0:
        raise ConfigError(f"dwell_ms must be >= 0, got {cfg.dwell_ms}")

    if cfg.log.fmt_mode not in ("human", "json"):
        raise ConfigError(
            f"logging.format must be 'human' or 'json', "
            f"got {cfg.log.fmt_mode!r}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_from_dict(data: dict[str, Any] | None) -> ToolpathConfig:
    """Build and validate a config from a (possibly partial) mapping.

    Missing sections and keys take the built-in defaults, which match
    the shipped ``default.yaml``.

    Raises
    ------
    ConfigError
        If a value has the wrong type or fails validation.
    """
    data = data or {}

    try:
        cv = _section(data, "canvas")
        canvas = CanvasConfig(
            width_mm=float(cv.get("width_mm", 210.0)),
            height_mm=float(cv.get("height_mm", 297.0)),
        )

        gc = _section(data, "gcode")
        feeds = FeedsConfig(
            feed_rate=float(gc.get("feed_rate", 1000.0)),
            travel_rate=float(gc.get("travel_rate", 3000.0)),
        )
        dialect = Dialect.parse(gc.get("dialect", Dialect.STANDARD))
        dwell_ms = float(gc.get("dwell_ms", 0.0) or 0.0)

        zd = _section(data, "z_states")
        z_states = ZStatesConfig(
            up_mm=float(zd.get("up_mm", 5.0)),
            down_mm=float(zd.get("down_mm", 0.0)),
            safe_mm=_optional_float(zd.get("safe_mm")),
        )

        pl = _section(data, "planning")
        planning = PlanningConfig(
            optimize_paths=bool(pl.get("optimize_paths", True)),
            join_tolerance_mm=float(pl.get("join_tolerance_mm", 0.01)),
            max_arc_facet_mm=float(pl.get("max_arc_facet_mm", 1.0)),
        )

        ax = _section(data, "axes")
        axes = AxesConfig(
            origin_x_mm=float(ax.get("origin_x_mm", 0.0)),
            origin_y_mm=float(ax.get("origin_y_mm", 0.0)),
            swap_axes=bool(ax.get("swap_axes", False)),
            invert_x=bool(ax.get("invert_x", False)),
            invert_y=bool(ax.get("invert_y", False)),
        )

        lg = _section(data, "logging")
        log_cfg = LoggingConfig(
            level=str(lg.get("level", "INFO")).upper(),
            fmt_mode=str(lg.get("format", "human")),
            log_file=lg.get("file"),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc

    config = ToolpathConfig(
        canvas=canvas,
        feeds=feeds,
        z_states=z_states,
        planning=planning,
        axes=axes,
        dialect=dialect,
        dwell_ms=dwell_ms,
        log=log_cfg,
    )
    _validate_config(config)
    return config


def load_config(path: str | Path | None = None) -> ToolpathConfig:
    """Load and validate configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to a YAML file.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    ToolpathConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    config = config_from_dict(data)
    logger.info("Configuration loaded successfully")
    return config
