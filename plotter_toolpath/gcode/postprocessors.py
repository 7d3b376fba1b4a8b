"""Post-processor profiles -- one strategy class per machine dialect.

A profile owns everything dialect-specific: program header and footer,
coordinate precision, and the formatting of each primitive (cut move,
travel, arc, plunge, safe-Z retract, dwell, comment).  The emitter only
decides *what* to send; the profile decides *how it is spelled*.

| dialect  | decimals | dwell          | end of program   | extension |
|----------|----------|----------------|------------------|-----------|
| standard | 3        | ``G4 P<s>``    | ``M2``           | .gcode    |
| linuxcnc | 4        | ``G4 P<s>``    | ``M5``, ``M30``  | .ngc      |
| reprap   | 2        | ``G4 P<ms>``   | ``M84``          | .gcode    |

Number formatting is deterministic: coordinates use the fixed precision
of the dialect, heights and feeds drop trailing zeros, and negative zero
is never printed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from plotter_toolpath.configs.loader import Dialect, ToolpathConfig


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------


def _fixed(value: float, decimals: int) -> str:
    """Fixed-precision number without negative zero."""
    return f"{round(value, decimals) + 0.0:.{decimals}f}"


def _num(value: float) -> str:
    """Shortest plain decimal (``5.0`` -> ``5``, ``2.50`` -> ``2.5``)."""
    text = f"{round(value, 6) + 0.0:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


# ---------------------------------------------------------------------------
# Strategy base
# ---------------------------------------------------------------------------


class PostProcessor(ABC):
    """Formatting strategy of one dialect.

    Profiles are stateless; configuration values enter only as
    arguments.
    """

    dialect: Dialect
    decimals: int = 3
    extension: str = ".gcode"

    # -- Program frame ------------------------------------------------------

    @abstractmethod
    def header(self, config: ToolpathConfig) -> list[str]:
        """Setup commands emitted once before the first stroke."""

    @abstractmethod
    def footer(self, config: ToolpathConfig) -> list[str]:
        """Shutdown commands emitted once after the last stroke."""

    # -- Primitives ---------------------------------------------------------

    def coord(self, value: float) -> str:
        return _fixed(value, self.decimals)

    def format_move(self, x: float, y: float, feed: float | None = None) -> str:
        line = f"G1 X{self.coord(x)} Y{self.coord(y)}"
        return f"{line} F{_num(feed)}" if feed else line

    def format_travel(self, x: float, y: float, feed: float | None = None) -> str:
        line = f"G0 X{self.coord(x)} Y{self.coord(y)}"
        return f"{line} F{_num(feed)}" if feed else line

    def format_arc(
        self, x: float, y: float, i: float, j: float, clockwise: bool,
    ) -> str:
        code = "G2" if clockwise else "G3"
        return (
            f"{code} X{self.coord(x)} Y{self.coord(y)} "
            f"I{self.coord(i)} J{self.coord(j)}"
        )

    def format_plunge(self, z: float, feed: float) -> str:
        return f"G1 Z{_num(z)} F{_num(feed)}"

    def format_safe_z(self, z: float) -> str:
        return f"G0 Z{_num(z)}"

    def format_dwell(self, ms: float) -> str:
        return f"G4 P{ms / 1000.0:.3f}"

    def format_comment(self, text: str) -> str:
        # Parentheses end a comment early
        clean = text.replace("(", "[").replace(")", "]")
        return f"({clean})"


# ---------------------------------------------------------------------------
# Dialects
# ---------------------------------------------------------------------------


class StandardPostProcessor(PostProcessor):
    """Generic RS-274 / GRBL-style output."""

    dialect = Dialect.STANDARD
    decimals = 3

    def header(self, config: ToolpathConfig) -> list[str]:
        z = config.z_states.safe_height
        return [
            "G21",
            "G90",
            f"G0 Z{_num(z)} F{_num(config.feeds.feed_rate)}",
        ]

    def footer(self, config: ToolpathConfig) -> list[str]:
        return [
            f"G0 Z{_num(config.z_states.safe_height)}",
            "G0 X0 Y0",
            "M2",
        ]


class LinuxCNCPostProcessor(PostProcessor):
    """LinuxCNC: XY plane, path blending, spindle signal, rewind on end."""

    dialect = Dialect.LINUXCNC
    decimals = 4
    extension = ".ngc"

    def header(self, config: ToolpathConfig) -> list[str]:
        return [
            "%",
            "G17 G21 G90 G64 P0.1",
            f"G0 Z{_num(config.z_states.safe_height)}",
            "G0 X0 Y0",
            "M3 S1000",
            f"F{_num(config.feeds.feed_rate)}",
        ]

    def footer(self, config: ToolpathConfig) -> list[str]:
        return [
            f"G0 Z{_num(config.z_states.safe_height)}",
            "G0 X0 Y0",
            "M5",
            "M30",
            "%",
        ]


class RepRapPostProcessor(PostProcessor):
    """RepRap / Marlin firmware: fan off, home and release motors at end."""

    dialect = Dialect.REPRAP
    decimals = 2

    def header(self, config: ToolpathConfig) -> list[str]:
        return [
            "G21",
            "G90",
            "M107",
            f"G0 Z{_num(config.z_states.safe_height)} F3000",
        ]

    def footer(self, config: ToolpathConfig) -> list[str]:
        return [
            f"G0 Z{_num(config.z_states.safe_height)}",
            "G28 X0 Y0",
            "M84",
        ]

    def format_dwell(self, ms: float) -> str:
        return f"G4 P{_num(ms)}"

    def format_comment(self, text: str) -> str:
        return f"; {text}"


_POST_PROCESSORS: dict[Dialect, PostProcessor] = {
    Dialect.STANDARD: StandardPostProcessor(),
    Dialect.LINUXCNC: LinuxCNCPostProcessor(),
    Dialect.REPRAP: RepRapPostProcessor(),
}


def get_post_processor(dialect: Dialect | str) -> PostProcessor:
    """Profile for *dialect*.  Raises ``ConfigError`` for unknown names."""
    return _POST_PROCESSORS[Dialect.parse(dialect)]


def file_extension(dialect: Dialect | str) -> str:
    """Program file extension: ``.ngc`` for LinuxCNC, ``.gcode`` otherwise."""
    return get_post_processor(dialect).extension
