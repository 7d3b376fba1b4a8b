"""Path primitives -- the geometry vocabulary of a vector model.

Every primitive is an immutable, slotted dataclass.  Coordinates are in
**millimetres** in drawing space (origin and axis directions as produced
by the pattern pipeline, +Y down on the canvas).  Angles are in
**degrees**, counter-clockwise.

Arc convention
--------------
An ``Arc`` runs counter-clockwise from ``start_angle`` to ``end_angle``.
When the end angle is below the start angle it wraps around by 360, so
``Arc(c, r, 270, 90)`` is the half circle through 0 degrees.  A span of
360 degrees or more describes a closed loop.

Key points
----------
``key_points()`` flattens a primitive into an ordered polyline.  Arcs are
faceted so that no facet is longer than ``max_facet`` mm.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Point = tuple[float, float]
"""An ``(x, y)`` position in mm."""

DEFAULT_MAX_FACET_MM = 1.0


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def arc_span(start_angle: float, end_angle: float) -> float:
    """Counter-clockwise sweep from *start_angle* to *end_angle* in degrees."""
    end = end_angle
    if end < start_angle:
        end += 360.0
    return end - start_angle


def _point_on_circle(center: Point, radius: float, angle_deg: float) -> Point:
    a = math.radians(angle_deg)
    return (center[0] + radius * math.cos(a), center[1] + radius * math.sin(a))


def _facet(
    center: Point,
    radius: float,
    start_angle: float,
    span: float,
    max_facet: float,
) -> list[Point]:
    arc_len = radius * math.radians(span)
    if max_facet <= 0:
        max_facet = DEFAULT_MAX_FACET_MM
    n = max(1, math.ceil(arc_len / max_facet))
    angles = np.radians(np.linspace(start_angle, start_angle + span, n + 1))
    xs = center[0] + radius * np.cos(angles)
    ys = center[1] + radius * np.sin(angles)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Path(ABC):
    """Base class for all path primitives."""

    @property
    @abstractmethod
    def start_point(self) -> Point:
        """Point where a forward walk of the path begins."""

    @property
    @abstractmethod
    def end_point(self) -> Point:
        """Point where a forward walk of the path ends."""

    @property
    @abstractmethod
    def length(self) -> float:
        """Drawn length in mm."""

    @property
    def is_closed(self) -> bool:
        """``True`` when the path forms a loop on its own."""
        return False

    @abstractmethod
    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        """Ordered polyline approximation of the path."""

    @abstractmethod
    def moved(self, dx: float, dy: float) -> "Path":
        """Return a copy translated by ``(dx, dy)``."""


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Line(Path):
    """Straight segment.

    Parameters
    ----------
    origin : Point
        Start point in mm.
    end : Point
        End point in mm.
    """

    origin: Point
    end: Point

    @property
    def start_point(self) -> Point:
        return self.origin

    @property
    def end_point(self) -> Point:
        return self.end

    @property
    def length(self) -> float:
        return distance(self.origin, self.end)

    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        return [self.origin, self.end]

    def moved(self, dx: float, dy: float) -> Line:
        return Line(
            origin=(self.origin[0] + dx, self.origin[1] + dy),
            end=(self.end[0] + dx, self.end[1] + dy),
        )


@dataclass(frozen=True, slots=True)
class Arc(Path):
    """Circular arc, counter-clockwise from ``start_angle`` to ``end_angle``.

    Parameters
    ----------
    origin : Point
        Arc centre in mm.
    radius : float
        Radius in mm, must be >= 0.
    start_angle, end_angle : float
        Angles in degrees.
    """

    origin: Point
    radius: float
    start_angle: float
    end_angle: float

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError(f"Arc radius must be >= 0, got {self.radius}")

    @property
    def span(self) -> float:
        return arc_span(self.start_angle, self.end_angle)

    @property
    def start_point(self) -> Point:
        return _point_on_circle(self.origin, self.radius, self.start_angle)

    @property
    def end_point(self) -> Point:
        return _point_on_circle(
            self.origin, self.radius, self.start_angle + self.span,
        )

    @property
    def length(self) -> float:
        return self.radius * math.radians(min(self.span, 360.0))

    @property
    def is_closed(self) -> bool:
        return self.span >= 360.0

    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        return _facet(
            self.origin, self.radius, self.start_angle,
            min(self.span, 360.0), max_facet,
        )

    def moved(self, dx: float, dy: float) -> Arc:
        return Arc(
            origin=(self.origin[0] + dx, self.origin[1] + dy),
            radius=self.radius,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
        )


@dataclass(frozen=True, slots=True)
class Circle(Path):
    """Full circle, walked counter-clockwise from angle 0.

    Parameters
    ----------
    origin : Point
        Centre in mm.
    radius : float
        Radius in mm, must be >= 0.
    """

    origin: Point
    radius: float

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError(f"Circle radius must be >= 0, got {self.radius}")

    @property
    def start_point(self) -> Point:
        return _point_on_circle(self.origin, self.radius, 0.0)

    @property
    def end_point(self) -> Point:
        return self.start_point

    @property
    def length(self) -> float:
        return 2.0 * math.pi * self.radius

    @property
    def is_closed(self) -> bool:
        return True

    def key_points(self, max_facet: float = DEFAULT_MAX_FACET_MM) -> list[Point]:
        return _facet(self.origin, self.radius, 0.0, 360.0, max_facet)

    def moved(self, dx: float, dy: float) -> Circle:
        return Circle(
            origin=(self.origin[0] + dx, self.origin[1] + dy),
            radius=self.radius,
        )
