"""Vector model tree and origin flattening.

A ``VectorModel`` is the drawing handed over by the pattern pipeline: a
map of named paths plus a map of named sub-models, each carrying a local
``origin``.  The absolute position of a path is its local coordinates
plus the origins of every model on the way from the root (the root's own
origin included).

Planning never works on local coordinates.  ``walk_paths()`` yields every
path already moved into absolute coordinates, tagged with its *route* --
the key path that identifies it inside the tree::

    ("paths", "l1")                       # path of the root model
    ("models", "rect", "paths", "edge")   # path of sub-model "rect"
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from plotter_toolpath.model.paths import Path, Point

Route = tuple[str, ...]
"""Identity of a path inside the model tree."""


@dataclass(frozen=True)
class VectorModel:
    """Node of the drawing tree.

    Parameters
    ----------
    paths : dict[str, Path]
        Paths owned by this model, in local coordinates.
    models : dict[str, VectorModel]
        Nested sub-models.
    origin : Point
        Offset of this model relative to its parent, in mm.
    """

    paths: dict[str, Path] = field(default_factory=dict)
    models: dict[str, "VectorModel"] = field(default_factory=dict)
    origin: Point = (0.0, 0.0)

    def is_empty(self) -> bool:
        """``True`` if no path exists anywhere below this model."""
        if self.paths:
            return False
        return all(child.is_empty() for child in self.models.values())


@dataclass(frozen=True, slots=True)
class FlatPath:
    """A path in absolute coordinates together with its route."""

    route: Route
    path: Path


def walk_paths(
    model: VectorModel,
    offset: Point = (0.0, 0.0),
    route: Route = (),
) -> Iterator[FlatPath]:
    """Yield every path of *model* in absolute coordinates.

    Paths of a model come before the paths of its sub-models; both maps
    are visited in insertion order, so the walk order is deterministic.

    Parameters
    ----------
    model : VectorModel
        Root of the (sub-)tree to walk.
    offset : Point
        Accumulated origin of the ancestors of *model*.
    route : Route
        Route prefix of *model*.
    """
    ox = offset[0] + model.origin[0]
    oy = offset[1] + model.origin[1]

    for key, path in model.paths.items():
        moved = path.moved(ox, oy) if (ox or oy) else path
        yield FlatPath(route=route + ("paths", key), path=moved)

    for key, child in model.models.items():
        yield from walk_paths(child, (ox, oy), route + ("models", key))


def flatten(model: VectorModel) -> list[FlatPath]:
    """Materialise ``walk_paths(model)`` into a list."""
    return list(walk_paths(model))
