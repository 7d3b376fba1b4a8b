"""
Vector model module.

Path primitives, the nested model tree with local origins, origin
flattening and document loading.  All coordinates are in millimetres.
"""

from plotter_toolpath.model.paths import Arc, Circle, Line, Path, Point
from plotter_toolpath.model.schema import (
    ModelError,
    load_layers,
    load_model,
    model_from_dict,
    split_layers,
)
from plotter_toolpath.model.vector_model import (
    FlatPath,
    Route,
    VectorModel,
    flatten,
    walk_paths,
)

__all__ = [
    "Arc",
    "Circle",
    "FlatPath",
    "Line",
    "ModelError",
    "Path",
    "Point",
    "Route",
    "VectorModel",
    "flatten",
    "load_layers",
    "load_model",
    "model_from_dict",
    "split_layers",
    "walk_paths",
]
