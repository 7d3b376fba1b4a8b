"""Vector model document schema and loading.

Drawings arrive as JSON (or YAML) documents in the maker.js model shape::

    {
      "origin": [0, 0],
      "paths": {
        "l1": {"type": "line", "origin": [0, 0], "end": [10, 0]},
        "a1": {"type": "arc", "origin": [5, 5], "radius": 2,
               "startAngle": 0, "endAngle": 90},
        "c1": {"type": "circle", "origin": [20, 20], "radius": 4}
      },
      "models": {"rect": {"origin": [30, 0], "paths": {...}}}
    }

Documents are validated with pydantic so that malformed input fails fast
with the offending key in the message.  Unknown keys (``units``,
``layer``, ``notes``, ...) are ignored.

Usage::

    from plotter_toolpath.model.schema import load_model, load_layers
    model = load_model("drawing.json")
    layers = load_layers("drawing.json")   # top-level sub-models as layers
"""

from __future__ import annotations

import json
from pathlib import Path as FsPath
from typing import Annotated, Any, Dict, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from plotter_toolpath import fs
from plotter_toolpath.model.paths import Arc, Circle, Line, Path
from plotter_toolpath.model.vector_model import VectorModel


class ModelError(Exception):
    """Raised when a vector model document is missing or malformed."""

    pass


# ============================================================================
# PATH DOCUMENTS
# ============================================================================

class LineDoc(BaseModel):
    """Straight segment (``type: line``)."""
    type: Literal["line"]
    origin: Tuple[float, float] = Field(..., description="Start point (x, y) in mm")
    end: Tuple[float, float] = Field(..., description="End point (x, y) in mm")

    def to_path(self) -> Path:
        return Line(origin=self.origin, end=self.end)


class ArcDoc(BaseModel):
    """Counter-clockwise arc (``type: arc``), angles in degrees."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["arc"]
    origin: Tuple[float, float] = Field(..., description="Centre (x, y) in mm")
    radius: float = Field(..., ge=0.0)
    start_angle: float = Field(..., alias="startAngle")
    end_angle: float = Field(..., alias="endAngle")

    def to_path(self) -> Path:
        return Arc(
            origin=self.origin,
            radius=self.radius,
            start_angle=self.start_angle,
            end_angle=self.end_angle,
        )


class CircleDoc(BaseModel):
    """Full circle (``type: circle``)."""
    type: Literal["circle"]
    origin: Tuple[float, float] = Field(..., description="Centre (x, y) in mm")
    radius: float = Field(..., ge=0.0)

    def to_path(self) -> Path:
        return Circle(origin=self.origin, radius=self.radius)


PathDoc = Annotated[Union[LineDoc, ArcDoc, CircleDoc], Field(discriminator="type")]


# ============================================================================
# MODEL DOCUMENT
# ============================================================================

class ModelDoc(BaseModel):
    """One node of the drawing tree."""
    origin: Tuple[float, float] = (0.0, 0.0)
    paths: Dict[str, PathDoc] = Field(default_factory=dict)
    models: Dict[str, "ModelDoc"] = Field(default_factory=dict)

    def to_model(self) -> VectorModel:
        return VectorModel(
            paths={key: doc.to_path() for key, doc in self.paths.items()},
            models={key: doc.to_model() for key, doc in self.models.items()},
            origin=self.origin,
        )


ModelDoc.model_rebuild()


# ============================================================================
# LOADING
# ============================================================================

def model_from_dict(data: Dict[str, Any]) -> VectorModel:
    """Validate a model document and build the ``VectorModel``.

    Raises
    ------
    ModelError
        If the document does not match the schema.
    """
    try:
        return ModelDoc.model_validate(data).to_model()
    except ValidationError as exc:
        raise ModelError(f"Invalid model document: {exc}") from exc


def _read_document(path: Union[str, FsPath]) -> Dict[str, Any]:
    path = FsPath(path)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")

    try:
        data = fs.load_document(path)
    except json.JSONDecodeError as exc:
        raise ModelError(f"Malformed JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ModelError(f"Model document must be a mapping: {path}")
    return data


def load_model(path: Union[str, FsPath]) -> VectorModel:
    """Load a vector model from a JSON or YAML file."""
    return model_from_dict(_read_document(path))


def split_layers(model: VectorModel) -> Dict[str, VectorModel]:
    """Treat the top-level sub-models of *model* as named layers.

    Each layer inherits the root origin.  Paths owned directly by the
    root, if any, form a leading layer named ``"root"``.
    """
    layers: Dict[str, VectorModel] = {}
    if model.paths:
        layers["root"] = VectorModel(paths=dict(model.paths), origin=model.origin)

    rx, ry = model.origin
    for name, child in model.models.items():
        layers[name] = VectorModel(
            paths=child.paths,
            models=child.models,
            origin=(rx + child.origin[0], ry + child.origin[1]),
        )
    return layers


def load_layers(path: Union[str, FsPath]) -> Dict[str, VectorModel]:
    """Load a model file and split it into layers (see ``split_layers``)."""
    return split_layers(load_model(path))
