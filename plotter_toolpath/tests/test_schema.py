"""Tests for model document validation and loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from plotter_toolpath.model.paths import Arc, Circle, Line
from plotter_toolpath.model.schema import (
    ModelError,
    load_layers,
    load_model,
    model_from_dict,
    split_layers,
)


@pytest.fixture()
def document() -> dict:
    return {
        "origin": [0, 0],
        "units": "mm",
        "paths": {
            "l1": {"type": "line", "origin": [0, 0], "end": [10, 0]},
        },
        "models": {
            "outline": {
                "origin": [5, 5],
                "paths": {
                    "a1": {
                        "type": "arc",
                        "origin": [0, 0],
                        "radius": 2,
                        "startAngle": 0,
                        "endAngle": 90,
                    },
                },
            },
            "fill": {
                "paths": {
                    "c1": {"type": "circle", "origin": [20, 20], "radius": 4},
                },
            },
        },
    }


class TestModelFromDict:
    def test_builds_tree(self, document: dict) -> None:
        model = model_from_dict(document)
        assert isinstance(model.paths["l1"], Line)
        arc = model.models["outline"].paths["a1"]
        assert isinstance(arc, Arc)
        assert arc.end_angle == 90.0
        assert model.models["outline"].origin == (5.0, 5.0)
        assert isinstance(model.models["fill"].paths["c1"], Circle)

    def test_unknown_path_type(self) -> None:
        doc = {"paths": {"x": {"type": "bezier", "origin": [0, 0]}}}
        with pytest.raises(ModelError, match="Invalid model document"):
            model_from_dict(doc)

    def test_negative_radius(self) -> None:
        doc = {"paths": {"c": {"type": "circle", "origin": [0, 0], "radius": -1}}}
        with pytest.raises(ModelError):
            model_from_dict(doc)

    def test_empty_document(self) -> None:
        assert model_from_dict({}).is_empty()


class TestLoadModel:
    def test_json(self, tmp_path: Path, document: dict) -> None:
        path = tmp_path / "drawing.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        model = load_model(path)
        assert set(model.models) == {"outline", "fill"}

    def test_yaml(self, tmp_path: Path, document: dict) -> None:
        path = tmp_path / "drawing.yaml"
        path.write_text(yaml.safe_dump(document), encoding="utf-8")
        assert "l1" in load_model(path).paths

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_model(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ModelError, match="Malformed JSON"):
            load_model(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ModelError, match="mapping"):
            load_model(path)


class TestLayers:
    def test_root_paths_form_first_layer(self, document: dict) -> None:
        layers = split_layers(model_from_dict(document))
        assert list(layers) == ["root", "outline", "fill"]
        assert list(layers["root"].paths) == ["l1"]

    def test_layers_inherit_root_origin(self, document: dict) -> None:
        document["origin"] = [100, 0]
        layers = split_layers(model_from_dict(document))
        assert layers["outline"].origin == (105.0, 5.0)
        assert layers["fill"].origin == (100.0, 0.0)

    def test_load_layers(self, tmp_path: Path, document: dict) -> None:
        del document["paths"]
        path = tmp_path / "drawing.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        assert list(load_layers(path)) == ["outline", "fill"]
