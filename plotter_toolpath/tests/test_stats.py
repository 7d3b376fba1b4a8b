"""Tests for the stats estimator."""

from __future__ import annotations

import logging

import pytest

from plotter_toolpath.configs.loader import ToolpathConfig, config_from_dict
from plotter_toolpath.gcode import stats as stats_mod
from plotter_toolpath.gcode.generator import ToolpathError, ToolpathExporter
from plotter_toolpath.gcode.stats import (
    ToolpathStats,
    estimate_layer_stats,
    estimate_stats,
)
from plotter_toolpath.model.paths import Line
from plotter_toolpath.model.vector_model import VectorModel
from plotter_toolpath.planning.chains import PlanningError


@pytest.fixture()
def config() -> ToolpathConfig:
    return config_from_dict({})


@pytest.fixture()
def two_strokes() -> VectorModel:
    """Two 10 mm lines on the machine X axis (canvas Y = 297)."""
    return VectorModel(paths={
        "a": Line((0.0, 297.0), (10.0, 297.0)),
        "b": Line((20.0, 297.0), (30.0, 297.0)),
    })


class TestEstimateStats:
    def test_empty_model(self, config: ToolpathConfig) -> None:
        assert estimate_stats(VectorModel(), config) == ToolpathStats()

    def test_lengths(self, config: ToolpathConfig, two_strokes: VectorModel) -> None:
        stats = estimate_stats(two_strokes, config)
        assert stats.path_count == 2
        assert stats.total_length == pytest.approx(20.0)
        # 0 + 10 travel, plus 10 mm Z penalty for each of the two lifts
        assert stats.travel_length == pytest.approx(30.0)

    def test_lift_penalty_with_inverted_y(self, two_strokes: VectorModel) -> None:
        cfg = config_from_dict({
            "axes": {"invert_y": True},
            "z_states": {"up_mm": 5, "down_mm": 0},
        })
        stats = estimate_stats(two_strokes, cfg)
        xy_travel = 0.0 + 10.0
        assert stats.travel_length - xy_travel == pytest.approx(10.0 * 2)

    def test_penalty_follows_z_states(self, two_strokes: VectorModel) -> None:
        cfg = config_from_dict({"z_states": {"up_mm": 2, "down_mm": -1}})
        stats = estimate_stats(two_strokes, cfg)
        assert stats.travel_length == pytest.approx(10.0 + 2 * 6.0)

    def test_matches_program(self, config: ToolpathConfig, two_strokes: VectorModel) -> None:
        program = ToolpathExporter(config).export(two_strokes)
        cuts = [l for l in program.splitlines() if l.startswith("G1 X")]
        assert estimate_stats(two_strokes, config).path_count == len(cuts)

    def test_error_wrapped(
        self, monkeypatch: pytest.MonkeyPatch, config: ToolpathConfig,
    ) -> None:
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(stats_mod, "plan_toolpath", boom)
        with pytest.raises(ToolpathError, match="toolpath stats failed: boom"):
            estimate_stats(VectorModel(), config)


class TestLayerStats:
    def test_sum_of_layers(self, config: ToolpathConfig, two_strokes: VectorModel) -> None:
        layers = {"one": two_strokes, "two": two_strokes}
        total = estimate_layer_stats(layers, config)
        single = estimate_stats(two_strokes, config)
        assert total == single + single

    def test_no_layers(self, config: ToolpathConfig) -> None:
        assert estimate_layer_stats({}, config) == ToolpathStats()

    def test_failed_layer_skipped(
        self,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
        config: ToolpathConfig,
        two_strokes: VectorModel,
    ) -> None:
        broken = VectorModel(paths={"x": Line((0.0, 0.0), (1.0, 0.0))})
        expected = estimate_stats(two_strokes, config)
        original = stats_mod.plan_toolpath

        def plan(model, planning, start):
            if model is broken:
                raise PlanningError("claimed twice")
            return original(model, planning, start)

        monkeypatch.setattr(stats_mod, "plan_toolpath", plan)
        with caplog.at_level(logging.ERROR, logger="plotter_toolpath"):
            total = estimate_layer_stats({"broken": broken, "good": two_strokes}, config)

        assert total == expected
        assert "Skipping layer broken in stats" in caplog.text

    def test_value_error_layer_skipped(
        self,
        monkeypatch: pytest.MonkeyPatch,
        config: ToolpathConfig,
        two_strokes: VectorModel,
    ) -> None:
        broken = VectorModel(paths={"x": Line((0.0, 0.0), (1.0, 0.0))})
        original = stats_mod.plan_toolpath

        def plan(model, planning, start):
            if model is broken:
                raise ValueError("bad geometry")
            return original(model, planning, start)

        monkeypatch.setattr(stats_mod, "plan_toolpath", plan)
        total = estimate_layer_stats({"broken": broken, "good": two_strokes}, config)
        assert total.path_count == 2


class TestToolpathStats:
    def test_to_dict(self) -> None:
        stats = ToolpathStats(path_count=3, total_length=12.5, travel_length=40.0)
        assert stats.to_dict() == {
            "pathCount": 3,
            "totalLength": 12.5,
            "travelLength": 40.0,
        }

    def test_estimated_seconds(self) -> None:
        stats = ToolpathStats(path_count=1, total_length=1000.0, travel_length=3000.0)
        assert stats.estimated_seconds(feed_rate=1000.0, travel_rate=3000.0) == 120

    def test_add(self) -> None:
        a = ToolpathStats(1, 2.0, 3.0)
        b = ToolpathStats(4, 5.0, 6.0)
        assert a + b == ToolpathStats(5, 7.0, 9.0)
