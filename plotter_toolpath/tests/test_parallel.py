"""Tests for parallel-line detection."""

from __future__ import annotations

import pytest

from plotter_toolpath.model.paths import Circle, Line
from plotter_toolpath.planning.chains import Chain, Link
from plotter_toolpath.planning.parallel import (
    angle_difference,
    chain_angle,
    detect_parallel_groups,
)


def _chain(name: str, start: tuple, end: tuple) -> Chain:
    return Chain(links=(Link(("paths", name), Line(start, end)),))


def _hatch(ys: list[float], x0: float = 0.0, x1: float = 50.0) -> list[Chain]:
    return [_chain(f"h{i}", (x0, y), (x1, y)) for i, y in enumerate(ys)]


class TestAngles:
    def test_direction_folded(self) -> None:
        assert chain_angle(_chain("a", (0.0, 10.0), (0.0, 0.0))) == pytest.approx(90.0)
        assert chain_angle(_chain("b", (10.0, 0.0), (0.0, 0.0))) == pytest.approx(0.0)

    def test_degenerate_has_no_angle(self) -> None:
        assert chain_angle(_chain("a", (1.0, 1.0), (1.0, 1.0))) is None

    def test_difference_wraps(self) -> None:
        assert angle_difference(179.0, 1.0) == pytest.approx(2.0)
        assert angle_difference(10.0, 40.0) == pytest.approx(30.0)


class TestDetectParallelGroups:
    def test_uniform_hatch_detected(self) -> None:
        chains = _hatch([0.0, 5.0, 10.0, 15.0, 20.0])
        groups, rest = detect_parallel_groups(chains)
        assert len(groups) == 1
        assert rest == []
        group = groups[0]
        assert len(group) == 5
        assert group.spacing == pytest.approx(5.0)
        assert group.angle == pytest.approx(0.0)

    def test_members_sorted_across_field(self) -> None:
        chains = _hatch([15.0, 0.0, 10.0, 5.0])
        (group,), _ = detect_parallel_groups(chains)
        assert [c.start_point[1] for c in group.chains] == [0.0, 5.0, 10.0, 15.0]

    def test_small_angle_jitter_accepted(self) -> None:
        chains = [
            _chain("a", (0.0, 0.0), (50.0, 0.0)),
            _chain("b", (0.0, 4.0), (50.0, 6.0)),
            _chain("c", (0.0, 10.0), (50.0, 10.0)),
        ]
        groups, _ = detect_parallel_groups(chains)
        assert len(groups) == 1

    def test_irregular_spacing_rejected(self) -> None:
        chains = _hatch([0.0, 5.0, 20.0])
        groups, rest = detect_parallel_groups(chains)
        assert groups == []
        assert rest == chains

    def test_too_few_members(self) -> None:
        groups, rest = detect_parallel_groups(_hatch([0.0, 5.0]))
        assert groups == []
        assert len(rest) == 2

    def test_endless_excluded(self) -> None:
        loop = Chain(links=(Link(("paths", "o"), Circle((0.0, 0.0), 1.0)),), endless=True)
        chains = _hatch([0.0, 5.0, 10.0]) + [loop]
        groups, rest = detect_parallel_groups(chains)
        assert len(groups) == 1
        assert rest == [loop]

    def test_two_orientations(self) -> None:
        horizontal = _hatch([0.0, 5.0, 10.0])
        vertical = [
            _chain(f"v{i}", (100.0 + 4.0 * i, 0.0), (100.0 + 4.0 * i, 30.0))
            for i in range(3)
        ]
        odd = _chain("x", (0.0, 100.0), (30.0, 130.0))
        groups, rest = detect_parallel_groups(horizontal + vertical + [odd])
        assert [len(g) for g in groups] == [3, 3]
        assert groups[1].angle == pytest.approx(90.0)
        assert rest == [odd]
