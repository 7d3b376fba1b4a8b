"""Tests for chain discovery and the Link / Chain / OptimizedChain types."""

from __future__ import annotations

import pytest

from plotter_toolpath.model.paths import Circle, Line, Path
from plotter_toolpath.model.vector_model import FlatPath, VectorModel, flatten
from plotter_toolpath.planning.chains import Chain, Link, OptimizedChain, find_chains


def _flat(*paths: Path) -> list[FlatPath]:
    model = VectorModel(paths={f"p{i}": p for i, p in enumerate(paths)})
    return flatten(model)


def _routes(chains: list[Chain]) -> list[tuple]:
    return [route for chain in chains for route in chain.routes]


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestFindChains:
    def test_connected_lines_form_one_chain(self) -> None:
        chains = find_chains(_flat(
            Line((0.0, 0.0), (10.0, 0.0)),
            Line((10.0, 0.0), (20.0, 0.0)),
        ))
        assert len(chains) == 1
        assert not chains[0].endless
        assert chains[0].key_points() == [(0.0, 0.0), (10.0, 0.0), (20.0, 0.0)]

    def test_walk_reverses_backward_path(self) -> None:
        chains = find_chains(_flat(
            Line((0.0, 0.0), (10.0, 0.0)),
            Line((20.0, 0.0), (10.0, 0.0)),
        ))
        assert len(chains) == 1
        assert [link.reversed for link in chains[0].links] == [False, True]
        assert chains[0].end_point == (20.0, 0.0)

    def test_junction_splits_strokes(self) -> None:
        chains = find_chains(_flat(
            Line((0.0, 0.0), (10.0, 0.0)),
            Line((0.0, 0.0), (0.0, 10.0)),
            Line((0.0, 0.0), (-10.0, 0.0)),
        ))
        assert len(chains) == 3
        assert all(len(chain.links) == 1 for chain in chains)
        assert sorted(_routes(chains)) == [("paths", "p0"), ("paths", "p1"), ("paths", "p2")]

    def test_cycle_becomes_endless(self) -> None:
        chains = find_chains(_flat(
            Line((0.0, 0.0), (10.0, 0.0)),
            Line((10.0, 0.0), (10.0, 10.0)),
            Line((10.0, 10.0), (0.0, 10.0)),
            Line((0.0, 10.0), (0.0, 0.0)),
        ))
        assert len(chains) == 1
        loop = chains[0]
        assert loop.endless
        assert len(loop.links) == 4
        pts = loop.key_points()
        assert len(pts) == 5
        assert pts[0] == pts[-1]

    def test_circle_is_single_link_endless(self) -> None:
        chains = find_chains(_flat(Circle((5.0, 5.0), 1.0)))
        assert len(chains) == 1
        assert chains[0].endless
        assert chains[0].end_point == chains[0].start_point

    def test_isolated_lines_left_out(self) -> None:
        chains = find_chains(_flat(
            Line((0.0, 0.0), (2.0, 0.0)),
            Line((10.0, 10.0), (12.0, 10.0)),
        ))
        assert chains == []

    def test_zero_length_skipped(self) -> None:
        assert find_chains(_flat(Line((1.0, 1.0), (1.0, 1.0)))) == []
        assert find_chains(_flat(Circle((1.0, 1.0), 0.0))) == []

    def test_tolerance(self) -> None:
        paths = _flat(
            Line((0.0, 0.0), (10.0, 0.0)),
            Line((10.005, 0.0), (20.0, 0.0)),
        )
        assert len(find_chains(paths, tolerance=0.01)) == 1
        assert find_chains(paths, tolerance=0.001) == []

    def test_chains_follow_flattening_order(self) -> None:
        chains = find_chains(_flat(
            Circle((50.0, 50.0), 1.0),
            Line((0.0, 0.0), (10.0, 0.0)),
            Line((10.0, 0.0), (20.0, 0.0)),
        ))
        assert [chain.routes[0] for chain in chains] == [
            ("paths", "p0"),
            ("paths", "p1"),
        ]

    def test_empty(self) -> None:
        assert find_chains([]) == []


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@pytest.fixture()
def two_link_chain() -> Chain:
    return Chain(links=(
        Link(("paths", "a"), Line((0.0, 0.0), (10.0, 0.0))),
        Link(("paths", "b"), Line((10.0, 0.0), (10.0, 5.0))),
    ))


class TestChainTypes:
    def test_empty_chain_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least one link"):
            Chain(links=())

    def test_length(self, two_link_chain: Chain) -> None:
        assert two_link_chain.length == pytest.approx(15.0)

    def test_reversed_chain(self, two_link_chain: Chain) -> None:
        rev = two_link_chain.reversed_chain()
        assert rev.start_point == (10.0, 5.0)
        assert rev.end_point == (0.0, 0.0)
        assert rev.routes == (("paths", "b"), ("paths", "a"))
        assert rev.key_points() == list(reversed(two_link_chain.key_points()))

    def test_optimized_chain_round_trip(self, two_link_chain: Chain) -> None:
        forward = OptimizedChain(two_link_chain).key_points()
        backward = OptimizedChain(two_link_chain, reverse=True).key_points()
        assert backward == list(reversed(forward))
        assert list(reversed(backward)) == forward

    def test_optimized_chain_never_mutates(self, two_link_chain: Chain) -> None:
        before = two_link_chain.key_points()
        oc = OptimizedChain(two_link_chain, reverse=True)
        assert oc.entry_point == (10.0, 5.0)
        assert oc.exit_point == (0.0, 0.0)
        assert two_link_chain.key_points() == before

    def test_endless_end_is_start(self) -> None:
        loop = Chain(links=(Link(("paths", "c"), Circle((0.0, 0.0), 1.0)),), endless=True)
        assert loop.end_point == loop.start_point
