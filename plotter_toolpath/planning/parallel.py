"""Parallel-line detection -- recognise hatch and stripe fields.

A regular field of near-parallel strokes is drawn best as a serpentine:
down one line, across to the neighbour, back up the next.  This module
finds such fields among open chains.

Algorithm
---------
1. Orientation of every open chain from its start/end points, folded to
   [0, 180) degrees (a stroke can be drawn either way).
2. Greedy first-fit bucketing: a chain joins the first bucket whose
   representative (first member) angle is within ``angle_tolerance``.
3. Buckets with fewer than ``min_group_size`` members are dropped.
4. Members are sorted by the projection of their midpoint onto the axis
   perpendicular to the bucket angle.
5. The bucket becomes a ``ParallelGroup`` only if consecutive spacings
   are uniform: ``max|s - mean| / mean < max_spacing_deviation``.

Endless chains and zero-length chains never take part.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from plotter_toolpath.planning.chains import Chain

logger = logging.getLogger(__name__)

ANGLE_TOLERANCE_DEG = 5.0
MIN_GROUP_SIZE = 3
MAX_SPACING_DEVIATION = 0.15

_MIN_EXTENT_MM = 1e-9


@dataclass(frozen=True, slots=True)
class ParallelGroup:
    """Open chains sharing one orientation, sorted across the field.

    Parameters
    ----------
    chains : tuple[Chain, ...]
        Members ordered by perpendicular position.
    angle : float
        Representative orientation in degrees, in [0, 180).
    spacing : float
        Mean perpendicular distance between neighbours in mm.
    """

    chains: tuple[Chain, ...]
    angle: float
    spacing: float

    def __len__(self) -> int:
        return len(self.chains)


def chain_angle(chain: Chain) -> float | None:
    """Orientation of *chain* in [0, 180) degrees; ``None`` if degenerate."""
    (sx, sy), (ex, ey) = chain.start_point, chain.end_point
    dx, dy = ex - sx, ey - sy
    if math.hypot(dx, dy) < _MIN_EXTENT_MM:
        return None
    return math.degrees(math.atan2(dy, dx)) % 180.0


def angle_difference(a: float, b: float) -> float:
    """Smallest difference between two orientations modulo 180 degrees."""
    d = abs(a - b) % 180.0
    return min(d, 180.0 - d)


def _midpoint(chain: Chain) -> tuple[float, float]:
    (sx, sy), (ex, ey) = chain.start_point, chain.end_point
    return (sx + ex) / 2.0, (sy + ey) / 2.0


def _bucket_by_angle(
    chains: Sequence[Chain],
    angle_tolerance: float,
) -> list[tuple[float, list[int]]]:
    buckets: list[tuple[float, list[int]]] = []
    for i, chain in enumerate(chains):
        if chain.endless:
            continue
        angle = chain_angle(chain)
        if angle is None:
            continue
        for rep, members in buckets:
            if angle_difference(angle, rep) <= angle_tolerance:
                members.append(i)
                break
        else:
            buckets.append((angle, [i]))
    return buckets


def detect_parallel_groups(
    chains: Sequence[Chain],
    angle_tolerance: float = ANGLE_TOLERANCE_DEG,
    min_group_size: int = MIN_GROUP_SIZE,
    max_spacing_deviation: float = MAX_SPACING_DEVIATION,
) -> tuple[list[ParallelGroup], list[Chain]]:
    """Split *chains* into uniform parallel fields and the rest.

    Parameters
    ----------
    chains : Sequence[Chain]
        Consolidated chains (orphans included).
    angle_tolerance : float
        Maximum orientation difference to a bucket representative, degrees.
    min_group_size : int
        Smallest bucket worth a serpentine.
    max_spacing_deviation : float
        Upper bound (exclusive) of the relative spacing deviation.

    Returns
    -------
    groups : list[ParallelGroup]
        Accepted fields in bucket creation order.
    rest : list[Chain]
        Chains absorbed by no group, in input order.
    """
    groups: list[ParallelGroup] = []
    absorbed: set[int] = set()

    for rep, members in _bucket_by_angle(chains, angle_tolerance):
        if len(members) < min_group_size:
            continue

        perp = math.radians(rep + 90.0)
        axis = np.array([math.cos(perp), math.sin(perp)])
        mids = np.array([_midpoint(chains[i]) for i in members])
        proj = mids @ axis

        order = np.argsort(proj, kind="stable")
        spacings = np.diff(proj[order])
        mean = float(spacings.mean())
        if mean <= _MIN_EXTENT_MM:
            continue
        deviation = float(np.max(np.abs(spacings - mean)) / mean)
        if deviation >= max_spacing_deviation:
            logger.debug(
                "Rejected %d chains at %.1f deg: spacing deviation %.2f",
                len(members), rep, deviation,
            )
            continue

        groups.append(
            ParallelGroup(
                chains=tuple(chains[members[k]] for k in order),
                angle=rep,
                spacing=mean,
            )
        )
        absorbed.update(members)

    rest = [chain for i, chain in enumerate(chains) if i not in absorbed]
    if groups:
        logger.debug(
            "Detected %d parallel groups covering %d chains",
            len(groups), len(absorbed),
        )
    return groups, rest
