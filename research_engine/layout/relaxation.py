"""Collision relaxation of tree-placed nodes."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import combinations
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..config import RelaxationConfig
from ..contracts import GraphNode
from .geometry import MIN_NODE_RADIUS, SIZE_RADIUS_SCALE, PositionMap, buckets_interact, node_bucket, node_radius
from .hashing import hash_to_unit

LOGGER = logging.getLogger(__name__)

_EPSILON = 0.0001


def interacting_pairs(nodes: Sequence[GraphNode]) -> List[Tuple[int, int]]:
    """Return index pairs ``(i, j)`` with ``i < j`` whose buckets are checked for overlap."""

    buckets = [node_bucket(node) for node in nodes]
    return [
        (i, j)
        for i, j in combinations(range(len(nodes)), 2)
        if buckets_interact(buckets[i], buckets[j])
    ]


@dataclass(frozen=True, slots=True)
class RelaxationResult:
    """Relaxed positions together with convergence bookkeeping."""

    positions: PositionMap
    iterations: int
    converged: bool


class CollisionRelaxer:
    """Push overlapping spheres apart on the y/z plane while springing them home.

    Only node pairs that share a bucket, or that involve the center bucket, are
    compared. The x coordinate encodes citation depth and is never changed, and
    the center node is pinned.
    """

    def __init__(
        self,
        settings: Optional[RelaxationConfig] = None,
        *,
        min_radius: float = MIN_NODE_RADIUS,
        size_scale: float = SIZE_RADIUS_SCALE,
    ) -> None:
        self._settings = settings or RelaxationConfig()
        self._min_radius = min_radius
        self._size_scale = size_scale

    def relax(
        self,
        nodes: Sequence[GraphNode],
        anchors: Mapping[str, Tuple[float, float, float]],
        center_id: str,
    ) -> RelaxationResult:
        """Relax ``anchors`` and return the adjusted positions.

        Args:
            nodes: Nodes in canonical order; pair processing follows it.
            anchors: Tree-assigned positions. Nodes without one are skipped.
            center_id: Identifier of the pinned center node.

        Returns:
            RelaxationResult: Positions for every anchored node.
        """

        participants = [node for node in nodes if node.id in anchors]
        if not participants:
            return RelaxationResult(positions={}, iterations=0, converged=True)

        ids = [node.id for node in participants]
        anchor = np.array([anchors[node_id] for node_id in ids], dtype=np.float64)
        movable = np.array([node_id != center_id for node_id in ids], dtype=bool)
        working: List[List[float]] = anchor.tolist()
        radii = [node_radius(node, min_radius=self._min_radius, size_scale=self._size_scale) for node in participants]
        pinned = [not flag for flag in movable.tolist()]
        pairs = interacting_pairs(participants)

        padding = self._settings.padding
        spring = self._settings.spring_strength
        iterations = 0
        converged = False
        for _ in range(self._settings.iterations):
            iterations += 1
            had_overlap = False
            # Scalar pair updates run on plain lists; numpy handles the spring step.
            for i, j in pairs:
                pos_a = working[i]
                pos_b = working[j]
                dx = pos_b[0] - pos_a[0]
                dy = pos_b[1] - pos_a[1]
                dz = pos_b[2] - pos_a[2]
                distance = math.sqrt(dx * dx + dy * dy + dz * dz)
                minimum = radii[i] + radii[j] + padding
                if distance >= minimum:
                    continue

                had_overlap = True
                overlap = minimum - max(distance, _EPSILON)
                push_y, push_z = self._push_direction(ids[i], ids[j], dy, dz)
                half = overlap / 2
                if not pinned[i]:
                    pos_a[1] -= push_y * half
                    pos_a[2] -= push_z * half
                if not pinned[j]:
                    pos_b[1] += push_y * half
                    pos_b[2] += push_z * half

            if not had_overlap:
                converged = True
                break
            current = np.array(working, dtype=np.float64)
            current[movable, 1:] = current[movable, 1:] * (1 - spring) + anchor[movable, 1:] * spring
            working = current.tolist()

        LOGGER.debug(
            "Relaxed %d nodes over %d candidate pairs in %d iterations (converged=%s)",
            len(ids),
            len(pairs),
            iterations,
            converged,
        )
        positions: PositionMap = {
            node_id: (float(row[0]), float(row[1]), float(row[2])) for node_id, row in zip(ids, working)
        }
        return RelaxationResult(positions=positions, iterations=iterations, converged=converged)

    @staticmethod
    def _push_direction(first_id: str, second_id: str, dy: float, dz: float) -> Tuple[float, float]:
        length = math.hypot(dy, dz)
        if length < _EPSILON:
            seed = hash_to_unit(f"{first_id}:{second_id}") * math.pi * 2
            return math.cos(seed), math.sin(seed)
        return dy / length, dz / length


def max_overlap(
    nodes: Sequence[GraphNode],
    positions: Mapping[str, Tuple[float, float, float]],
    *,
    padding: float = RelaxationConfig().padding,
    min_radius: float = MIN_NODE_RADIUS,
    size_scale: float = SIZE_RADIUS_SCALE,
) -> float:
    """Return the largest padded overlap among interacting node pairs, or 0."""

    placed = [node for node in nodes if node.id in positions]
    worst = 0.0
    for i, j in interacting_pairs(placed):
        first, second = placed[i], placed[j]
        distance = math.dist(positions[first.id], positions[second.id])
        minimum = (
            node_radius(first, min_radius=min_radius, size_scale=size_scale)
            + node_radius(second, min_radius=min_radius, size_scale=size_scale)
            + padding
        )
        worst = max(worst, minimum - distance)
    return worst


__all__ = ["CollisionRelaxer", "RelaxationResult", "interacting_pairs", "max_overlap"]
