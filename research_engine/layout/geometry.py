"""Shared geometric helpers for node volumes and collision buckets."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from ..contracts import GraphNode, NodeSide

Position = Tuple[float, float, float]
PositionMap = Dict[str, Position]

ORIGIN: Position = (0.0, 0.0, 0.0)
MIN_NODE_RADIUS = 0.45
SIZE_RADIUS_SCALE = 0.11


class Bucket(str, Enum):
    """Coarse region of the scene a node may collide within."""

    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"
    OTHER = "other"


_SIDE_BUCKETS = {
    NodeSide.CENTER: Bucket.CENTER,
    NodeSide.BACKWARD: Bucket.LEFT,
    NodeSide.FORWARD: Bucket.RIGHT,
}


def node_radius(
    node: GraphNode,
    *,
    min_radius: float = MIN_NODE_RADIUS,
    size_scale: float = SIZE_RADIUS_SCALE,
) -> float:
    """Return the rendered sphere radius of ``node``."""

    return max(min_radius, node.size * size_scale)


def node_bucket(node: GraphNode) -> Bucket:
    """Return the collision bucket derived from the node's side."""

    return _SIDE_BUCKETS.get(node.side, Bucket.OTHER)


def buckets_interact(first: Bucket, second: Bucket) -> bool:
    """Return whether nodes in the two buckets are checked for overlap."""

    if first is Bucket.CENTER or second is Bucket.CENTER:
        return True
    return first is second


__all__ = [
    "Bucket",
    "MIN_NODE_RADIUS",
    "ORIGIN",
    "Position",
    "PositionMap",
    "SIZE_RADIUS_SCALE",
    "buckets_interact",
    "node_bucket",
    "node_radius",
]
