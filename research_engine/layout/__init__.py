"""Deterministic 3D layout of citation graphs."""

from .engine import LayoutResult, canonical_nodes, compute_layout
from .geometry import Bucket, Position, PositionMap, node_bucket, node_radius
from .hashing import hash_to_unit
from .ordering import sort_nodes
from .relaxation import CollisionRelaxer, RelaxationResult, max_overlap
from .tree import TreePlacer

__all__ = [
    "Bucket",
    "CollisionRelaxer",
    "LayoutResult",
    "Position",
    "PositionMap",
    "RelaxationResult",
    "TreePlacer",
    "canonical_nodes",
    "compute_layout",
    "hash_to_unit",
    "max_overlap",
    "node_bucket",
    "node_radius",
    "sort_nodes",
]
