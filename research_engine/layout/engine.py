"""Entry point computing the 3D citation graph layout."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..config import LayoutConfig
from ..contracts import GraphLink, GraphNode
from .geometry import PositionMap
from .relaxation import CollisionRelaxer, max_overlap
from .tree import TreePlacer

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """Final node positions and the anchors they were relaxed from."""

    positions: PositionMap = field(default_factory=dict)
    anchors: PositionMap = field(default_factory=dict)
    iterations: int = 0
    converged: bool = True
    residual_overlap: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.positions


def canonical_nodes(nodes: Iterable[GraphNode]) -> List[GraphNode]:
    """Return nodes deduplicated by id (last record wins) in ascending id order."""

    by_id: Dict[str, GraphNode] = {}
    for node in nodes:
        if node.id in by_id:
            LOGGER.warning("Duplicate node id %s in layout input; keeping the last record", node.id)
        by_id[node.id] = node
    return [by_id[node_id] for node_id in sorted(by_id)]


def compute_layout(
    nodes: Sequence[GraphNode],
    links: Iterable[GraphLink],
    center_id: Optional[str],
    *,
    settings: Optional[LayoutConfig] = None,
) -> LayoutResult:
    """Lay out a citation graph as two diverging trees around ``center_id``.

    The computation is a pure function of its inputs: node and link order
    never affect the result. Nodes unreachable from the center still receive
    a fallback position, so every input node id appears in the output.

    Args:
        nodes: Graph nodes.
        links: ``references`` and ``cited_by`` links; other types are ignored.
        center_id: Identifier of the focal paper.
        settings: Optional layout parameters; defaults mirror config.yaml.

    Returns:
        LayoutResult: Empty when ``center_id`` is missing or unknown.
    """

    resolved = settings or LayoutConfig()
    ordered = canonical_nodes(nodes)
    if not center_id or all(node.id != center_id for node in ordered):
        LOGGER.info("Center %r not present among %d nodes; returning empty layout", center_id, len(ordered))
        return LayoutResult()

    tree_settings = resolved.tree
    placer = TreePlacer(tree_settings)
    anchors = placer.place(ordered, links, center_id)

    relaxer = CollisionRelaxer(
        resolved.relaxation,
        min_radius=tree_settings.min_radius,
        size_scale=tree_settings.size_radius_scale,
    )
    relaxed = relaxer.relax(ordered, anchors, center_id)
    residual = max_overlap(
        ordered,
        relaxed.positions,
        padding=resolved.relaxation.padding,
        min_radius=tree_settings.min_radius,
        size_scale=tree_settings.size_radius_scale,
    )
    if not relaxed.converged:
        LOGGER.debug("Relaxation stopped after %d iterations with residual overlap %.4f", relaxed.iterations, residual)
    return LayoutResult(
        positions=relaxed.positions,
        anchors={node.id: anchors[node.id] for node in ordered},
        iterations=relaxed.iterations,
        converged=relaxed.converged,
        residual_overlap=residual,
    )


__all__ = ["LayoutResult", "canonical_nodes", "compute_layout"]
