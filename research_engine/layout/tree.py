"""Initial tree placement of citation graph nodes.

References of the center grow along the negative x axis and citations along
the positive x axis, one ``depth_spacing`` step per hop. Siblings are stacked
on the y axis in citation order, centered on their parent, while z receives a
small hash-derived jitter. Nodes the two branches never reach are parked on a
fallback grid next to their declared side.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..config import TreeLayoutConfig
from ..contracts import GraphLink, GraphNode, LinkType, NodeSide
from .geometry import ORIGIN, PositionMap, node_radius
from .hashing import hash_to_unit
from .ordering import sort_nodes

LOGGER = logging.getLogger(__name__)

BRANCHES: Tuple[Tuple[LinkType, int], ...] = (
    (LinkType.REFERENCES, -1),
    (LinkType.CITED_BY, 1),
)

_SIDE_SIGNS = {NodeSide.BACKWARD: -1, NodeSide.FORWARD: 1}

ChildIndex = Mapping[Tuple[str, LinkType], List[str]]


@dataclass
class _Frame:
    """Pending siblings of one parent within a branch walk."""

    siblings: Iterator[Tuple[GraphNode, float]]
    depth: int
    visited: FrozenSet[str]


def build_child_index(links: Iterable[GraphLink]) -> Dict[Tuple[str, LinkType], List[str]]:
    """Group link targets by ``(source, link type)``, dropping duplicates.

    Links with a relation the layout does not follow are skipped.
    """

    grouped: Dict[Tuple[str, LinkType], Dict[str, None]] = defaultdict(dict)
    for link in links:
        link_type = link.link_type
        if link_type is None:
            continue
        grouped[(link.source, link_type)].setdefault(link.target, None)
    return {key: list(targets) for key, targets in grouped.items()}


class TreePlacer:
    """Assign anchor positions by walking both citation branches from the center."""

    def __init__(self, settings: Optional[TreeLayoutConfig] = None) -> None:
        self._settings = settings or TreeLayoutConfig()

    def radius(self, node: GraphNode) -> float:
        """Return the sphere radius used when stacking ``node``."""

        return node_radius(
            node,
            min_radius=self._settings.min_radius,
            size_scale=self._settings.size_radius_scale,
        )

    def place(
        self,
        nodes: Sequence[GraphNode],
        links: Iterable[GraphLink],
        center_id: str,
    ) -> PositionMap:
        """Compute anchor positions for every node.

        Args:
            nodes: Graph nodes; their order decides fallback grid slots.
            links: Directed citation links. Unknown endpoints are ignored.
            center_id: Identifier pinned at the origin.

        Returns:
            PositionMap: One position per node id plus the center.
        """

        by_id: Dict[str, GraphNode] = {node.id: node for node in nodes}
        child_index = build_child_index(links)
        max_depth = max([1, *(node.depth for node in nodes)])

        positions: PositionMap = {center_id: ORIGIN}
        for link_type, sign in BRANCHES:
            self._place_branch(center_id, link_type, sign, by_id, child_index, max_depth, positions)

        reached = len(positions)
        self._place_unreached(nodes, positions)
        LOGGER.debug(
            "Tree placement reached %d of %d nodes (max depth %d)",
            reached,
            len(by_id),
            max_depth,
        )
        return positions

    def _place_branch(
        self,
        center_id: str,
        link_type: LinkType,
        sign: int,
        by_id: Mapping[str, GraphNode],
        child_index: ChildIndex,
        max_depth: int,
        positions: PositionMap,
    ) -> None:
        """Walk one branch depth first, assigning each node on first visit."""

        stack: List[_Frame] = []
        root = self._open_frame(center_id, link_type, 1, 0.0, frozenset({center_id}), by_id, child_index, max_depth)
        if root is not None:
            stack.append(root)

        spacing = self._settings.depth_spacing
        jitter = self._settings.jitter_span
        while stack:
            frame = stack[-1]
            entry = next(frame.siblings, None)
            if entry is None:
                stack.pop()
                continue
            child, y = entry
            if child.id not in positions:
                x = sign * spacing * frame.depth
                z = (hash_to_unit(child.id) - 0.5) * jitter
                positions[child.id] = (x, y, z)
            if child.id in frame.visited:
                continue
            nested = self._open_frame(
                child.id,
                link_type,
                frame.depth + 1,
                y,
                frame.visited | {child.id},
                by_id,
                child_index,
                max_depth,
            )
            if nested is not None:
                stack.append(nested)

    def _open_frame(
        self,
        parent_id: str,
        link_type: LinkType,
        depth: int,
        parent_y: float,
        visited: FrozenSet[str],
        by_id: Mapping[str, GraphNode],
        child_index: ChildIndex,
        max_depth: int,
    ) -> Optional[_Frame]:
        if depth > max_depth:
            return None
        child_ids = child_index.get((parent_id, link_type), [])
        children = sort_nodes(by_id[child_id] for child_id in child_ids if child_id in by_id)
        if not children:
            return None
        offsets = self.stack_offsets(children, parent_y)
        return _Frame(siblings=iter(list(zip(children, offsets))), depth=depth, visited=visited)

    def stack_offsets(self, children: Sequence[GraphNode], parent_y: float) -> List[float]:
        """Return y centers for ``children`` packed contiguously around ``parent_y``."""

        gap = self._settings.sibling_gap
        radii = [self.radius(child) for child in children]
        total_span = 0.0
        for radius in radii:
            total_span += radius * 2
        total_span += gap * (len(children) - 1)

        offsets: List[float] = []
        cursor = -total_span / 2
        for radius in radii:
            offsets.append(parent_y + cursor + radius)
            cursor += radius * 2 + gap
        return offsets

    def _place_unreached(self, nodes: Sequence[GraphNode], positions: PositionMap) -> None:
        settings = self._settings
        index = 0
        for node in nodes:
            if node.id in positions:
                continue
            sign = _SIDE_SIGNS.get(node.side, 0)
            depth = max(1, node.depth)
            x = sign * depth * settings.depth_spacing
            y = (index % settings.fallback_columns) * settings.fallback_row_spacing - settings.fallback_row_offset
            z = (hash_to_unit(node.id) - 0.5) * settings.fallback_jitter_span
            positions[node.id] = (float(x), y, z)
            index += 1


__all__ = ["BRANCHES", "TreePlacer", "build_child_index"]
