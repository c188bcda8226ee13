"""Assemble render-ready scene descriptions from laid out graphs."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from ..contracts import GraphLink, GraphNode
from ..layout.geometry import MIN_NODE_RADIUS, SIZE_RADIUS_SCALE, Position, node_radius
from .styles import emissive_intensity, link_color, node_color, role_label

LOGGER = logging.getLogger(__name__)

LINK_WIDTH = 1.2
LINK_OPACITY = 0.52


@dataclass(frozen=True)
class SceneNode:
    """Sphere drawn for one paper."""

    id: str
    position: Position
    radius: float
    color: str
    emissive_intensity: float
    selected: bool
    role: str


@dataclass(frozen=True)
class SceneLink:
    """Line segment drawn between two positioned papers."""

    key: str
    source: str
    target: str
    type: str
    points: tuple[Position, Position]
    color: str
    width: float = LINK_WIDTH
    opacity: float = LINK_OPACITY


@dataclass(frozen=True)
class Scene:
    """Spheres and lines making up a rendered citation graph."""

    nodes: List[SceneNode]
    links: List[SceneLink]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def link_count(self) -> int:
        return len(self.links)


class SceneBuilder:
    """Convert nodes, links and layout positions into scene primitives."""

    def __init__(
        self,
        *,
        min_radius: float = MIN_NODE_RADIUS,
        size_scale: float = SIZE_RADIUS_SCALE,
    ) -> None:
        self._min_radius = min_radius
        self._size_scale = size_scale

    def build(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        positions: Mapping[str, Position],
        *,
        selected_node_id: Optional[str] = None,
    ) -> Scene:
        """Build a scene, omitting nodes and links that lack a position.

        Args:
            nodes: Graph nodes in display order.
            links: Graph links in display order.
            positions: Layout positions keyed by node id.
            selected_node_id: Node to emphasise, if any.

        Returns:
            Scene: Spheres for positioned nodes and lines for resolved links.
        """

        # Duplicate ids keep their first slot and their last record.
        latest: Dict[str, GraphNode] = {}
        for node in nodes:
            latest[node.id] = node

        scene_nodes: List[SceneNode] = []
        for node in latest.values():
            position = positions.get(node.id)
            if position is None:
                continue
            selected = node.id == selected_node_id
            scene_nodes.append(
                SceneNode(
                    id=node.id,
                    position=position,
                    radius=node_radius(node, min_radius=self._min_radius, size_scale=self._size_scale),
                    color=node_color(node),
                    emissive_intensity=emissive_intensity(selected),
                    selected=selected,
                    role=role_label(node),
                )
            )

        scene_links: List[SceneLink] = []
        skipped = 0
        for link in links:
            start = positions.get(link.source)
            end = positions.get(link.target)
            if start is None or end is None:
                skipped += 1
                continue
            scene_links.append(
                SceneLink(
                    key=f"{link.source}-{link.target}-{link.type}",
                    source=link.source,
                    target=link.target,
                    type=link.type,
                    points=(start, end),
                    color=link_color(link),
                )
            )
        if skipped:
            LOGGER.debug("Omitted %d links with unresolved endpoints", skipped)
        return Scene(nodes=scene_nodes, links=scene_links)
