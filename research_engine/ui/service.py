"""Services powering the UI layout responses."""

from __future__ import annotations

import json
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from hashlib import sha256
from typing import Optional

from ..config import LayoutConfig
from ..contracts import CitationGraph
from ..layout import LayoutResult, PositionMap, compute_layout
from ..scene import Scene, SceneBuilder

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphLayoutView:
    """Layout and scene returned to UI clients for one graph."""

    center_id: Optional[str]
    layout: LayoutResult
    scene: Scene

    @property
    def positions(self) -> PositionMap:
        return self.layout.positions

    @property
    def is_empty(self) -> bool:
        return self.layout.is_empty


def graph_fingerprint(graph: CitationGraph) -> str:
    """Return a stable SHA-256 digest identifying the graph payload."""

    payload = graph.model_dump(mode="json", by_alias=True)
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return sha256(encoded).hexdigest()


class LayoutService:
    """Compute graph layouts, memoizing results per graph payload."""

    def __init__(self, settings: Optional[LayoutConfig] = None) -> None:
        self._settings = settings or LayoutConfig()
        self._max_entries = self._settings.cache_max_entries
        self._cache: "OrderedDict[str, LayoutResult]" = OrderedDict()
        self._lock = threading.Lock()
        tree = self._settings.tree
        self._scene_builder = SceneBuilder(min_radius=tree.min_radius, size_scale=tree.size_radius_scale)

    @property
    def cached_layouts(self) -> int:
        with self._lock:
            return len(self._cache)

    def layout(self, graph: CitationGraph, *, selected_node_id: Optional[str] = None) -> GraphLayoutView:
        """Lay out ``graph`` and build its scene.

        Args:
            graph: Citation graph payload including the center identifier.
            selected_node_id: Node to emphasise in the scene.

        Returns:
            GraphLayoutView: Empty positions and scene when the center is unknown.
        """

        center_id = graph.center_id
        result = self._cached_layout(graph, center_id)
        scene = self._scene_builder.build(
            graph.nodes,
            graph.links,
            result.positions,
            selected_node_id=selected_node_id,
        )
        return GraphLayoutView(center_id=center_id, layout=result, scene=scene)

    def clear(self) -> None:
        """Drop every memoized layout."""

        with self._lock:
            self._cache.clear()

    def _cached_layout(self, graph: CitationGraph, center_id: Optional[str]) -> LayoutResult:
        if self._max_entries == 0:
            return compute_layout(graph.nodes, graph.links, center_id, settings=self._settings)

        key = graph_fingerprint(graph)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached

        result = compute_layout(graph.nodes, graph.links, center_id, settings=self._settings)
        with self._lock:
            self._cache[key] = result
            self._cache.move_to_end(key)
            while len(self._cache) > self._max_entries:
                evicted, _ = self._cache.popitem(last=False)
                LOGGER.info("Evicted cached layout %s", evicted[:12])
        return result
