"""UI support services for the citation graph view."""

from .service import GraphLayoutView, LayoutService, graph_fingerprint

__all__ = [
    "GraphLayoutView",
    "LayoutService",
    "graph_fingerprint",
]
