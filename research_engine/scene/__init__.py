"""Scene assembly for the citation graph renderer."""

from .builder import Scene, SceneBuilder, SceneLink, SceneNode
from .styles import DIRECTION_HINTS, LEGEND, link_color, node_color, role_label

__all__ = [
    "DIRECTION_HINTS",
    "LEGEND",
    "Scene",
    "SceneBuilder",
    "SceneLink",
    "SceneNode",
    "link_color",
    "node_color",
    "role_label",
]
