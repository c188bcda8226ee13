"""Visual encodings for citation graph nodes and links."""
from __future__ import annotations

from ..contracts import GraphLink, GraphNode, LinkType, NodeSide

NODE_COLORS = {
    NodeSide.CENTER: "#ffd166",
    NodeSide.BACKWARD: "#4dd0e1",
    NodeSide.FORWARD: "#ff8a65",
}
DEFAULT_NODE_COLOR = "#e6ee9c"

REFERENCE_LINK_COLOR = "#2dc7e0"
CITATION_LINK_COLOR = "#ff7043"

SELECTED_EMISSIVE_INTENSITY = 0.85
DEFAULT_EMISSIVE_INTENSITY = 0.42

ROLE_LABELS = {
    NodeSide.CENTER: "Center paper",
    NodeSide.BACKWARD: "Reference (backward)",
    NodeSide.FORWARD: "Citation (forward)",
    NodeSide.BOTH: "Reference and citation",
}
UNKNOWN_ROLE = "Unknown"

LEGEND = (
    ("center", "Center", NODE_COLORS[NodeSide.CENTER]),
    ("backward", "Backward", NODE_COLORS[NodeSide.BACKWARD]),
    ("forward", "Forward", NODE_COLORS[NodeSide.FORWARD]),
)
DIRECTION_HINTS = {
    "left": "References (older)",
    "right": "Cited by (newer)",
}


def node_color(node: GraphNode) -> str:
    return NODE_COLORS.get(node.side, DEFAULT_NODE_COLOR)


def link_color(link: GraphLink) -> str:
    if link.link_type is LinkType.REFERENCES:
        return REFERENCE_LINK_COLOR
    return CITATION_LINK_COLOR


def emissive_intensity(selected: bool) -> float:
    return SELECTED_EMISSIVE_INTENSITY if selected else DEFAULT_EMISSIVE_INTENSITY


def role_label(node: GraphNode) -> str:
    """Return the info panel description of the node's relation to the center."""

    return ROLE_LABELS.get(node.side, UNKNOWN_ROLE)
