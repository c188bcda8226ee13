"""Stable ordering of sibling nodes."""
from __future__ import annotations

from typing import Iterable, List

from ..contracts import GraphNode


def sibling_sort_key(node: GraphNode) -> tuple[int, str]:
    """Return the key ordering nodes by citation count, then identifier."""

    return (-node.cited_by_count, node.id)


def sort_nodes(nodes: Iterable[GraphNode]) -> List[GraphNode]:
    """Order nodes by ``cited_by_count`` descending and ``id`` ascending.

    Args:
        nodes: Nodes in any order.

    Returns:
        List[GraphNode]: New list in a total, input-order independent order.
    """

    return sorted(nodes, key=sibling_sort_key)


__all__ = ["sibling_sort_key", "sort_nodes"]
