"""Tests for the initial tree placement of citation graph nodes."""

from __future__ import annotations

from typing import Iterable, Tuple

import pytest

from research_engine.config import TreeLayoutConfig
from research_engine.contracts import GraphLink, GraphNode, LinkType
from research_engine.layout.tree import TreePlacer, build_child_index


def _center(node_id: str = "C") -> GraphNode:
    return GraphNode(id=node_id, side="center", depth=0, cited_by_count=100)


def _node(node_id: str, side: str, *, depth: int = 1, count: int = 0, size: float = 0.0) -> GraphNode:
    return GraphNode(id=node_id, side=side, depth=depth, cited_by_count=count, size=size)


def _links(link_type: str, *pairs: Tuple[str, str]) -> list[GraphLink]:
    return [GraphLink(source=source, target=target, type=link_type) for source, target in pairs]


def _place(nodes: Iterable[GraphNode], links: Iterable[GraphLink], center_id: str = "C"):
    return TreePlacer().place(list(nodes), list(links), center_id)


def test_child_index_deduplicates_and_skips_unknown_types() -> None:
    links = _links("references", ("C", "A"), ("C", "A"), ("C", "B"))
    links += _links("related", ("C", "Z"))
    index = build_child_index(links)
    assert index == {("C", LinkType.REFERENCES): ["A", "B"]}


def test_relation_names_are_case_sensitive() -> None:
    nodes = [_center(), _node("A", "backward")]
    positions = _place(nodes, _links("References", ("C", "A")))

    assert build_child_index(_links("References", ("C", "A"))) == {}
    assert positions["A"][:2] == (-10.0, -5.5)


def test_siblings_are_stacked_by_citation_order() -> None:
    nodes = [_center(), _node("b", "backward", count=5), _node("a", "backward", count=5), _node("c", "backward", count=9)]
    positions = _place(nodes, _links("references", ("C", "b"), ("C", "a"), ("C", "c")))

    assert positions["c"][1] == pytest.approx(-1.35)
    assert positions["a"][1] == pytest.approx(0.0)
    assert positions["b"][1] == pytest.approx(1.35)
    assert sorted(["a", "b", "c"], key=lambda node_id: positions[node_id][1]) == ["c", "a", "b"]
    assert {positions[node_id][0] for node_id in "abc"} == {-10.0}


def test_tertiary_axis_uses_hash_jitter() -> None:
    nodes = [_center(), _node("a", "backward")]
    positions = _place(nodes, _links("references", ("C", "a")))
    assert positions["a"][2] == pytest.approx((0.097 - 0.5) * 4.2)


def test_branches_diverge_by_depth() -> None:
    nodes = [
        _center(),
        _node("R1", "backward"),
        _node("R2", "backward", depth=2),
        _node("F1", "forward"),
        _node("F2", "forward", depth=2),
    ]
    links = _links("references", ("C", "R1"), ("R1", "R2")) + _links("cited_by", ("C", "F1"), ("F1", "F2"))
    positions = _place(nodes, links)

    assert positions["C"] == (0.0, 0.0, 0.0)
    assert positions["R1"][0] == -10.0
    assert positions["R2"][0] == -20.0
    assert positions["F1"][0] == 10.0
    assert positions["F2"][0] == 20.0


def test_children_are_centered_on_parent_offset() -> None:
    nodes = [
        _center(),
        _node("A", "backward", count=2),
        _node("B", "backward", count=1),
        _node("A1", "backward", depth=2),
    ]
    links = _links("references", ("C", "A"), ("C", "B"), ("A", "A1"))
    positions = _place(nodes, links)
    assert positions["A1"][1] == pytest.approx(positions["A"][1])


def test_mixed_radii_are_packed_contiguously() -> None:
    placer = TreePlacer()
    children = [_node("big", "backward", size=10), _node("small", "backward")]
    offsets = placer.stack_offsets(children, 2.0)
    assert offsets == pytest.approx([1.325, 3.325])


def test_first_assignment_wins_across_parents() -> None:
    nodes = [
        _center(),
        _node("A", "backward"),
        _node("B", "backward"),
        _node("D", "backward", depth=2),
    ]
    links = _links("references", ("C", "A"), ("C", "B"), ("A", "D"), ("B", "D"))
    positions = _place(nodes, links)

    assert positions["A"][1] == pytest.approx(-0.675)
    assert positions["B"][1] == pytest.approx(0.675)
    assert positions["D"][0] == -20.0
    assert positions["D"][1] == pytest.approx(positions["A"][1])


def test_center_is_never_overwritten_by_back_links() -> None:
    nodes = [_center(), _node("A", "backward"), _node("B", "backward", depth=5)]
    links = _links("references", ("C", "A"), ("A", "B"), ("B", "A"), ("A", "C"))
    positions = _place(nodes, links)

    assert positions["C"] == (0.0, 0.0, 0.0)
    assert positions["A"][0] == -10.0
    assert positions["B"][0] == -20.0


def test_duplicate_links_do_not_duplicate_siblings() -> None:
    nodes = [_center(), _node("A", "backward")]
    positions = _place(nodes, _links("references", ("C", "A"), ("C", "A")))
    assert positions["A"][1] == pytest.approx(0.0)


def test_dangling_links_are_ignored() -> None:
    nodes = [_center(), _node("A", "forward")]
    links = _links("cited_by", ("C", "A"), ("C", "GHOST"), ("GHOST", "A"))
    positions = _place(nodes, links)
    assert set(positions) == {"C", "A"}


def test_depth_bound_stops_branch_and_uses_fallback() -> None:
    nodes = [_center(), _node("A", "backward"), _node("B", "backward")]
    positions = _place(nodes, _links("references", ("C", "A"), ("A", "B")))

    assert positions["A"][0] == -10.0
    x, y, z = positions["B"]
    assert x == -10.0
    assert y == pytest.approx(-5.5)
    assert z == pytest.approx((0.066 - 0.5) * 4.8)


def test_fallback_uses_side_and_depth() -> None:
    nodes = [_center(), _node("F", "forward", depth=3), _node("O", "both", depth=0)]
    positions = _place(nodes, [])

    assert positions["F"][0] == 30.0
    assert positions["O"][0] == 0.0
    assert positions["F"][1] == pytest.approx(-5.5)
    assert positions["O"][1] == pytest.approx(-3.9)


def test_fallback_grid_wraps_after_eight_rows() -> None:
    loose = [_node(f"N{index}", "other") for index in range(10)]
    positions = _place([_center(), *loose], [])

    rows = [positions[node.id][1] for node in loose]
    expected = [(index % 8) * 1.6 - 5.5 for index in range(10)]
    assert rows == pytest.approx(expected)


def test_custom_spacing_is_respected() -> None:
    settings = TreeLayoutConfig(depth_spacing=4.0, jitter_span=0.0)
    nodes = [_center(), _node("A", "backward")]
    positions = TreePlacer(settings).place(nodes, _links("references", ("C", "A")), "C")
    assert positions["A"] == pytest.approx((-4.0, 0.0, 0.0))
