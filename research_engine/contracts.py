"""Immutable data contracts for citation graph payloads."""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeSide(str, Enum):
    """Relation of a paper to the center of the citation graph."""

    CENTER = "center"
    BACKWARD = "backward"
    FORWARD = "forward"
    BOTH = "both"
    OTHER = "other"


class LinkType(str, Enum):
    """Directed citation relations followed by the layout engine."""

    REFERENCES = "references"
    CITED_BY = "cited_by"


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


def _finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not numeric."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
    elif isinstance(value, str):
        try:
            numeric = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


class GraphNode(_FrozenBaseModel):
    """Paper node as delivered by the graph retrieval backend."""

    id: str = Field(..., min_length=1)
    cited_by_count: int = Field(0, ge=0)
    side: NodeSide = NodeSide.OTHER
    depth: int = Field(1, ge=0)
    size: float = Field(0.0, ge=0.0)
    title: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    venue: Optional[str] = None
    openalex_url: Optional[str] = None

    @field_validator("cited_by_count", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        numeric = _finite_number(value)
        if numeric is None or numeric < 0:
            return 0
        return int(numeric)

    @field_validator("depth", mode="before")
    @classmethod
    def _coerce_depth(cls, value: Any) -> int:
        numeric = _finite_number(value)
        if numeric is None or numeric < 0:
            return 1
        return int(numeric)

    @field_validator("size", mode="before")
    @classmethod
    def _coerce_size(cls, value: Any) -> float:
        numeric = _finite_number(value)
        if numeric is None or numeric < 0:
            return 0.0
        return numeric

    @field_validator("side", mode="before")
    @classmethod
    def _coerce_side(cls, value: Any) -> NodeSide:
        if isinstance(value, NodeSide):
            return value
        if isinstance(value, str):
            try:
                return NodeSide(value.strip().lower())
            except ValueError:
                return NodeSide.OTHER
        return NodeSide.OTHER

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> Optional[int]:
        numeric = _finite_number(value)
        if numeric is None:
            return None
        return int(numeric)

    @field_validator("authors", mode="before")
    @classmethod
    def _coerce_authors(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [str(author) for author in value if author]


class GraphLink(_FrozenBaseModel):
    """Directed citation relation between two paper nodes."""

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)

    @property
    def link_type(self) -> Optional[LinkType]:
        """Return the followed relation type, or ``None`` for other links.

        Only the exact lowercase relation names are followed.
        """

        try:
            return LinkType(self.type)
        except ValueError:
            return None


class GraphMeta(_FrozenBaseModel):
    """Graph-level metadata accompanying nodes and links."""

    center_work_id: Optional[str] = Field(default=None, alias="centerWorkId")


class CitationGraph(_FrozenBaseModel):
    """Complete citation graph payload consumed by the layout engine."""

    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)
    meta: GraphMeta = Field(default_factory=GraphMeta)

    @property
    def center_id(self) -> Optional[str]:
        """Return the configured center identifier when it is non-empty."""

        center = self.meta.center_work_id
        if center is None or not center.strip():
            return None
        return center


__all__ = [
    "CitationGraph",
    "GraphLink",
    "GraphMeta",
    "GraphNode",
    "LinkType",
    "NodeSide",
]
