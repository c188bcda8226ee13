"""FastAPI application factory for the Research Engine layout backend."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from research_engine.config import AppConfig, load_config
from research_engine.contracts import CitationGraph
from research_engine.scene import DIRECTION_HINTS, LEGEND
from research_engine.ui import GraphLayoutView, LayoutService

LOGGER = logging.getLogger(__name__)


class LayoutRequest(BaseModel):
    """Request payload for the layout endpoint."""

    graph: CitationGraph
    selected_node_id: Optional[str] = Field(default=None, description="Node to emphasise in the scene")


class SceneNodePayload(BaseModel):
    """Sphere description returned for UI rendering."""

    id: str
    position: Tuple[float, float, float]
    radius: float
    color: str
    emissive_intensity: float
    selected: bool = False
    role: str


class SceneLinkPayload(BaseModel):
    """Line description between two positioned nodes."""

    key: str
    source: str
    target: str
    type: str
    points: Tuple[Tuple[float, float, float], Tuple[float, float, float]]
    color: str
    width: float
    opacity: float


class LayoutResponse(BaseModel):
    """Layout payload consumed by the 3D graph canvas."""

    center_id: Optional[str] = None
    positions: Dict[str, Tuple[float, float, float]] = Field(default_factory=dict)
    nodes: List[SceneNodePayload] = Field(default_factory=list)
    links: List[SceneLinkPayload] = Field(default_factory=list)
    iterations: int = 0
    converged: bool = True
    residual_overlap: float = 0.0


class LegendEntry(BaseModel):
    """Legend swatch shown beside the canvas."""

    key: str
    label: str
    color: str


class UISettingsResponse(BaseModel):
    """UI configuration defaults served to the frontend."""

    backend_url: str
    camera_distance: float
    legend: List[LegendEntry]
    direction_hints: Dict[str, str]


def _layout_response(view: GraphLayoutView) -> LayoutResponse:
    return LayoutResponse(
        center_id=view.center_id,
        positions=dict(view.positions),
        nodes=[
            SceneNodePayload(
                id=node.id,
                position=node.position,
                radius=node.radius,
                color=node.color,
                emissive_intensity=node.emissive_intensity,
                selected=node.selected,
                role=node.role,
            )
            for node in view.scene.nodes
        ],
        links=[
            SceneLinkPayload(
                key=link.key,
                source=link.source,
                target=link.target,
                type=link.type,
                points=link.points,
                color=link.color,
                width=link.width,
                opacity=link.opacity,
            )
            for link in view.scene.links
        ],
        iterations=view.layout.iterations,
        converged=view.layout.converged,
        residual_overlap=view.layout.residual_overlap,
    )


def create_app(
    config: AppConfig | None = None,
    layout_service: Optional[LayoutService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Optional pre-loaded configuration. If omitted, the default
            configuration defined in config.yaml is used.
        layout_service: Optional layout service. When omitted one is built
            from the ``layout`` configuration section.

    Returns:
        FastAPI: Configured FastAPI application.
    """

    resolved_config = config or load_config()
    app = FastAPI(title="Research Engine API", version=resolved_config.pipeline.version)
    app.state.app_config = resolved_config
    app.state.layout_service = layout_service or LayoutService(resolved_config.layout)

    allowed_origins = resolved_config.ui.allowed_origins
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health", tags=["system"], summary="Service health probe")
    def health() -> dict[str, str]:
        """Return service health information."""

        return {"status": "ok", "pipeline_version": resolved_config.pipeline.version}

    @app.get("/api/ui/settings", tags=["ui"], summary="UI configuration defaults")
    def ui_settings() -> UISettingsResponse:
        """Return UI defaults sourced from the configuration file."""

        return UISettingsResponse(
            backend_url=resolved_config.ui.backend_url,
            camera_distance=resolved_config.ui.camera_distance,
            legend=[LegendEntry(key=key, label=label, color=color) for key, label, color in LEGEND],
            direction_hints=dict(DIRECTION_HINTS),
        )

    @app.post(
        "/api/ui/layout",
        tags=["ui"],
        summary="Compute 3D positions for a citation graph",
        response_model=LayoutResponse,
    )
    def layout_graph(payload: LayoutRequest) -> LayoutResponse:
        """Lay out the supplied graph around its center paper."""

        service: Optional[LayoutService] = getattr(app.state, "layout_service", None)
        if service is None:
            raise HTTPException(status_code=503, detail="Layout service unavailable")
        started = perf_counter()
        view = service.layout(payload.graph, selected_node_id=payload.selected_node_id)
        LOGGER.info(
            "Computed layout for %d nodes around %s in %.1f ms (iterations=%d, converged=%s)",
            len(view.positions),
            view.center_id,
            (perf_counter() - started) * 1000,
            view.layout.iterations,
            view.layout.converged,
        )
        return _layout_response(view)

    return app


__all__ = ["LayoutRequest", "LayoutResponse", "UISettingsResponse", "create_app"]
