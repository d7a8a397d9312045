"""FastAPI application for DocPipe Studio.

Serves the mock document analysis endpoint and a small surface over
multimodal configuration sessions for the browser client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from docpipe.analysis.service import MockDocumentAnalyzer, generate_recommendations
from docpipe.config.settings import DocPipeSettings, settings
from docpipe.models.analysis import (
    AnalyzeDocumentRequest,
    AnalyzeDocumentResponse,
    ProcessingRecommendation,
)
from docpipe.models.multimodal import MultimodalConfig, UpdateSource
from docpipe.sync.session import ConfigSession, SessionNotFoundError, SessionRegistry
from docpipe.utils.monitoring import log_error_with_context

ANALYSIS_FAILED_MESSAGE = "Failed to analyze document"


class SessionCreateRequest(BaseModel):
    config: MultimodalConfig | None = None


class MultimodalUpdateRequest(BaseModel):
    """Partial multimodal update as sent by the UI or the assistant.

    The flags may be given flat in ``partial`` or nested the way conversation
    actions carry them (``configuration.rag.multimodal`` or ``multimodal``).
    """

    source: UpdateSource = UpdateSource.USER
    partial: dict[str, Any] | None = None
    configuration: dict[str, Any] | None = None
    multimodal: dict[str, Any] | None = None

    def raw_partial(self) -> dict[str, Any] | None:
        if self.partial is not None:
            return self.partial
        if self.configuration is not None:
            return {"configuration": self.configuration}
        if self.multimodal is not None:
            return {"multimodal": self.multimodal}
        return None


class RecommendationsRequest(BaseModel):
    recommendations: list[ProcessingRecommendation] = Field(default_factory=list)


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_analyzer(request: Request) -> MockDocumentAnalyzer:
    return request.app.state.analyzer


def _session_or_404(registry: SessionRegistry, session_id: str) -> ConfigSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found") from None


def _session_state(session: ConfigSession) -> dict[str, Any]:
    last = session.last_emitted
    return {
        "sessionId": session.session_id,
        "config": session.config.to_payload(),
        "lastEmitted": last.to_payload() if last is not None else None,
        "pendingUpdates": session.pending_updates,
    }


def create_app(
    cfg: DocPipeSettings | None = None,
    *,
    analyzer: MockDocumentAnalyzer | None = None,
    registry: SessionRegistry | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Settings; defaults to the global settings instance.
        analyzer: Mock analyzer; built from ``cfg.analysis`` when omitted.
        registry: Session registry; a fresh one is created when omitted.

    Returns:
        FastAPI: Configured application.
    """
    cfg = cfg or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        closed = app.state.registry.close_all()
        logger.info("Shutdown closed {} config sessions", closed)

    app = FastAPI(title=cfg.app_name, version=cfg.app_version, lifespan=lifespan)
    app.state.settings = cfg
    app.state.analyzer = analyzer or MockDocumentAnalyzer(cfg=cfg.analysis)
    app.state.registry = registry or SessionRegistry(cfg=cfg)

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": cfg.app_version}

    @app.post("/api/analyze-document")
    async def analyze_document(
        request: Request,
        analyzer_inst: MockDocumentAnalyzer = Depends(get_analyzer),
    ) -> JSONResponse:
        try:
            payload = await request.json()
            body = AnalyzeDocumentRequest.model_validate(payload)
            analysis = analyzer_inst.analyze(body.file_name, body.file_type, body.file_size)
            response = AnalyzeDocumentResponse(
                analysis=analysis,
                recommendations=generate_recommendations(analysis),
            )
        except Exception as exc:
            log_error_with_context(exc, "analyze_document")
            return JSONResponse(
                {"success": False, "error": ANALYSIS_FAILED_MESSAGE}, status_code=500
            )
        logger.info(
            "analyze.endpoint completed file={} type={} recommendations={}",
            body.file_name,
            analysis.document_type,
            len(response.recommendations),
        )
        return JSONResponse(response.model_dump(mode="json", by_alias=True))

    @app.post("/api/sessions", status_code=201)
    async def create_session(
        body: SessionCreateRequest | None = None,
        registry_inst: SessionRegistry = Depends(get_registry),
    ) -> dict[str, Any]:
        session = registry_inst.create(initial=body.config if body else None)
        logger.info("session.created id={}", session.session_id)
        return {"sessionId": session.session_id, "config": session.config.to_payload()}

    @app.get("/api/sessions/{session_id}/multimodal")
    async def get_multimodal(
        session_id: str,
        registry_inst: SessionRegistry = Depends(get_registry),
    ) -> dict[str, Any]:
        return _session_state(_session_or_404(registry_inst, session_id))

    @app.post("/api/sessions/{session_id}/multimodal")
    async def update_multimodal(
        session_id: str,
        body: MultimodalUpdateRequest,
        registry_inst: SessionRegistry = Depends(get_registry),
    ) -> dict[str, Any]:
        session = _session_or_404(registry_inst, session_id)
        outcome = session.submit(body.raw_partial(), body.source)
        return {"outcome": outcome.value, **_session_state(session)}

    @app.post("/api/sessions/{session_id}/recommendations")
    async def apply_recommendations(
        session_id: str,
        body: RecommendationsRequest,
        registry_inst: SessionRegistry = Depends(get_registry),
    ) -> dict[str, Any]:
        session = _session_or_404(registry_inst, session_id)
        outcome = session.apply_recommendations(body.recommendations)
        return {
            "outcome": outcome.value if outcome is not None else None,
            **_session_state(session),
        }

    @app.delete("/api/sessions/{session_id}", status_code=204)
    async def delete_session(
        session_id: str,
        registry_inst: SessionRegistry = Depends(get_registry),
    ) -> Response:
        try:
            registry_inst.close(session_id)
        except SessionNotFoundError:
            raise HTTPException(status_code=404, detail="Session not found") from None
        logger.info("session.closed id={}", session_id)
        return Response(status_code=204)

    return app


__all__ = ["create_app"]
