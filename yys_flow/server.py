"""REST API server."""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from yys_flow.diagram.group_rules import RulesConfigError
from yys_flow.schemas import FlowReport, InspectRequest, PreviewRequest, PreviewResponse
from yys_flow.services.flow_service import inspect_flow, prepare_preview, resolve_rules

logger = logging.getLogger(__name__)

app = FastAPI(title="yys-flow")


def _rules_error_response(exc: RulesConfigError) -> JSONResponse:
    logger.error("Rules config unavailable", extra={"rules_path": exc.path})
    return JSONResponse(status_code=400, content={"error": str(exc), "path": exc.path})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/flow/rules")
def get_rules_api():
    """Return the rule set used by /api/flow/inspect."""
    try:
        rules = resolve_rules()
    except RulesConfigError as exc:
        return _rules_error_response(exc)
    return JSONResponse(content=rules.model_dump(mode="json", by_alias=True))


@app.post("/api/flow/preview", response_model=PreviewResponse)
def preview_flow_api(payload: PreviewRequest):
    """Extract, rewrite asset URLs and re-center a diagram for the preview renderer.

    payload: { graph: {...}, baseUrl?: str, policy?: 'degrade'|'strict', padding?: number }
    """
    graph = prepare_preview(
        payload.graph,
        base_url=payload.base_url,
        policy=payload.policy,
        padding=payload.padding,
    )
    return PreviewResponse(graph=graph)


@app.post("/api/flow/inspect", response_model=FlowReport)
def inspect_flow_api(payload: InspectRequest):
    """Report asset issues and team-composition warnings for the editor."""
    try:
        rules = resolve_rules()
    except RulesConfigError as exc:
        return _rules_error_response(exc)
    return inspect_flow(payload.graph, base_url=payload.base_url, rules=rules)
