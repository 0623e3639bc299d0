from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from medcompare.api.deps import get_orchestrator
from medcompare.errors import InputError
from medcompare.models.schemas import SearchRequest, SourceSearchRequest
from medcompare.services import logger as log_service
from medcompare.services.orchestrator import RetrievalOrchestrator

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search")
@router.post("/apollo-search", include_in_schema=False)
async def search(
    request: SearchRequest,
    orchestrator: RetrievalOrchestrator = Depends(get_orchestrator),
):
    """Search every enabled source for a keyword; one entry per enabled source."""
    try:
        response = await orchestrator.run(
            request.keyword,
            enabled=request.enabled_scrapers,
            timeouts=request.timeout_seconds(),
        )
    except InputError as exc:
        log_service.log_event(event_type="search_rejected", message=str(exc))
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})
    return response.to_payload()


@router.post("/search/{source}")
async def search_source(
    source: str,
    request: SourceSearchRequest,
    orchestrator: RetrievalOrchestrator = Depends(get_orchestrator),
):
    """Search a single source, e.g. PharmEasy only."""
    if source not in orchestrator.source_ids:
        raise HTTPException(status_code=404, detail=f"Unknown source: {source}")
    try:
        result = await orchestrator.run_source(source, request.keyword)
    except InputError as exc:
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})
    return {"success": True, **result.to_payload()}
