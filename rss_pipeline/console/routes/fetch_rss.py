from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from rss_pipeline.console.schemas.fetch_rss import FetchRssRequest
from rss_pipeline.console.services import fetch_rss as fetch_rss_service

router = APIRouter(tags=["ingestion"])


@router.post("/fetch-rss", summary="Run one ingestion or pipeline action")
def fetch_rss(payload: FetchRssRequest) -> JSONResponse:
    status_code, body = fetch_rss_service.dispatch(payload)
    return JSONResponse(status_code=status_code, content=body)


__all__ = ["router"]
