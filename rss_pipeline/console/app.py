from __future__ import annotations

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rss_pipeline.console.routes import fetch_rss, health
from rss_pipeline.console.security import require_caller


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg") or "Invalid value")
    return f"{location}: {message}" if location else message


async def _invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": _validation_message(exc)},
    )


def create_app() -> FastAPI:
    """Build the FastAPI application serving the ingestion actions."""
    app = FastAPI(
        title="RSS Ingestion Pipeline",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.add_exception_handler(RequestValidationError, _invalid_request_handler)

    protected_dependencies = [Depends(require_caller)]

    app.include_router(health.router)
    app.include_router(fetch_rss.router, dependencies=protected_dependencies)
    return app


app = create_app()


__all__ = ["create_app", "app"]
