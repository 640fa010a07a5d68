"""FastAPI application: entry point."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routes import campaigns, health
from app.schemas.common import ErrorResponse
from config import Settings, get_settings
from crowdfund.services.errors import (
    ConfigurationMissing,
    CrowdfundError,
    LedgerRejected,
    TransportFailure,
)

logger: logging.Logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[CrowdfundError], int], ...] = (
    (ConfigurationMissing, 503),
    (TransportFailure, 502),
    (LedgerRejected, 422),
)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = get_settings()
    logger.info("Chain: %s (id %s)", settings.chain.rpc_url, settings.chain.chain_id)
    yield


def create_app() -> FastAPI:
    app: FastAPI = FastAPI(
        title="Crowdfund Campaign API",
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    @app.exception_handler(CrowdfundError)
    async def _on_crowdfund_error(request: Request, exc: CrowdfundError) -> JSONResponse:
        status: int = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        body: ErrorResponse = ErrorResponse(detail=str(exc), type=type(exc).__name__)
        return JSONResponse(status_code=status, content=body.model_dump())

    app.include_router(health.router)
    app.include_router(campaigns.router)

    return app


app: FastAPI = create_app()


def start() -> None:
    """Entry point for crowdfund-api."""
    project_root: Path = Path(__file__).resolve().parent.parent
    os.chdir(project_root)

    for candidate in (project_root / ".env", project_root.parent / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=False)

    reload: bool = os.environ.get("CROWDFUND_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=reload,
    )
