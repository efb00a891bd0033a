"""
Rulequote API - FastAPI application factory.

Nothing is built at import time. Run it with uvicorn's --factory flag:

    uvicorn --factory rulequote.api.main:create_app
"""
import time
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rulequote import __version__
from rulequote.engine import InvalidInput
from rulequote.logging_config import setup_logging
from rulequote.api.state import AppState, build_state
from rulequote.api.quotes_api import router as quotes_router
from rulequote.api.pdf_jobs_api import router as pdf_jobs_router
from rulequote.api.rules_api import router as rules_router

logger = structlog.get_logger(__name__)


def create_app(state: Optional[AppState] = None) -> FastAPI:
    state = state or build_state()
    setup_logging(state.settings.log_level)

    app = FastAPI(
        title="Rulequote API",
        description="Quotes with rules-based discounts and taxes",
        version=__version__,
    )
    app.state.rulequote = state

    # Enable CORS for frontend development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return response

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    app.include_router(quotes_router)
    app.include_router(pdf_jobs_router)
    app.include_router(rules_router)

    @app.get("/")
    async def root():
        return {
            "message": "Rulequote API",
            "version": __version__,
            "endpoints": {
                "health": "/api/health",
                "quotes": "/api/quotes",
                "pdfJobs": "/api/pdf-jobs",
                "rules": "/api/rules",
            },
        }

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    logger.info("api_started", rules_csv=str(state.settings.rules_csv))
    return app
