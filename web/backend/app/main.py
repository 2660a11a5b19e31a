"""FastAPI application for the Responsible AI demo backend.

Provides REST and streaming endpoints wrapping the RAI package for:
- Guarded vs unguarded chat sessions
- Scenario runs (UC-01 through UC-08)
- The in-memory interaction audit log
- Stand-alone guardrail inspection
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rai import __version__
from rai.config import Settings
from rai.logging import setup_logging
from web.backend.app.routers import chat, guardrails, scenarios


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application and configure logging."""
    settings = settings or Settings.from_env()
    setup_logging(level=settings.log_level, dev_mode=settings.dev_mode)

    app = FastAPI(
        title="RAI Demo API",
        description=(
            "Backend for the Responsible AI demo. Runs the same engineering "
            "scenarios with and without guardrails and audits every interaction."
        ),
        version=__version__,
    )

    # -----------------------------------------------------------------------
    # CORS middleware (allow all origins for development)
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Include routers
    # -----------------------------------------------------------------------
    app.include_router(chat.router)
    app.include_router(scenarios.router)
    app.include_router(guardrails.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "RAI Demo API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
