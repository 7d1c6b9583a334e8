"""FastAPI app entry point for the gSnake editor API."""

import logging

from fastapi import FastAPI

from api.cors import install_cors
from api.test_level import router as test_level_router
from config import SERVICE_NAME, Settings, load_settings
from engine.store import TestLevelStore


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app around a settings snapshot and a fresh test level store."""
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="gSnake Editor API",
        description="Validates levels from the gSnake editor and hands them to the game for testing",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.store = TestLevelStore(ttl_seconds=settings.test_level_ttl_seconds)

    install_cors(app, settings.allowed_origins)
    app.include_router(test_level_router, prefix="/api", tags=["Test Level"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "service": SERVICE_NAME}

    return app


app = create_app()
