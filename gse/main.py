from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from gse.core.config import settings
from gse.core.logging import setup_logging
from gse.adaptive.cognitive_state import (
    CognitiveStateEngine,
    KeystrokeFeatureExtractor,
    KeystrokePipeline,
)
from gse.routers import cognitive_state


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown events"""
    setup_logging()
    logger.info("Starting GSE Cognitive State API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    yield

    logger.info("Shutting down GSE Cognitive State API")


def create_app() -> FastAPI:
    """
    Build the API around a single engine instance.

    The engine and pipeline live on ``app.state`` and reach the routers
    through dependency providers; there is no process-wide engine.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Real-time Flow / Incubation / Stuck estimation from keystroke dynamics",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    engine = CognitiveStateEngine()
    app.state.engine = engine
    app.state.pipeline = KeystrokePipeline(
        engine,
        KeystrokeFeatureExtractor(
            window_seconds=settings.FEATURE_WINDOW_SECONDS,
            pause_threshold_ms=settings.PAUSE_THRESHOLD_MS,
            min_flight_time_ms=settings.MIN_FLIGHT_TIME_MS,
        ),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(cognitive_state.router, prefix="/api/cognitive-state", tags=["cognitive-state"])

    @app.get("/")
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "paused": app.state.engine.is_paused(),
            "lock_recoveries": app.state.engine.recoveries(),
        }

    return app


app = create_app()
