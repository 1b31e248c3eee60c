"""Transcription API simulator - FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from transcription_sim.config import Settings, settings
from transcription_sim.api.router import api_router
from transcription_sim.api import info as info_api
from transcription_sim.api import uploads as uploads_api
from transcription_sim.jobs.lifecycle import InProcessLifecycleEngine
from transcription_sim.jobs.randomizer import OutcomeRandomizer

logger = logging.getLogger(__name__)


def configure_logging(config: Settings) -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    config: Optional[Settings] = None,
    randomizer: Optional[OutcomeRandomizer] = None,
) -> FastAPI:
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown logic."""
        configure_logging(config)
        logger.info("Starting Transcription API simulator on port %d", config.port)
        logger.info(
            "Failure simulation: upload %.0f%%, timeout %.0f%%, processing %.0f%%",
            config.upload_failure_rate * 100,
            config.timeout_rate * 100,
            config.processing_failure_rate * 100,
        )

        outcomes = randomizer or OutcomeRandomizer(
            slow_response_rate=config.slow_response_rate,
            slow_response_range=(config.slow_response_min_seconds, config.slow_response_max_seconds),
        )
        engine = InProcessLifecycleEngine.from_settings(config, outcomes)
        await engine.start()

        # Wire engine, randomizer and settings into API endpoints
        uploads_api.set_engine(engine)
        uploads_api.set_randomizer(outcomes)
        uploads_api.set_settings(config)
        info_api.set_settings(config)
        app.state.engine = engine

        yield

        logger.info("Shutting down Transcription API simulator")
        await engine.stop()
        uploads_api.set_engine(None)
        uploads_api.set_randomizer(None)

    app = FastAPI(
        title="Transcription API",
        description="Simulated audio transcription service for testing",
        version=info_api.VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def error_body(request: Request, exc: StarletteHTTPException):
        # Clients expect {"error": message} rather than FastAPI's {"detail": ...}
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    app.include_router(api_router)
    return app


def run() -> None:
    configure_logging(settings)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


app = create_app()


if __name__ == "__main__":
    run()
