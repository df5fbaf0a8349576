from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from metricstream.api.router import api_router
from metricstream.core.config import settings
from metricstream.core.logger import configure_logging, get_logger
from metricstream.domain.errors import ConfigurationError
from metricstream.infrastructure.elasticsearch.client import (
    create_client,
    wait_for_backend,
)
from metricstream.services.snapshot_service import SnapshotService

# Configure logging once and get service logger
configure_logging()
logger = get_logger("metricstream.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "metricstream_starting",
        extra={
            "index": settings.elasticsearch_index,
            "profile": settings.snapshot_profile,
            "tick_interval_seconds": settings.stream_tick_interval_seconds,
            "window_seconds": settings.snapshot_window_seconds,
        },
    )
    app.state.elasticsearch = create_client(settings)
    await wait_for_backend(
        app.state.elasticsearch, settings.elasticsearch_connect_retries
    )
    app.state.snapshot_service = SnapshotService.from_settings(
        app.state.elasticsearch, settings
    )
    try:
        yield
    finally:
        logger.info("metricstream_stopping")
        await app.state.snapshot_service.close()
        await app.state.elasticsearch.close()


app = FastAPI(title="Metricbeat Stream", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def run() -> None:
    import uvicorn

    if settings.app_port is None:
        raise ConfigurationError("APP_PORT must be set")
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
