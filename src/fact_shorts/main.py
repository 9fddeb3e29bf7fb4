"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fact_shorts.api.dependencies import build_pipeline
from fact_shorts.api.routes import router
from fact_shorts.config import settings

logger = structlog.get_logger()


def configure_logging(level: str = "INFO") -> None:
    """Console-rendered structlog output filtered at *level*."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# CORS configuration
# ---------------------------------------------------------------------------


def _get_allowed_origins() -> list[str]:
    if not settings.allowed_origins:
        return ["*"]
    return [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared HTTP client and pipeline; close them on shutdown."""
    configure_logging(settings.log_level)
    settings.work_path.mkdir(parents=True, exist_ok=True)

    async with httpx.AsyncClient(timeout=settings.http_timeout) as http_client:
        app.state.pipeline, app.state.blob_store = build_pipeline(settings, http_client)
        logger.info(
            "app.startup",
            work_dir=str(settings.work_path),
            ffmpeg=settings.resolve_ffmpeg(),
            ffprobe=settings.resolve_ffprobe(),
        )
        yield

    logger.info("app.shutdown")


app = FastAPI(
    title="Fact Shorts Generator",
    description="Narrated fact videos from a single subject",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
