"""
FastAPI application factory.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.flags import get_flags
from .api.router import router
from .services.session import clear_sessions

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    settings = get_settings()

    # ── Startup / shutdown ───────────────────────────────────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info("Starting try-on studio (env=%s)", settings.env)

        flags = get_flags()
        logger.info(
            "Flags: gemini=%s accessories=%s",
            flags.use_gemini, flags.enable_accessories,
        )
        if flags.use_gemini:
            logger.info(
                "Models: analysis=%s generation=%s",
                settings.analysis_model, settings.generation_model,
            )
            if not settings.gemini_api_key:
                logger.warning("GEMINI_API_KEY is not set; generation requests will fail")

        logger.info("Try-on studio is ready")
        yield

        clear_sessions()
        logger.info("Try-on studio shut down")

    app = FastAPI(
        title="Try-On Studio",
        description="Two-stage Gemini virtual try-on",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routes ───────────────────────────────────────────────────────
    app.include_router(router)

    return app
