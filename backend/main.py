import logging

from fastapi import FastAPI

from core.config import get_settings
from core.cors import install_cors
from core.database import init_database, dispose_database
from core.errors import install_error_handlers
from core.logging import setup_logging
from routes.api_v1 import api_v1_router


settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

# CORS first so preflight never reaches routing or auth.
install_cors(app)
install_error_handlers(app)

app.include_router(api_v1_router)


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook."""
    await init_database(settings.database_url)
    logger.info(
        "Application startup complete (env=%s, timezone=%s, bankroll policy=%s, identity configured=%s)",
        settings.env,
        settings.timezone,
        settings.bankroll_write_policy,
        settings.identity_configured,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    """Application shutdown hook."""
    await dispose_database()
    logger.info("Application shutdown complete")


@app.get("/health")
async def health() -> dict:
    """Simple health check endpoint."""
    return {"status": "ok"}
