import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from ordertrack import __version__
from ordertrack.api.deps import get_settings
from ordertrack.api.routes import orders, reports
from ordertrack.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Validate the rules file on startup (fail-fast)."""
    settings = get_settings()
    try:
        load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError):
        logger.exception("Rules load failed for %s", settings.rules_path)
        raise
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Order Track API",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
    app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api"}

    return app


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
