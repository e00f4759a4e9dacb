import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from contentlab import __version__
from contentlab.adapters.sqlite.migrator import SQLiteMigrator
from contentlab.api.deps import get_settings
from contentlab.api.errors import install_error_handlers
from contentlab.api.routes import content, publisher, schedule
from contentlab.app_shell.config import validate_ops_rules
from contentlab.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load rules and migrate the database before serving (fail-fast)."""
    settings = get_settings()

    rules = load_rules(settings.rules_path)
    validate_ops_rules(rules)
    logger.info("Rules loaded from %s", settings.rules_path)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()

    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Content Lab API",
        version=__version__,
        lifespan=lifespan if with_lifespan else None,
    )

    app.include_router(content.router, prefix="/api/content", tags=["Content"])
    app.include_router(schedule.router, prefix="/api/schedule", tags=["Schedule"])
    app.include_router(publisher.router, prefix="/api/publisher", tags=["Publisher"])
    install_error_handlers(app)

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api"}

    return app


app = create_app()
