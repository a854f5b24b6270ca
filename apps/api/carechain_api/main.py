"""CareChain API - Main FastAPI application."""

import logging
import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy import text

from carechain_api.db.session import SessionLocal
from carechain_api.errors import CareChainError
from carechain_api.middleware.auth import AuthMiddleware
from carechain_api.middleware.correlation import CorrelationIdFilter, CorrelationIDMiddleware
from carechain_api.middleware.roles import RoleMiddleware
from carechain_api.routes import access, admin, claims, ledger, prescriptions, records, stats
from carechain_api.routes.errors import carechain_error_handler
from carechain_api.settings import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s", '
    '"module": "%(name)s", "correlation_id": "%(correlation_id)s"}',
    handlers=[logging.StreamHandler(sys.stdout)],
)
for handler in logging.getLogger().handlers:
    handler.addFilter(CorrelationIdFilter())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting CareChain API...")
    try:
        settings.validate_production_settings()
    except ValueError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ValueError(f"Invalid configuration: {e}") from e

    yield
    logger.info("Shutting down CareChain API...")


def create_app(session_factory=None) -> FastAPI:
    """Build the application. Middleware opens sessions from session_factory."""
    app = FastAPI(
        title="CareChain API",
        description="Healthcare records portal with a hash-chained audit ledger",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory or SessionLocal

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Last added runs first: correlation id, then user resolution, then role check
    app.add_middleware(RoleMiddleware)
    app.add_middleware(AuthMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    app.add_exception_handler(CareChainError, carechain_error_handler)

    # Prometheus metrics
    app.mount("/metrics", make_asgi_app())

    app.include_router(admin.router)
    app.include_router(records.router)
    app.include_router(access.router)
    app.include_router(prescriptions.router)
    app.include_router(claims.router)
    app.include_router(ledger.router)
    app.include_router(stats.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint (basic liveness)."""
        return {
            "status": "healthy",
            "service": "carechain-api",
            "version": "0.1.0",
        }

    @app.get("/ready")
    async def readiness_check():
        """Readiness check endpoint (verifies dependencies)."""
        checks = {"database": False, "migrations": None}

        db = app.state.session_factory()
        try:
            db.execute(text("SELECT 1"))
            checks["database"] = True
        except Exception as e:
            logger.error(f"Database check failed: {e}")
        finally:
            db.close()

        # Migrations are only checked against a real deployment database
        if checks["database"] and not settings.database_url_computed.startswith("sqlite"):
            checks["migrations"] = _migrations_at_head(app)

        required = [name for name, value in checks.items() if value is not None]
        all_ready = all(checks[name] for name in required)
        return JSONResponse(
            content={"status": "ready" if all_ready else "not_ready", "checks": checks},
            status_code=200 if all_ready else 503,
        )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "CareChain API",
            "version": "0.1.0",
            "docs": "/docs",
            "health": "/health",
        }

    return app


def _migrations_at_head(app: FastAPI) -> bool:
    """Compare the database's Alembic revision with the script head."""
    from alembic.config import Config
    from alembic.runtime.migration import MigrationContext
    from alembic.script import ScriptDirectory

    db = app.state.session_factory()
    try:
        current_rev = MigrationContext.configure(db.connection()).get_current_revision()
        alembic_ini_path = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        head_rev = ScriptDirectory.from_config(Config(alembic_ini_path)).get_current_head()
        if current_rev != head_rev:
            logger.warning(f"Migrations not at head: current={current_rev}, head={head_rev}")
            return False
        return True
    except Exception as e:
        logger.error(f"Migration check failed: {e}")
        return False
    finally:
        db.close()


app = create_app()
