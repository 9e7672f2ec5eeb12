"""
Main FastAPI application for the MLB home run odds tracker.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from hr_odds.api.deps import get_odds_client
from hr_odds.api.routes import games, jobs, odds, players
from hr_odds.core.config import settings as default_settings
from hr_odds.core.database import Database, get_database
from hr_odds.core.exceptions import HrOddsError
from hr_odds.core.logging import configure_logging, get_logger
from hr_odds.core.metrics import update_scheduler_metrics
from hr_odds.core.middleware import CorrelationIdMiddleware
from hr_odds.core.rate_limit import limiter
from hr_odds.core.tracing import init_tracing
from hr_odds.services.odds_api_client import OddsApiClient

# Load environment variables from .env file
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if settings.SCHEDULER_ENABLED:
        from hr_odds.core.scheduler import JobScheduler

        app.state.scheduler = JobScheduler(app.state.database, app.state.odds_client, settings)
        await app.state.scheduler.start()

    yield

    if app.state.scheduler is not None:
        await app.state.scheduler.stop()
        app.state.scheduler = None
    await app.state.odds_client.close()
    logger.info("Shutting down application")


def create_app(
    settings=None,
    database: Optional[Database] = None,
    odds_client: Optional[OddsApiClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings object (default: environment settings)
        database: Shared Database (default: built from DATABASE_URL)
        odds_client: Shared provider client (default: built from settings)
    """
    settings = settings or default_settings
    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Scheduled ingestion of MLB player home run odds with history for charting",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database or Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    app.state.odds_client = odds_client or OddsApiClient.from_settings(settings)
    app.state.scheduler = None

    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(HrOddsError)
    async def hr_odds_error_handler(request: Request, exc: HrOddsError):
        return JSONResponse({"ok": False, "error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse({"ok": False, "error": "Internal server error"}, status_code=500)

    app.add_middleware(CorrelationIdMiddleware)

    if settings.OTEL_TRACES_ENABLED:
        init_tracing(
            app,
            app.state.database.engine,
            service_name=settings.APP_NAME,
            environment=settings.ENVIRONMENT,
            version=settings.APP_VERSION,
            otlp_endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT or None,
            console_export=settings.OTEL_CONSOLE_EXPORT,
            sampling_ratio=settings.OTEL_SAMPLING_RATIO,
        )

    # Must run before routers are included
    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(jobs.router)
    app.include_router(games.router)
    app.include_router(players.router)
    app.include_router(odds.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.APP_VERSION}

    @app.get("/api/health")
    async def api_health(
        request: Request,
        database: Database = Depends(get_database),
        client=Depends(get_odds_client),
    ):
        """Store connectivity, scheduler state and last known provider quota."""
        health_status = {"status": "healthy", "version": settings.APP_VERSION, "components": {}}

        db = database.session()
        try:
            db.execute(text("SELECT 1"))
            health_status["components"]["database"] = {"status": "connected"}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            health_status["components"]["database"] = {"status": "unhealthy", "error": str(e)}
            health_status["status"] = "unhealthy"
        finally:
            db.close()

        scheduler = request.app.state.scheduler
        update_scheduler_metrics(scheduler)
        if scheduler is not None and scheduler.running:
            health_status["components"]["scheduler"] = {"status": "running", "jobs": scheduler.describe()}
        else:
            health_status["components"]["scheduler"] = {
                "status": "stopped" if settings.SCHEDULER_ENABLED else "disabled"
            }

        health_status["components"]["odds_api"] = {
            "configured": bool(client.api_key),
            "quota_remaining": client.quota_remaining,
            "quota_used": client.quota_used,
        }

        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(health_status, status_code=status_code)

    return app


app = create_app()
