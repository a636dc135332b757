"""Transaction risk monitor API.

Screens submitted transactions against the fraud rules, stores them in
an append-only ledger and serves aggregate statistics to the dashboard.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import AppEnvironment, get_settings
from app.database import Base, create_db_engine, create_session_factory
from app.errors import RiskMonitorError, get_status_code
from app.logging_config import setup_logging
from app.routers import health, transactions
from app.seed import seed_demo_transactions
from app.services.ingestion import MISSING_FIELDS_MESSAGE, IngestionPipeline
from app.services.ledger import LedgerStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings)

    engine = create_db_engine(settings)
    # Create tables
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)

    app.state.engine = engine
    app.state.session_factory = session_factory

    # Seed data if empty
    if settings.seed_on_startup:
        db = session_factory()
        try:
            store = LedgerStore(db)
            if store.aggregate_stats().total_transactions == 0:
                seed_demo_transactions(IngestionPipeline(store))
        finally:
            db.close()

    logger.info("Starting %s (env=%s)", settings.app_name, settings.app_env.value)
    yield

    engine.dispose()
    logger.info("%s stopped", settings.app_name)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Transaction Risk Monitor API",
        description="Screens transactions against fraud-risk rules and reports aggregate risk statistics",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env != AppEnvironment.PROD else None,
        redoc_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(RiskMonitorError)
    async def domain_error_handler(request: Request, exc: RiskMonitorError) -> JSONResponse:
        status_code = get_status_code(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %r", request.method, request.url.path, exc.__cause__)
        return JSONResponse(status_code=status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Unparseable bodies are reported like any other incomplete submission
        return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_MESSAGE})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    app.include_router(health.router, tags=["health"])
    app.include_router(transactions.router, prefix="/api", tags=["transactions"])

    # Mounted last so the API routes take precedence
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="dashboard")

    return app


app = create_app()


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    run()
