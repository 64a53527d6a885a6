"""Transit Ticket Fraud Review Service.

This service scores ticket transactions for fraud, stores the results and
serves the review dashboard: filtered listings, operator clear/flag actions
and summary statistics.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from sqlalchemy.ext.asyncio import AsyncEngine

from transit_fraud.api.routes import api_router
from transit_fraud.core.config import AppEnvironment, Settings, StoreBackend, get_settings
from transit_fraud.core.database import create_async_engine, create_session_factory
from transit_fraud.core.errors import FraudServiceError, get_status_code
from transit_fraud.core.logging import setup_logging
from transit_fraud.domain.scoring import RiskScorer
from transit_fraud.persistence.base import TransactionStore
from transit_fraud.persistence.memory_repository import InMemoryTransactionRepository
from transit_fraud.persistence.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)

# API version prefix
API_V1_PREFIX = "/api/v1"


async def build_store(settings: Settings) -> tuple[TransactionStore, AsyncEngine | None]:
    """Create the transaction store selected by STORE_BACKEND.

    Returns the store and, for the PostgreSQL backend, the engine to dispose
    on shutdown.
    """
    if settings.store.backend == StoreBackend.MEMORY:
        return InMemoryTransactionRepository(), None

    engine = create_async_engine(settings.database)
    repository = TransactionRepository(create_session_factory(engine))
    if settings.store.create_schema:
        await repository.ensure_schema()
    return repository, engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager."""
    settings = get_settings()
    setup_logging(settings)

    logger.info(
        "Starting Transit Ticket Fraud Review Service",
        extra={
            "app": settings.app.name,
            "env": settings.app.env,
            "version": settings.app.version,
            "store_backend": settings.store.backend,
        },
    )

    store, engine = await build_store(settings)

    app.state.settings = settings
    app.state.store = store
    app.state.scorer = RiskScorer(settings.scoring)

    yield

    if engine is not None:
        await engine.dispose()

    logger.info("Transit Ticket Fraud Review Service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Transit Ticket Fraud Review API",
        description=(
            "API for scoring transit ticket transactions for fraud and reviewing the "
            "results: filtered listings, operator status changes and dashboard statistics."
        ),
        version=settings.app.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.app.env != AppEnvironment.PROD else None,
        redoc_url="/redoc" if settings.app.env != AppEnvironment.PROD else None,
        openapi_url="/openapi.json" if settings.app.env != AppEnvironment.PROD else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )

    app.include_router(api_router, prefix=API_V1_PREFIX)

    setup_telemetry(app, settings)

    @app.exception_handler(FraudServiceError)
    async def domain_error_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: FraudServiceError
    ) -> JSONResponse:
        """Handle domain-specific errors and return appropriate HTTP responses."""
        status_code = get_status_code(exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, **({"errors": exc.details} if exc.details else {})},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(  # type: ignore[reportUnusedFunction]
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions and return 500 error responses."""
        logger.exception(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Setup OpenTelemetry instrumentation."""
    if not settings.observability.otlp_endpoint:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.observability.service_name,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=settings.observability.otlp_endpoint,
        insecure=settings.observability.otlp_insecure,
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "transit_fraud.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.env == AppEnvironment.LOCAL,
        workers=1 if settings.app.env == AppEnvironment.LOCAL else settings.server.workers,
        log_level=settings.app.log_level.value.lower(),
    )


if __name__ == "__main__":
    run()
