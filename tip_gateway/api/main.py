"""FastAPI application factory"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from tip_gateway.api.errors import register_exception_handlers
from tip_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware, UnhandledErrorMiddleware
from tip_gateway.api.v1 import calculations, history
from tip_gateway.api.v1.schemas import HealthResponse
from tip_gateway.infrastructure.database.repositories import CalculationStore
from tip_gateway.infrastructure.observability.logging import setup_logging
from tip_gateway.config import Settings, settings as default_settings

# Setup structured logging
setup_logging(default_settings.log_level, default_settings.service_name)


def create_app(settings: Settings | None = None, store: CalculationStore | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    The calculation store is built once here (or passed in) and shared by
    every request through app.state; its schema is created on startup.
    """
    settings = settings or default_settings
    if store is None:
        store = CalculationStore.from_url(settings.database_url, max_page_size=settings.history_max_limit)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.create_schema()
        yield
        store.dispose()

    app = FastAPI(
        title="Tip Calculator Gateway",
        description="Bill splitting calculator with calculation history",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(UnhandledErrorMiddleware, settings=settings)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    def health_check():
        return HealthResponse(
            status="ok",
            message="Tip Calculator API is running",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(calculations.router, prefix="/api", tags=["calculations"])
    app.include_router(history.router, prefix="/api", tags=["history"])

    return app


app = create_app()


def run() -> None:
    """Serve the default app with uvicorn"""
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port, log_config=None)
