"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from canteen_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from canteen_gateway.api.v1 import auto_orders, execute
from canteen_gateway.infrastructure.database.session import SessionLocal
from canteen_gateway.infrastructure.observability.logging import setup_logging
from canteen_gateway.scheduler.runner import AutoOrderScheduler
from canteen_gateway.services.auto_order_engine import AutoOrderEngine
from canteen_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the auto-order engine and its minute scheduler for the process lifetime"""
    engine = AutoOrderEngine(session_factory=SessionLocal)
    app.state.auto_order_engine = engine

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = AutoOrderScheduler(engine)
        scheduler.start()
    else:
        logging.info("Auto-order scheduler disabled by configuration")

    logging.info(
        "Service starting",
        extra={
            "environment": settings.environment,
            "cron_secret": "configured" if settings.cron_secret else "not set",
            "scheduler_enabled": settings.scheduler_enabled,
        },
    )
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Canteen Gateway",
        description="Recurring auto-order scheduling and execution service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers (execute before the {id} routes)
    app.include_router(execute.router, prefix="/v1", tags=["auto-order execution"])
    app.include_router(auto_orders.router, prefix="/v1", tags=["auto-orders"])

    return app


app = create_app()
