"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from discount_gateway.api.dependencies import get_request_id
from discount_gateway.api.middleware import MetricsMiddleware, RequestIDMiddleware
from discount_gateway.api.v1 import checks, clients, operations, orders
from discount_gateway.config import settings
from discount_gateway.domain.exceptions import (
    DomainException,
    DuplicateKeyError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from discount_gateway.infrastructure.database.session import SessionLocal
from discount_gateway.infrastructure.observability.logging import setup_logging
from discount_gateway.services.integration import BackgroundIntegrationQueue
from discount_gateway.services.worker import IntegrationWorker

# Setup structured logging
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    NotFoundError: 404,
    InvalidStateError: 409,
    DuplicateKeyError: 409,
    ValidationFailedError: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the integration worker with the app and stop it on shutdown"""
    queue = None
    if settings.integration_worker_enabled:
        queue = BackgroundIntegrationQueue(
            IntegrationWorker(SessionLocal).handle,
            delay_seconds=settings.integration_delay_seconds,
            poll_seconds=settings.integration_worker_poll_seconds,
        )
        queue.start()
    app.state.integration_queue = queue

    yield

    if queue is not None:
        queue.stop()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Discount Credit Gateway",
        description="Order, check and operation workflow for discounted credit",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        status_code = next(
            (code for error, code in STATUS_BY_ERROR.items() if isinstance(exc, error)), 500
        )
        log = logger.warning if status_code < 500 else logger.error
        log(
            f"{type(exc).__name__}: {exc}",
            extra={"request_id": get_request_id(request), "path": request.url.path},
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "reasons": getattr(exc, "reasons", [])},
        )

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(orders.router, prefix="/v1", tags=["orders"])
    app.include_router(checks.router, prefix="/v1", tags=["checks"])
    app.include_router(operations.router, prefix="/v1", tags=["operations"])

    return app


app = create_app()
