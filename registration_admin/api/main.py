"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from registration_admin.api.middleware import RequestIDMiddleware, MetricsMiddleware
from registration_admin.api.dependencies import build_store, get_request_id
from registration_admin.api.responses import envelope
from registration_admin.api.v1 import registrations, reference
from registration_admin.domain.ports import EntityStore
from registration_admin.infrastructure.observability.logging import setup_logging
from registration_admin.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(store: EntityStore | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    The entity store is created here (or passed in) and shared by every
    request; coordinators never build their own.
    """
    app = FastAPI(
        title="Registration Admin",
        description="Client registrations, their transactions and prospectus status",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.store = store if store is not None else build_store(settings)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Malformed bodies use the same envelope and status as coordinator validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logging.warning(f"Request validation failed: {exc.errors()}", extra={"request_id": get_request_id(request)})
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return envelope(False, 400, error=details or "Invalid request")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(registrations.router, tags=["registrations"])
    app.include_router(reference.router, tags=["reference"])

    return app


app = create_app()
