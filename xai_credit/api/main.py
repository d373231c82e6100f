"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from xai_credit.api.middleware import RequestIDMiddleware, MetricsMiddleware
from xai_credit.api.submissions import SubmissionGuard
from xai_credit.api.v1 import chat, documents, presets, scoring
from xai_credit.infrastructure.observability.logging import setup_logging
from xai_credit.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Explainable Credit Risk Gateway",
        description="Simulated credit scoring with generated explanations",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # One pending narrative call per session
    app.state.submission_guard = SubmissionGuard()

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

    # Register API routers
    app.include_router(scoring.router, prefix="/v1", tags=["scoring"])
    app.include_router(chat.router, prefix="/v1", tags=["chat"])
    app.include_router(documents.router, prefix="/v1", tags=["documents"])
    app.include_router(presets.router, prefix="/v1", tags=["presets"])

    return app


app = create_app()
