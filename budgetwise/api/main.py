"""FastAPI application factory"""

import logging
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import JSONResponse, Response

from budgetwise.api.middleware import REQUEST_ID_HEADER, RequestIDMiddleware, MetricsMiddleware
from budgetwise.api.v1 import budget, chat, decision, history, profile
from budgetwise.infrastructure.database.session import get_db
from budgetwise.infrastructure.observability.logging import setup_logging
from budgetwise.config import settings

setup_logging(settings.log_level)

V1_ROUTERS = (
    (profile.router, "profiles"),
    (budget.router, "budgets"),
    (decision.router, "decisions"),
    (history.router, "history"),
    (chat.router, "chat"),
)


def create_app() -> FastAPI:
    """Build the BudgetWise API with middleware, probes and v1 routers"""
    app = FastAPI(
        title="BudgetWise API",
        description="Budget health, life decision affordability and AI advice service",
        version=settings.service_version,
    )

    # Last added runs first: request IDs exist before metrics are logged
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST", "PUT"],
            allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
            expose_headers=[REQUEST_ID_HEADER],
        )

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        """Liveness plus a database round trip"""
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logging.error(f"Health check database failure: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "service": settings.service_name, "database": "unavailable"},
            )
        return {"status": "ok", "service": settings.service_name, "database": "ok"}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for router, tag in V1_ROUTERS:
        app.include_router(router, prefix="/v1", tags=[tag])

    return app


app = create_app()
