from __future__ import annotations

from fastapi import FastAPI

from src.console.routes import drivers, fraud_alerts, health


def create_app() -> FastAPI:
    """Build and configure the FastAPI application for the fleet console."""
    app = FastAPI(
        title="Fleet Fraud Console",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health.router)
    app.include_router(drivers.router)
    app.include_router(fraud_alerts.router)
    return app


app = create_app()


__all__ = ["create_app", "app"]
