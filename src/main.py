"""
Civic Triage - Main Application
================================

Complaint triage service for the citizen-complaint intake application.

Modules:
- Triage: deterministic categorization, escalation and agent routing

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Triage engine, services and DTOs
- Domain: Entities and value objects (rule table)
- Infrastructure: YAML rule table loader
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.core import ApplicationException
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from src.shared.infrastructure.logging import get_logger, setup_logging
from src.triage.application import ComplaintTriageService
from src.triage.infrastructure import RuleTableLoader
from src.triage.interfaces import triage_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load the category rule table (built-in or YAML)
    3. Build the triage service

    The rule table is never reloaded while the process runs.
    """
    setup_logging(
        level=settings.log_level,
        environment=settings.environment,
        service=settings.app_name,
    )
    logger.info("Starting Civic Triage service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    engine = RuleTableLoader().load(settings.triage_rules_path)
    app.state.settings = settings
    app.state.triage_service = ComplaintTriageService(engine)

    logger.info("Civic Triage service started", extra={"rule_count": len(engine.rules)})

    yield  # Application runs here

    logger.info("Civic Triage service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Civic Triage API",
    description="""
    ## Citizen Complaint Triage

    Deterministic, explainable classification of citizen complaints.

    **Endpoints:**
    - `POST /triage/categorize` - Categorize a complaint
    - `GET /triage/categories` - View the active rule table
    - `GET /health` - Service health

    **Pipeline:**
    keyword matching -> category resolution -> escalation -> evidence/trust
    adjustment -> location enrichment -> agent dispatch
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(triage_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "triage_engine": "ready",
                        "rule_count": 5
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """Health check endpoint for load balancers and orchestrators."""
    service = getattr(request.app.state, "triage_service", None)
    checks = {
        "triage_engine": "ready" if service else "not_initialized",
        "rule_count": len(service.engine.rules) if service else 0,
    }

    return {
        "status": "healthy" if service else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Civic Triage",
        "version": settings.app_version,
        "architecture": "Clean Architecture",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "triage": {
                "prefix": "/triage",
                "endpoints": [
                    "POST /triage/categorize - Categorize complaint",
                    "GET /triage/categories - Get rule table"
                ]
            }
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
