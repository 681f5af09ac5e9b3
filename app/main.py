# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the BPM CRM API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import CRMException, crm_exception_handler
from app.routers import accounting, health, leads, planning, reports, trainers, users
from app.auth import routes as auth_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the configuration on startup; nothing to clean up on shutdown.
    """
    logger.info(f"Starting BPM CRM API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Business timezone: {settings.TIMEZONE}")
    if not settings.ai_enabled:
        logger.warning("OPENAI_API_KEY not set: AI reports are disabled")

    yield

    logger.info("Shutting down BPM CRM API")


# Create FastAPI application
app = FastAPI(
    title="BPM CRM API",
    description="""
## CRM for a music production school

Tracks leads from the contact form to the end of their training.

### Features

- **Leads**: public lead capture, sales pipeline, favorites, activity history
- **Accounting**: payments, closer/trainer commissions, remaining balances
- **Planning**: training sessions (weekly, monthly, fast-track)
- **Reports**: AI-written revenue and pipeline reports (cached 1h)
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Authentication endpoints for verifying JWT tokens",
        },
        {
            "name": "Leads",
            "description": "Lead capture and sales pipeline",
        },
        {
            "name": "Accounting",
            "description": "Payments, commissions and remaining balances",
        },
        {
            "name": "Planning",
            "description": "Training sessions and date calculator",
        },
        {
            "name": "Trainers",
            "description": "Trainer dashboard",
        },
        {
            "name": "Reports",
            "description": "AI-written dashboard reports",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(CRMException)
async def handle_crm_exception(request: Request, exc: CRMException):
    """Handle custom CRM exceptions."""
    return await crm_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_error(request: Request, exc: SupabaseClientError):
    """Database errors: logged with their code, reported as 500."""
    logger.error(f"Database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": exc.message,
            "code": exc.code,
        }
    )


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Lead endpoints
app.include_router(
    leads.router,
    prefix="/api/v1/leads",
    tags=["Leads"]
)

# Accounting endpoints
app.include_router(
    accounting.router,
    prefix="/api/v1/accounting",
    tags=["Accounting"]
)

# Planning endpoints
app.include_router(
    planning.router,
    prefix="/api/v1/planning",
    tags=["Planning"]
)

# Trainer endpoints
app.include_router(
    trainers.router,
    prefix="/api/v1/trainers",
    tags=["Trainers"]
)

# Report endpoints
app.include_router(
    reports.router,
    prefix="/api/v1/reports",
    tags=["Reports"]
)

# Account administration
app.include_router(
    users.router,
    prefix="/api/v1/admin/users",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "BPM CRM API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
