# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Recipe Book API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 5000
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth.verifier import IdentityVerifier
from app.config import settings
from app.exceptions import (
    RecipeBookException,
    recipe_book_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
)
from app.routers import health, recipes, users

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

    - Startup: build the identity verifier once and share it via app.state
    - Shutdown: release its HTTP connections
    """
    logger.info(f"Starting Recipe Book API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    verifier = IdentityVerifier.from_settings(settings)
    app.state.identity_verifier = verifier

    yield

    logger.info("Shutting down Recipe Book API")
    verifier.close()


# Create FastAPI application
app = FastAPI(
    title="Recipe Book API",
    description="""
## Recipe sharing API

Users sign in with Firebase Authentication, then create, browse and like
recipes and follow other cooks.

### Authentication

Protected endpoints need `Authorization: Bearer <Firebase ID token>`.
Sessions expire after a period of inactivity (30 minutes by default);
an expired session answers 401 with `"error": "SESSION_EXPIRED"` and
`"sessionExpired": true`. Call `POST /api/users/login` to start a new one.

### Responses

Every response uses the envelope
`{"success": bool, "message"?: str, "data"?: any, "count"?: int, "error"?: str}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Recipes",
            "description": "Browse, create, update, delete and like recipes",
        },
        {
            "name": "Users",
            "description": "Registration, profiles, likes and follows",
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

@app.exception_handler(RecipeBookException)
async def handle_recipe_book_exception(request: Request, exc: RecipeBookException):
    """Handle custom Recipe Book exceptions."""
    return await recipe_book_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request payload/query validation failures."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    """Unknown routes and disallowed methods, in the standard envelope."""
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message, "error": f"HTTP_{exc.status_code}"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    return await unexpected_exception_handler(request, exc)


# =============================================================================
# Routers
# =============================================================================

# Recipe endpoints
app.include_router(
    recipes.router,
    prefix="/api/recipes",
    tags=["Recipes"]
)

# User endpoints
app.include_router(
    users.router,
    prefix="/api/users",
    tags=["Users"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Recipe Book API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }
