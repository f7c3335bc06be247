"""
Miami Lead Engine API - Main Application.

FastAPI application serving the site's form submissions, quiz sessions and
savings calculator. Every response carries CORS headers; every preflight is
answered with an empty 200.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from api import __version__
from api.dependencies import get_settings
from domain.errors import LeadEngineError
from services.submission_service import INTERNAL_ERROR_MESSAGE

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
CORS_ALLOW_METHODS = "GET, POST, OPTIONS"

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Miami Lead Engine API",
    description="Lead capture, quiz scoring and savings estimates for the Miami relocation site",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


def cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Expose-Headers": "Retry-After",
    }


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    # Preflight gets an empty body, not Starlette's "OK".
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=cors_headers())

    response = await call_next(request)
    response.headers.update(cors_headers())
    return response


@app.exception_handler(LeadEngineError)
async def lead_engine_error_handler(request: Request, exc: LeadEngineError):
    """Infrastructure or configuration failure outside the submission pipeline."""
    logger.error("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "miami-lead-engine-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Miami Lead Engine API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import calculator, quiz, submissions

app.include_router(submissions.router, prefix="/api/v1", tags=["Submissions"])
app.include_router(quiz.router, prefix="/api/v1", tags=["Quiz"])
app.include_router(calculator.router, prefix="/api/v1", tags=["Calculator"])
