"""
InterviewCoach - AI-Powered Interview Practice Service

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from interview_coach.config.settings import get_settings
from interview_coach.api.router import api_router
from interview_coach.api.dependencies import startup, cleanup
from interview_coach.core.errors import InterviewCoachError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Error kind -> HTTP status
ERROR_STATUS = {
    "ValidationError": 400,
    "NotFound": 404,
    "Conflict": 409,
    "GenerationUnavailable": 503,
    "MalformedResponse": 503,
    "PersistenceError": 500,
    "StateTransitionError": 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting InterviewCoach...")
    settings = get_settings()
    logger.info(f"Running in {'debug' if settings.debug else 'production'} mode")
    await startup()

    yield

    # Shutdown
    logger.info("Shutting down InterviewCoach...")
    await cleanup()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title="InterviewCoach",
    description="AI-Powered Interview Practice Service",
    version=settings.app_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(InterviewCoachError)
async def interview_coach_error_handler(request: Request, exc: InterviewCoachError) -> JSONResponse:
    """Report engine errors with their kind."""
    status_code = ERROR_STATUS.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")

    content = {"detail": exc.message, "kind": exc.kind}
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed or missing request fields as validation errors."""
    errors = exc.errors()
    first_error = errors[0] if errors else {}
    loc = first_error.get("loc") or ()

    content = {
        "detail": first_error.get("msg", "Request validation failed"),
        "kind": "ValidationError",
    }
    if loc:
        content["field"] = str(loc[-1])
    return JSONResponse(status_code=ERROR_STATUS["ValidationError"], content=content)


# ============================================================================
# ROOT ROUTES
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
