# FILE: assignment_hub/app.py
"""
FastAPI application entry point for AI Assignment Hub
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assignment_hub import __version__
from assignment_hub.config import get_settings
from assignment_hub.errors import AssignmentHubError, GenerationFailed, StoreUnavailable
from assignment_hub.middleware.correlation import CorrelationIdMiddleware
from assignment_hub.middleware.rate_limit import RateLimitMiddleware
from assignment_hub.providers.registry import get_provider_registry
from assignment_hub.routes import assignments, health, provider_io, templates, topics
from assignment_hub.services.correlation import get_correlation_id

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    logger.info(f"Starting AI Assignment Hub v{__version__}")

    registry = get_provider_registry()
    if not registry.providers:
        # Generation will answer 502 until a provider is configured
        logger.warning(f"No LLM providers initialized (mode={settings.llm_mode})")

    yield

    logger.info("Shutting down AI Assignment Hub")
    await registry.aclose()


app = FastAPI(
    title="AI Assignment Hub API",
    description="Personalized assignment generation and grading",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting
if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware, rpm=settings.rate_limit_rpm)

app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(AssignmentHubError)
async def domain_exception_handler(request: Request, exc: AssignmentHubError):
    if exc.status_code >= 500:
        logger.error(f"[{get_correlation_id()}] {type(exc).__name__}: {exc.message}")
    content = {"error": exc.message, "code": type(exc).__name__}
    if exc.detail is not None:
        content["detail"] = exc.detail
    if isinstance(exc, (GenerationFailed, StoreUnavailable)):
        content["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
app.include_router(topics.router, prefix="/topics", tags=["topics"])
app.include_router(templates.router, prefix="/templates", tags=["templates"])
app.include_router(provider_io.router, prefix="/provider-io", tags=["provider-io"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "AI Assignment Hub",
        "version": __version__,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "assignment_hub.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
