"""
Command Bridge - Main FastAPI application.

Dashboard backend that proxies cron job management to the OpenClaw CLI.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

from cmdbridge.core.config import settings, detect_gateway_config, get_workspace
from cmdbridge.core.api import cron, health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Polled by the dashboard; logged at DEBUG to reduce log spam
_QUIET_PATHS = ("/health", "/api/status", "/api/home/stats")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the resolved configuration on startup."""
    gateway = detect_gateway_config()
    logger.info(
        "Command Bridge binding on %s:%s (from config/.env: API_HOST, API_PORT)",
        settings.api_host,
        settings.api_port,
    )
    logger.info("Gateway URL: %s", gateway.url)
    logger.info("Workspace: %s", get_workspace())
    logger.info("Scheduler CLI: %s (timeout %ss)", settings.openclaw_bin, settings.cli_timeout)
    yield
    logger.info("Command Bridge shutting down")


# Create FastAPI app
app = FastAPI(
    title="Command Bridge",
    description="Dashboard backend for OpenClaw cron jobs",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests. Polled endpoints at DEBUG."""
    path = request.url.path
    level = logger.debug if path in _QUIET_PATHS else logger.info
    level(f"{request.method} {path}")
    response = await call_next(request)
    level(f"{request.method} {path} - {response.status_code}")
    return response


# Error handlers: always answer in the {"error": ...} shape
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request body/query validation errors."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(
        status_code=422,
        content={"error": "; ".join(messages) or "Invalid request"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc) if settings.debug else "Internal server error"},
    )


# Include routers
app.include_router(health.router)
app.include_router(health.config_router)
app.include_router(cron.router)


def run() -> None:
    import uvicorn
    uvicorn.run(
        "cmdbridge.core.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
