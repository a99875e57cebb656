"""
Health check and feature/config endpoints.

/health answers 503 with status "degraded" when the scheduler CLI does not respond.
"""
import os
import platform
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cmdbridge.core.api.cron import get_cron_service
from cmdbridge.core.config import detect_gateway_config, get_workspace
from cmdbridge.core.cron.service import CronProxyService
from cmdbridge.core.observability.metrics import get_metrics
from cmdbridge.core.services.openclaw_cli import OpenClawError

router = APIRouter(prefix="/health", tags=["health"])
config_router = APIRouter(prefix="/api", tags=["config"])


def detect_features() -> dict:
    """Dashboard sections this server can back."""
    return {"cron": True}


def _gateway_info() -> dict:
    gateway = detect_gateway_config()
    return {
        "url": gateway.url,
        "tokenConfigured": gateway.token_configured,
        "configSource": gateway.source,
    }


@router.get("")
def health(service: CronProxyService = Depends(get_cron_service)):
    """
    Health check endpoint.

    Returns:
        Service status, workspace, features and CLI invocation counters
    """
    try:
        service.get_status()
        result = {"status": "healthy"}
    except OpenClawError as e:
        result = {"status": "degraded", "error": str(e)}
    body = {
        **result,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "workspace": str(get_workspace()),
        "features": detect_features(),
        "gateway": {
            "invocations": get_metrics().get_stats(),
            "errorRate": get_metrics().get_error_rate(),
        },
    }
    if result["status"] != "healthy":
        return JSONResponse(status_code=503, content=body)
    return body


@config_router.get("/config")
def app_config():
    """Features, workspace, gateway connection (token never included) and host info."""
    return {
        "features": detect_features(),
        "workspace": str(get_workspace()),
        "gateway": _gateway_info(),
        "system": {
            "hostname": platform.node(),
            "platform": f"{platform.system()} {platform.release()}",
            "arch": platform.machine(),
            "pythonVersion": platform.python_version(),
            "cpuCount": os.cpu_count(),
        },
    }
