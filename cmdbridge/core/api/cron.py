"""
Cron job endpoints: /api/jobs and friends, proxied to `openclaw cron`.

Every response is either {"ok": true, ...} or {"error": "..."}; clients branch on the body.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from cmdbridge.core.cron.models import (
    JobCreateRequest,
    RawRuns,
    ScheduleEditRequest,
    job_to_dict,
)
from cmdbridge.core.cron.render import describe_job
from cmdbridge.core.cron.service import CronProxyService
from cmdbridge.core.cron.validation import CronValidationError
from cmdbridge.core.services.openclaw_cli import JobNotFoundError, OpenClawError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["cron"])

_cron_service: Optional[CronProxyService] = None


def get_cron_service() -> CronProxyService:
    global _cron_service
    if _cron_service is None:
        _cron_service = CronProxyService()
    return _cron_service


def error_response(e: Exception) -> JSONResponse:
    """Map a proxy failure to the {"error": message} shape."""
    if isinstance(e, CronValidationError):
        status_code = 422
    elif isinstance(e, JobNotFoundError):
        status_code = 404
    else:
        status_code = 500
    return JSONResponse(status_code=status_code, content={"error": str(e) or "Failed"})


@router.get("/jobs")
def list_jobs(service: CronProxyService = Depends(get_cron_service)):
    """List jobs in scheduler order, each with a `display` block of rendered strings."""
    try:
        jobs = service.list_jobs()
    except OpenClawError as e:
        return error_response(e)
    return {"jobs": [{**job_to_dict(j), "display": describe_job(j)} for j in jobs]}


@router.post("/jobs")
def create_job(body: JobCreateRequest, service: CronProxyService = Depends(get_cron_service)):
    """Create a job. Body: name, scheduleKind, scheduleValue, tz?, sessionTarget?, payloadKind, payloadText, enabled?."""
    try:
        result = service.add_job(body)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    return {"ok": True, **result}


@router.post("/jobs/{job_id}/enable")
def enable_job(job_id: str, service: CronProxyService = Depends(get_cron_service)):
    try:
        service.enable_job(job_id)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    return {"ok": True}


@router.post("/jobs/{job_id}/disable")
def disable_job(job_id: str, service: CronProxyService = Depends(get_cron_service)):
    try:
        service.disable_job(job_id)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    return {"ok": True}


@router.post("/jobs/{job_id}/run")
def run_job(job_id: str, service: CronProxyService = Depends(get_cron_service)):
    """Trigger a run now. Acknowledges only; results show up in the run history later."""
    try:
        service.run_job_now(job_id)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    return {"ok": True}


@router.patch("/jobs/{job_id}")
def edit_job(
    job_id: str,
    body: ScheduleEditRequest,
    service: CronProxyService = Depends(get_cron_service),
):
    """Replace the schedule. Body: scheduleKind, scheduleValue, tz?."""
    try:
        service.update_schedule(job_id, body.scheduleKind, body.scheduleValue, body.tz)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    return {"ok": True}


@router.delete("/jobs/{job_id}")
def delete_job(job_id: str, service: CronProxyService = Depends(get_cron_service)):
    try:
        service.remove_job(job_id)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    return {"ok": True}


@router.get("/jobs/{job_id}/runs")
def job_runs(
    job_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Max runs to return"),
    service: CronProxyService = Depends(get_cron_service),
):
    """Run history: {"ok": true, "runs": [...]} or, for unparseable output, {"ok": true, "raw": "..."}."""
    try:
        history = service.get_runs(job_id, limit=limit)
    except (CronValidationError, OpenClawError) as e:
        return error_response(e)
    if isinstance(history, RawRuns):
        return {"ok": True, "raw": history.raw}
    return {"ok": True, "runs": [r.model_dump(mode="json", exclude_none=True) for r in history.runs]}


@router.get("/status")
def scheduler_status(service: CronProxyService = Depends(get_cron_service)):
    try:
        return service.get_status()
    except OpenClawError as e:
        return error_response(e)


@router.get("/home/stats")
def home_stats(service: CronProxyService = Depends(get_cron_service)) -> Dict[str, Any]:
    """Cron counts for the home screen; a scheduler failure is reported inline."""
    try:
        cron = service.get_summary()
    except OpenClawError as e:
        cron = {"error": str(e)}
    return {"cron": cron}
