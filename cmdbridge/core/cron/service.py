"""
Cron proxy logic: list/create/enable/disable/run/edit/remove/get_runs against `openclaw cron`.

Stateless: every call goes to the scheduler, nothing is cached here.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from cmdbridge.core.cron.models import (
    CronJob,
    JobCreateRequest,
    RawRuns,
    RunHistory,
    RunRecord,
    StructuredRuns,
    job_from_dict,
)
from cmdbridge.core.cron.render import recent_runs
from cmdbridge.core.cron.validation import (
    session_target_or_default,
    validate_create_request,
    validate_job_id,
    validate_schedule_input,
)
from cmdbridge.core.services.openclaw_cli import (
    JobNotFoundError,
    OpenClawCLI,
    OpenClawInvocationError,
    OpenClawParseError,
)

logger = logging.getLogger(__name__)

_SCHEDULE_FLAGS = {"cron": "--cron", "every": "--every", "at": "--at"}
_PAYLOAD_FLAGS = {"message": "--message", "systemEvent": "--system-event"}


def _schedule_args(kind: str, value: str, tz: Optional[str]) -> List[str]:
    args = [_SCHEDULE_FLAGS[kind], value.strip()]
    if tz and tz.strip():
        args += ["--tz", tz.strip()]
    return args


def _parse_jobs(data: Any) -> List[CronJob]:
    items = data.get("jobs") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise OpenClawParseError("cron list output has no jobs array")
    try:
        return [job_from_dict(item) for item in items]
    except ValidationError as e:
        raise OpenClawParseError(f"cron list returned an invalid job: {e}")


def _parse_runs(data: Any) -> List[RunRecord]:
    items = data.get("runs", data.get("entries")) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise OpenClawParseError("cron runs output has no runs array")
    try:
        return [RunRecord.model_validate(item) for item in items]
    except ValidationError as e:
        raise OpenClawParseError(f"cron runs returned an invalid record: {e}")


class CronProxyService:
    """Translates job lifecycle operations into `openclaw cron ...` invocations."""

    def __init__(self, cli: Optional[OpenClawCLI] = None):
        self._cli = cli or OpenClawCLI()

    def list_jobs(self) -> List[CronJob]:
        """Jobs in scheduler order."""
        return _parse_jobs(self._cli.run_json("cron", "list"))

    def add_job(self, req: JobCreateRequest) -> Dict[str, Any]:
        """
        Create a job. The scheduler assigns the id; list again to see it.
        Returns: {"output": "<scheduler stdout>"}
        """
        validate_create_request(req)
        args = ["cron", "add", "--name", req.name.strip()]
        args += _schedule_args(req.scheduleKind, req.scheduleValue, req.tz)
        args += ["--session", session_target_or_default(req.sessionTarget)]
        args += [_PAYLOAD_FLAGS[req.payloadKind or "message"], req.payloadText]
        if req.enabled is False:
            args.append("--disabled")
        out = self._cli.run(*args)
        logger.info("Created cron job %r", req.name.strip())
        return {"output": out.strip()}

    def enable_job(self, job_id: str) -> None:
        self._cli.run("cron", "enable", validate_job_id(job_id))

    def disable_job(self, job_id: str) -> None:
        self._cli.run("cron", "disable", validate_job_id(job_id))

    def run_job_now(self, job_id: str) -> None:
        """Trigger one run; the scheduler executes it asynchronously."""
        self._cli.run("cron", "run", validate_job_id(job_id))

    def update_schedule(
        self,
        job_id: str,
        schedule_kind: Optional[str],
        schedule_value: Optional[str],
        tz: Optional[str] = None,
    ) -> None:
        """Replace the schedule in one call. Without tz the scheduler keeps its own default."""
        job_id = validate_job_id(job_id)
        validate_schedule_input(schedule_kind, schedule_value)
        self._cli.run("cron", "edit", job_id, *_schedule_args(schedule_kind, schedule_value, tz))

    def remove_job(self, job_id: str) -> None:
        job_id = validate_job_id(job_id)
        self._cli.run("cron", "rm", job_id)
        logger.info("Removed cron job %s", job_id)

    def get_runs(self, job_id: str, limit: Optional[int] = None) -> RunHistory:
        """
        Run history, newest first. Falls back to the plain-text listing when the
        --json output cannot be used; an unknown job id is still an error.
        """
        job_id = validate_job_id(job_id)
        try:
            runs = _parse_runs(self._cli.run_json("cron", "runs", "--id", job_id))
        except JobNotFoundError:
            raise
        except (OpenClawParseError, OpenClawInvocationError) as e:
            logger.info("Structured run history unavailable for %s, using raw output: %s", job_id, e)
            return RawRuns(raw=self._cli.run("cron", "runs", "--id", job_id))
        ordered = recent_runs(runs, limit=limit if limit is not None else len(runs))
        return StructuredRuns(runs=ordered)

    def get_status(self) -> Dict[str, Any]:
        """Scheduler status as reported by `cron status`; {"raw": text} when not JSON."""
        try:
            data = self._cli.run_json("cron", "status")
        except (OpenClawParseError, OpenClawInvocationError) as e:
            logger.debug("Structured cron status unavailable: %s", e)
            return {"raw": self._cli.run("cron", "status")}
        if not isinstance(data, dict):
            return {"status": data}
        return data

    def get_summary(self) -> Dict[str, Any]:
        """Counts for the home screen: active and total jobs, most recent run time."""
        jobs = self.list_jobs()
        last_runs = [j.state.lastRunAtMs for j in jobs if j.state.lastRunAtMs]
        return {
            "active": sum(1 for j in jobs if j.enabled),
            "total": len(jobs),
            "lastRun": max(last_runs) if last_runs else None,
        }
