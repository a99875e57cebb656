"""
Validation rules applied before any scheduler command is started.

- scheduleKind must be cron | every | at, and its value non-empty
- create needs a name and a non-empty payload text of kind message | systemEvent
- job ids are passed as one argv token and must not look like a flag
- cron syntax itself is not checked; the scheduler rejects what it cannot parse
"""
from typing import Optional

from cmdbridge.core.cron.models import (
    DEFAULT_SESSION_TARGET,
    PAYLOAD_KINDS,
    SCHEDULE_KINDS,
    JobCreateRequest,
)


class CronValidationError(ValueError):
    """Raised when a create or edit request is missing or has an invalid field."""
    pass


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_job_id(job_id: Optional[str]) -> str:
    """Return the stripped id; reject empty ids and ids starting with '-'."""
    if _blank(job_id):
        raise CronValidationError("job id is required")
    job_id = job_id.strip()
    if job_id.startswith("-"):
        raise CronValidationError(f"invalid job id {job_id!r}")
    return job_id


def validate_schedule_input(kind: Optional[str], value: Optional[str]) -> None:
    """scheduleKind must be one of the three variants; scheduleValue must be non-empty."""
    if kind not in SCHEDULE_KINDS:
        raise CronValidationError(
            f"scheduleKind must be one of {', '.join(SCHEDULE_KINDS)}, got {kind!r}"
        )
    if _blank(value):
        raise CronValidationError("scheduleValue is required")


def validate_payload_input(kind: Optional[str], text: Optional[str]) -> None:
    """payloadKind defaults to message; payloadText must be non-empty."""
    if kind is not None and kind not in PAYLOAD_KINDS:
        raise CronValidationError(
            f"payloadKind must be one of {', '.join(PAYLOAD_KINDS)}, got {kind!r}"
        )
    if _blank(text):
        raise CronValidationError("payloadText is required")


def validate_create_request(req: JobCreateRequest) -> None:
    """Check every required create field; raises on the first problem found."""
    if _blank(req.name):
        raise CronValidationError("name is required")
    validate_schedule_input(req.scheduleKind, req.scheduleValue)
    validate_payload_input(req.payloadKind, req.payloadText)
    if req.sessionTarget is not None and req.sessionTarget.strip().startswith("-"):
        raise CronValidationError(f"invalid sessionTarget {req.sessionTarget!r}")


def session_target_or_default(session_target: Optional[str]) -> str:
    if _blank(session_target):
        return DEFAULT_SESSION_TARGET
    return session_target.strip()
