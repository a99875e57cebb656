"""
Cron job and schedule models, as reported by the OpenClaw scheduler.

Contract:
- schedule: cron (5-field expr, optional IANA tz) | every (interval such as "5m") | at (ISO8601)
- payload: message | systemEvent, both carrying text
- state: scheduler-owned, read-only here
- run history: StructuredRuns (parsed records) | RawRuns (plain CLI text)
"""
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field


SCHEDULE_KINDS = ("cron", "every", "at")
PAYLOAD_KINDS = ("message", "systemEvent")
DEFAULT_SESSION_TARGET = "isolated"


# --- Schedule kinds ---

class CronSchedule(BaseModel):
    """5-field cron expression with optional IANA timezone."""
    kind: Literal["cron"] = "cron"
    expr: str  # minute hour day-of-month month day-of-week
    tz: Optional[str] = None


class EverySchedule(BaseModel):
    """Fixed interval; the interval string is opaque ("5m", "1h")."""
    kind: Literal["every"] = "every"
    interval: str


class AtSchedule(BaseModel):
    """Run once at an ISO8601 timestamp."""
    kind: Literal["at"] = "at"
    at: str


Schedule = Annotated[
    Union[CronSchedule, EverySchedule, AtSchedule],
    Field(discriminator="kind"),
]


# --- Payload ---

class MessagePayload(BaseModel):
    kind: Literal["message"] = "message"
    text: str


class SystemEventPayload(BaseModel):
    kind: Literal["systemEvent"] = "systemEvent"
    text: str


Payload = Annotated[
    Union[MessagePayload, SystemEventPayload],
    Field(discriminator="kind"),
]


# --- Job ---

class JobState(BaseModel):
    """Last/next run bookkeeping; written only by the scheduler."""
    lastStatus: Optional[str] = None  # "ok" | "error" | absent
    lastRunAtMs: Optional[int] = None
    nextRunAtMs: Optional[int] = None
    lastDurationMs: Optional[int] = None
    model_config = {"extra": "allow"}


class CronJob(BaseModel):
    """Single scheduler job. Unknown scheduler fields are kept as-is."""
    id: str
    name: str = ""
    schedule: Schedule
    sessionTarget: str = DEFAULT_SESSION_TARGET
    payload: Optional[Payload] = None
    enabled: bool = True
    state: JobState = Field(default_factory=JobState)
    model_config = {"extra": "allow"}


# --- Run history ---

class RunRecord(BaseModel):
    startedAtMs: Optional[int] = None
    ts: Optional[int] = None  # legacy field name for startedAtMs
    status: str
    durationMs: Optional[int] = None
    model_config = {"extra": "allow"}

    @property
    def started_at_ms(self) -> Optional[int]:
        return self.startedAtMs or self.ts


class StructuredRuns(BaseModel):
    kind: Literal["structured"] = "structured"
    runs: List[RunRecord]


class RawRuns(BaseModel):
    kind: Literal["raw"] = "raw"
    raw: str


RunHistory = Union[StructuredRuns, RawRuns]


# --- Request bodies ---

class JobCreateRequest(BaseModel):
    """Create body. Required fields are checked by validation, not by pydantic."""
    name: Optional[str] = None
    scheduleKind: Optional[str] = None
    scheduleValue: Optional[str] = None
    tz: Optional[str] = None
    sessionTarget: Optional[str] = None
    payloadKind: Optional[str] = None
    payloadText: Optional[str] = None
    enabled: Optional[bool] = None


class ScheduleEditRequest(BaseModel):
    """Edit body: schedule fields only."""
    scheduleKind: Optional[str] = None
    scheduleValue: Optional[str] = None
    tz: Optional[str] = None


def job_to_dict(job: CronJob) -> dict:
    """Serialize job for a JSON response."""
    return job.model_dump(mode="json", exclude_none=True)


def job_from_dict(data: dict) -> CronJob:
    """Deserialize job from scheduler JSON."""
    return CronJob.model_validate(data)
