"""
Cron job model, rendering and the proxy service over `openclaw cron`.

Persistence and execution belong to the OpenClaw scheduler; nothing is stored here.
"""
from cmdbridge.core.cron.models import (
    AtSchedule,
    EverySchedule,
    CronSchedule,
    MessagePayload,
    SystemEventPayload,
    CronJob,
    RunRecord,
    StructuredRuns,
    RawRuns,
)
from cmdbridge.core.cron.render import render_schedule, time_ago, time_until
from cmdbridge.core.cron.service import CronProxyService

__all__ = [
    "AtSchedule",
    "EverySchedule",
    "CronSchedule",
    "MessagePayload",
    "SystemEventPayload",
    "CronJob",
    "RunRecord",
    "StructuredRuns",
    "RawRuns",
    "render_schedule",
    "time_ago",
    "time_until",
    "CronProxyService",
]
