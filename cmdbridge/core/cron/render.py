"""
Human-readable rendering of schedules, run times and job status.

Pure functions; every time helper accepts now_ms so callers (and tests) can pin the clock.
"""
import time
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from cmdbridge.core.cron.models import (
    AtSchedule,
    CronJob,
    CronSchedule,
    EverySchedule,
    RunRecord,
)

PLACEHOLDER = "—"
RECENT_RUNS_LIMIT = 20

_MINUTE_MS = 60_000
_HOUR_MS = 3_600_000
_DAY_MS = 86_400_000


def _now_ms() -> int:
    return int(time.time() * 1000)


def human_cron(expr: str) -> str:
    """
    Describe the common all-wildcard-date cron shapes in words.

    Only "every minute", "every hour at :MM" and "daily at HH:MM" are recognised;
    anything else (including a field count other than 5) is returned unchanged.
    """
    if not expr:
        return ""
    parts = expr.split(" ")
    if len(parts) != 5:
        return expr
    minute, hour, dom, month, dow = parts
    if dom == "*" and month == "*" and dow == "*":
        if hour == "*" and minute == "*":
            return "Every minute"
        if hour == "*":
            return f"Every hour at :{minute.rjust(2, '0')}"
        return f"Daily at {hour.rjust(2, '0')}:{minute.rjust(2, '0')}"
    return expr


def _parse_iso_ms(value: str) -> Optional[int]:
    raw = (value or "").strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return int(datetime.fromisoformat(raw).timestamp() * 1000)
    except ValueError:
        return None


def format_date(ms: Optional[int]) -> str:
    """Absolute local time in the current locale's format."""
    if not ms:
        return PLACEHOLDER
    return datetime.fromtimestamp(ms / 1000).strftime("%c")


def render_schedule(schedule) -> str:
    if schedule is None:
        return PLACEHOLDER
    if isinstance(schedule, CronSchedule):
        text = human_cron(schedule.expr)
        if schedule.tz:
            text += f" ({schedule.tz})"
        return text
    if isinstance(schedule, EverySchedule):
        return f"Every {schedule.interval}"
    if isinstance(schedule, AtSchedule):
        at_ms = _parse_iso_ms(schedule.at)
        return f"Once at {format_date(at_ms) if at_ms else schedule.at}"
    raise TypeError(f"unknown schedule type: {type(schedule).__name__}")


def schedule_value(schedule) -> str:
    """The raw value an edit form should be prefilled with."""
    if isinstance(schedule, CronSchedule):
        return schedule.expr
    if isinstance(schedule, EverySchedule):
        return schedule.interval
    if isinstance(schedule, AtSchedule):
        return schedule.at
    return ""


def time_ago(ms: Optional[int], now_ms: Optional[int] = None) -> str:
    if not ms:
        return PLACEHOLDER
    diff = (now_ms if now_ms is not None else _now_ms()) - ms
    if diff < _MINUTE_MS:
        return "just now"
    if diff < _HOUR_MS:
        return f"{diff // _MINUTE_MS}m ago"
    if diff < _DAY_MS:
        return f"{diff // _HOUR_MS}h ago"
    return f"{diff // _DAY_MS}d ago"


def time_until(ms: Optional[int], now_ms: Optional[int] = None) -> str:
    if not ms:
        return PLACEHOLDER
    diff = ms - (now_ms if now_ms is not None else _now_ms())
    if diff <= 0:
        return "overdue"
    if diff < _MINUTE_MS:
        return "in <1m"
    if diff < _HOUR_MS:
        return f"in {diff // _MINUTE_MS}m"
    if diff < _DAY_MS:
        return f"in {diff // _HOUR_MS}h"
    return f"in {diff // _DAY_MS}d"


def format_duration(ms: Optional[int]) -> str:
    if not ms:
        return PLACEHOLDER
    return f"{ms / 1000:.1f}s"


def status_label(job: CronJob) -> str:
    """Badge text: disabled wins, then the last run outcome, else ready."""
    if not job.enabled:
        return "disabled"
    if job.state.lastStatus in ("ok", "error"):
        return job.state.lastStatus
    return "ready"


def recent_runs(runs: Iterable[RunRecord], limit: int = RECENT_RUNS_LIMIT) -> List[RunRecord]:
    """Most recent first, at most `limit` records."""
    ordered = sorted(runs, key=lambda r: r.started_at_ms or 0, reverse=True)
    return ordered[:limit]


def describe_job(job: CronJob, now_ms: Optional[int] = None) -> Dict[str, str]:
    """All display strings for one job card."""
    now_ms = now_ms if now_ms is not None else _now_ms()
    return {
        "schedule": render_schedule(job.schedule),
        "status": status_label(job),
        "lastRun": time_ago(job.state.lastRunAtMs, now_ms),
        "nextRun": time_until(job.state.nextRunAtMs, now_ms),
        "duration": format_duration(job.state.lastDurationMs),
        "session": job.sessionTarget or PLACEHOLDER,
        "scheduleValue": schedule_value(job.schedule),
    }
