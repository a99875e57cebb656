"""
Shared fixtures: an in-memory stand-in for the `openclaw cron` CLI.

FakeScheduler has the subprocess.run call signature, so OpenClawCLI can use it as its runner.
"""
import json
import subprocess

import pytest

from cmdbridge.core.cron.service import CronProxyService
from cmdbridge.core.observability.metrics import get_metrics
from cmdbridge.core.services.openclaw_cli import OpenClawCLI

_VALUE_FLAGS = ("--name", "--cron", "--every", "--at", "--tz", "--session", "--message", "--system-event", "--id")


def _parse(rest):
    positional, flags = [], {}
    i = 0
    while i < len(rest):
        arg = rest[i]
        if arg in _VALUE_FLAGS:
            flags[arg] = rest[i + 1]
            i += 2
        elif arg.startswith("--"):
            flags[arg] = True
            i += 1
        else:
            positional.append(arg)
            i += 1
    return positional, flags


def _schedule_from(flags, existing_tz=None):
    if "--cron" in flags:
        schedule = {"kind": "cron", "expr": flags["--cron"]}
        tz = flags.get("--tz", existing_tz)
        if tz:
            schedule["tz"] = tz
        return schedule
    if "--every" in flags:
        return {"kind": "every", "interval": flags["--every"]}
    if "--at" in flags:
        return {"kind": "at", "at": flags["--at"]}
    return None


class FakeScheduler:
    """Minimal `openclaw cron` emulation keeping jobs and runs in memory."""

    def __init__(self):
        self.jobs = []
        self.runs = {}
        self.calls = []
        self.runs_json_broken = False
        self.status_json_broken = False
        self.fail_with = None  # stderr text forcing every call to exit 1
        self.raise_on_call = None  # exception instance raised instead of running
        self._next_id = 1
        self._clock_ms = 1_700_000_000_000

    # subprocess.run signature
    def __call__(self, argv, capture_output=True, text=True, timeout=None):
        self.calls.append(list(argv))
        if self.raise_on_call is not None:
            raise self.raise_on_call
        if self.fail_with is not None:
            return self._done(argv, 1, stderr=self.fail_with)
        args = list(argv[1:])
        if args[:1] != ["cron"] or len(args) < 2:
            return self._done(argv, 1, stderr=f"error: unknown command {' '.join(args)}")
        handler = getattr(self, "_cmd_" + args[1], None)
        if handler is None:
            return self._done(argv, 1, stderr=f"error: unknown cron command {args[1]}")
        positional, flags = _parse(args[2:])
        return handler(argv, positional, flags)

    @staticmethod
    def _done(argv, returncode=0, stdout="", stderr=""):
        return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr=stderr)

    def _find(self, job_id):
        return next((j for j in self.jobs if j["id"] == job_id), None)

    def _not_found(self, argv, job_id):
        return self._done(argv, 1, stderr=f"Error: job not found: {job_id}\n")

    def add_job(self, **job):
        """Seed a job directly, bypassing `cron add`."""
        job.setdefault("id", f"job-{self._next_id}")
        job.setdefault("name", job["id"])
        job.setdefault("sessionTarget", "isolated")
        job.setdefault("enabled", True)
        job.setdefault("state", {})
        self._next_id += 1
        self.jobs.append(job)
        return job

    # --- commands ---

    def _cmd_list(self, argv, positional, flags):
        return self._done(argv, stdout=json.dumps({"jobs": self.jobs}))

    def _cmd_add(self, argv, positional, flags):
        schedule = _schedule_from(flags)
        if schedule is None:
            return self._done(argv, 1, stderr="error: one of --cron, --every, --at is required")
        if "--system-event" in flags:
            payload = {"kind": "systemEvent", "text": flags["--system-event"]}
        else:
            payload = {"kind": "message", "text": flags["--message"]}
        job = self.add_job(
            name=flags["--name"],
            schedule=schedule,
            sessionTarget=flags.get("--session", "main"),
            payload=payload,
            enabled="--disabled" not in flags,
        )
        return self._done(argv, stdout=f"Created job {job['id']}\n")

    def _toggle(self, argv, positional, enabled):
        job = self._find(positional[0])
        if job is None:
            return self._not_found(argv, positional[0])
        job["enabled"] = enabled
        return self._done(argv, stdout="ok\n")

    def _cmd_enable(self, argv, positional, flags):
        return self._toggle(argv, positional, True)

    def _cmd_disable(self, argv, positional, flags):
        return self._toggle(argv, positional, False)

    def _cmd_run(self, argv, positional, flags):
        job = self._find(positional[0])
        if job is None:
            return self._not_found(argv, positional[0])
        self._clock_ms += 60_000
        self.runs.setdefault(job["id"], []).append(
            {"startedAtMs": self._clock_ms, "status": "ok", "durationMs": 1500}
        )
        return self._done(argv, stdout="queued\n")

    def _cmd_edit(self, argv, positional, flags):
        job = self._find(positional[0])
        if job is None:
            return self._not_found(argv, positional[0])
        job["schedule"] = _schedule_from(flags, existing_tz=job["schedule"].get("tz"))
        return self._done(argv, stdout="ok\n")

    def _cmd_rm(self, argv, positional, flags):
        job = self._find(positional[0])
        if job is None:
            return self._not_found(argv, positional[0])
        self.jobs.remove(job)
        self.runs.pop(job["id"], None)
        return self._done(argv, stdout="removed\n")

    def _cmd_runs(self, argv, positional, flags):
        job_id = flags.get("--id")
        if self._find(job_id) is None:
            return self._not_found(argv, job_id)
        runs = self.runs.get(job_id, [])
        if flags.get("--json"):
            if self.runs_json_broken:
                return self._done(argv, stdout="TIME  STATUS\n(no json support)\n")
            return self._done(argv, stdout=json.dumps({"entries": runs}))
        lines = [f"{r['startedAtMs']}  {r['status']}" for r in runs]
        return self._done(argv, stdout="\n".join(["TIME  STATUS", *lines]) + "\n")

    def _cmd_status(self, argv, positional, flags):
        if flags.get("--json"):
            if self.status_json_broken:
                return self._done(argv, 1, stderr="error: unknown option --json")
            return self._done(argv, stdout=json.dumps({"enabled": True, "jobs": len(self.jobs)}))
        return self._done(argv, stdout=f"Scheduler: running\nJobs: {len(self.jobs)}\n")


@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics().reset()
    yield
    get_metrics().reset()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def cli(scheduler):
    return OpenClawCLI(binary="openclaw", timeout=5, runner=scheduler)


@pytest.fixture
def service(cli):
    return CronProxyService(cli)


@pytest.fixture
def client(service):
    from fastapi.testclient import TestClient
    from cmdbridge.core.api.cron import get_cron_service
    from cmdbridge.core.main import app

    app.dependency_overrides[get_cron_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
