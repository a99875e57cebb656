"""Unit tests for the OpenClaw CLI adapter: argv, exit codes, timeouts, JSON decoding."""
import subprocess

import pytest
from cmdbridge.core.observability.metrics import get_metrics
from cmdbridge.core.services.openclaw_cli import (
    JobNotFoundError,
    OpenClawCLI,
    OpenClawInvocationError,
    OpenClawParseError,
)


class Recorder:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.result = (returncode, stdout, stderr)
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((argv, kwargs))
        rc, out, err = self.result
        return subprocess.CompletedProcess(argv, rc, stdout=out, stderr=err)


def test_arguments_are_passed_as_tokens():
    rec = Recorder(stdout="done")
    cli = OpenClawCLI(binary="openclaw", timeout=7, runner=rec)
    out = cli.run("cron", "add", "--message", 'say "hi"; rm -rf /')
    assert out == "done"
    argv, kwargs = rec.calls[0]
    assert argv == ["openclaw", "cron", "add", "--message", 'say "hi"; rm -rf /']
    assert kwargs["timeout"] == 7
    assert kwargs["capture_output"] is True
    assert "shell" not in kwargs


def test_nonzero_exit_uses_stderr():
    cli = OpenClawCLI(runner=Recorder(returncode=2, stderr="  gateway unreachable\n"))
    with pytest.raises(OpenClawInvocationError, match="^gateway unreachable$") as exc:
        cli.run("cron", "list")
    assert exc.value.returncode == 2


def test_nonzero_exit_without_stderr_has_generic_message():
    cli = OpenClawCLI(runner=Recorder(returncode=3))
    with pytest.raises(OpenClawInvocationError, match="cron enable exited with code 3"):
        cli.run("cron", "enable", "abc")


def test_not_found_is_classified():
    cli = OpenClawCLI(runner=Recorder(returncode=1, stderr="Error: job not found: abc"))
    with pytest.raises(JobNotFoundError, match="job not found: abc"):
        cli.run("cron", "rm", "abc")


def test_not_found_reported_on_stdout():
    cli = OpenClawCLI(runner=Recorder(returncode=1, stdout="Error: job not found: x", stderr=""))
    with pytest.raises(JobNotFoundError, match="job not found: x"):
        cli.run("cron", "enable", "x")


def test_timeout_is_a_failure():
    def slow(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, kwargs["timeout"])

    cli = OpenClawCLI(timeout=1, runner=slow)
    with pytest.raises(OpenClawInvocationError, match="timed out after 1s"):
        cli.run("cron", "run", "abc")


def test_missing_binary():
    def missing(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    cli = OpenClawCLI(binary="/nope/openclaw", runner=missing)
    with pytest.raises(OpenClawInvocationError, match="not found"):
        cli.run("cron", "list")


def test_run_json_appends_flag_and_decodes():
    rec = Recorder(stdout='{"jobs": []}')
    cli = OpenClawCLI(runner=rec)
    assert cli.run_json("cron", "list") == {"jobs": []}
    assert rec.calls[0][0][-1] == "--json"


def test_run_json_parse_error_keeps_output():
    cli = OpenClawCLI(runner=Recorder(stdout="ID  NAME\n1   backup\n"))
    with pytest.raises(OpenClawParseError) as exc:
        cli.run_json("cron", "runs", "--id", "1")
    assert exc.value.output.startswith("ID  NAME")


def test_invocations_are_counted():
    ok = OpenClawCLI(runner=Recorder(stdout="x"))
    bad = OpenClawCLI(runner=Recorder(returncode=1, stderr="boom"))
    ok.run("cron", "list", "--json")
    with pytest.raises(OpenClawInvocationError):
        bad.run("cron", "list")
    stats = get_metrics().get_stats()
    assert stats["calls"] == {"cron list": 2}
    assert stats["errors"] == {"cron list": 1}
    assert stats["lastError"] == "boom"
    assert get_metrics().get_error_rate() == 0.5
