"""
OpenClaw CLI adapter: run `openclaw <args>` as an argument vector with a bounded wait.

No shell is involved; every argument is passed as its own token.
Failures are raised as OpenClawInvocationError (or JobNotFoundError when the
scheduler reports an unknown job), unparseable --json output as OpenClawParseError.
"""
import json
import logging
import re
import subprocess
from typing import Any, Callable, Optional, Sequence

from cmdbridge.core.config import settings
from cmdbridge.core.observability.metrics import record_invocation

logger = logging.getLogger(__name__)

_NOT_FOUND_PATTERN = re.compile(r"not found|no such job|unknown job|does not exist", re.IGNORECASE)


class OpenClawError(Exception):
    """Base class for errors talking to the OpenClaw CLI."""
    pass


class OpenClawInvocationError(OpenClawError):
    """Non-zero exit, missing binary, or timeout."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class JobNotFoundError(OpenClawInvocationError):
    """The scheduler does not know the job id. Message is the scheduler's own text."""
    pass


class OpenClawParseError(OpenClawError):
    """--json output could not be parsed or had an unexpected shape."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


def _command_name(args: Sequence[str]) -> str:
    """Leading subcommand words, e.g. 'cron list' for ['cron', 'list', '--json']."""
    words = []
    for arg in args:
        if arg.startswith("-") or len(words) == 2:
            break
        words.append(arg)
    return " ".join(words) or "(none)"


class OpenClawCLI:
    """Blocking runner for OpenClaw subcommands."""

    def __init__(
        self,
        binary: Optional[str] = None,
        timeout: Optional[float] = None,
        runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
    ):
        """
        binary: executable name or path (default settings.openclaw_bin).
        timeout: seconds per invocation (default settings.cli_timeout).
        runner: callable with the subprocess.run signature; tests inject a fake scheduler here.
        """
        self.binary = binary or settings.openclaw_bin
        self.timeout = timeout if timeout is not None else settings.cli_timeout
        self._runner = runner or subprocess.run

    def _failed(self, command: str, error: OpenClawInvocationError) -> OpenClawInvocationError:
        record_invocation(command, False, str(error))
        logger.warning("openclaw %s failed: %s", command, error)
        return error

    def run(self, *args: str) -> str:
        """Run one subcommand and return its stdout."""
        command = _command_name(args)
        argv = [self.binary, *args]
        logger.debug("Running %s", argv)
        try:
            result = self._runner(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise self._failed(command, OpenClawInvocationError(
                f"{self.binary} not found; is OpenClaw installed and on PATH?"
            ))
        except subprocess.TimeoutExpired:
            raise self._failed(command, OpenClawInvocationError(
                f"openclaw {command} timed out after {self.timeout}s"
            ))
        except OSError as e:
            raise self._failed(command, OpenClawInvocationError(f"could not start {self.binary}: {e}"))

        if result.returncode != 0:
            message = (result.stderr or "").strip() or (result.stdout or "").strip() or (
                f"openclaw {command} exited with code {result.returncode}"
            )
            error_cls = JobNotFoundError if _NOT_FOUND_PATTERN.search(message) else OpenClawInvocationError
            raise self._failed(command, error_cls(message, returncode=result.returncode))

        record_invocation(command, True)
        return result.stdout or ""

    def run_json(self, *args: str) -> Any:
        """Run a subcommand with --json and decode its stdout."""
        out = self.run(*args, "--json")
        try:
            return json.loads(out)
        except ValueError as e:
            raise OpenClawParseError(
                f"could not parse output of openclaw {_command_name(args)}: {e}",
                output=out,
            )
