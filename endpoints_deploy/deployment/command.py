"""External command execution with a cumulative timeout budget."""

import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..core import DeploymentFailed
from ..observability import get_logger

logger = get_logger(__name__)

DEFAULT_INITIAL_BACKOFF = 1.0
DEFAULT_MAX_BACKOFF = 60.0


@dataclass
class CommandResult:
    """Outcome of a successful command run."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    attempts: int
    elapsed: float


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class CommandRunner:
    """Run a command, retrying failures until the time budget runs out."""

    def __init__(
        self,
        max_attempts: int | None = None,
        initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize runner.

        Args:
            max_attempts: Upper bound on the number of runs (None retries
                until the budget is spent)
            initial_backoff: First pause between attempts, doubled each retry
            max_backoff: Longest pause between attempts
            clock: Monotonic clock
            sleep: Sleep function
        """
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.clock = clock
        self.sleep = sleep

    def execute_with_retry(
        self,
        command: list[str],
        timeout: float,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run command until it exits 0.

        Every attempt gets the time left in the budget as its own timeout,
        so the whole call never exceeds ``timeout`` seconds of waiting.

        Args:
            command: argv list
            timeout: Cumulative budget in seconds for all attempts
            cwd: Working directory
            env: Process environment (inherits when None)

        Returns:
            CommandResult of the successful run

        Raises:
            DeploymentFailed: If no attempt succeeds within the budget
        """
        start = self.clock()
        deadline = start + timeout
        backoff = self.initial_backoff
        attempts = 0
        reason = "not attempted"
        stderr = ""

        while self.max_attempts is None or attempts < self.max_attempts:
            remaining = deadline - self.clock()
            if remaining <= 0:
                break

            attempts += 1
            context = {"command": command, "attempt": attempts}
            logger.info(
                "Running %s (attempt %d, %.0fs left)",
                " ".join(command),
                attempts,
                remaining,
                extra=context,
            )

            try:
                completed = subprocess.run(
                    command,
                    cwd=cwd,
                    env=env,
                    capture_output=True,
                    text=True,
                    timeout=remaining,
                )
            except subprocess.TimeoutExpired as e:
                reason = f"attempt timed out after {remaining:.0f}s"
                stderr = _as_text(e.stderr)
            except OSError as e:
                reason = f"could not start: {e}"
                stderr = ""
            else:
                context["returncode"] = completed.returncode
                if completed.returncode == 0:
                    elapsed = self.clock() - start
                    logger.info(
                        "Command succeeded after %d attempt(s) in %.1fs",
                        attempts,
                        elapsed,
                        extra=context,
                    )
                    logger.debug("stdout:\n%s", completed.stdout, extra=context)
                    return CommandResult(
                        command=command,
                        returncode=completed.returncode,
                        stdout=completed.stdout,
                        stderr=completed.stderr,
                        attempts=attempts,
                        elapsed=elapsed,
                    )
                reason = f"exit code {completed.returncode}"
                stderr = completed.stderr

            logger.warning("Attempt %d failed: %s", attempts, reason, extra=context)

            if self.max_attempts is not None and attempts >= self.max_attempts:
                break
            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            self.sleep(min(backoff, remaining))
            backoff = min(backoff * 2, self.max_backoff)

        if deadline - self.clock() <= 0:
            reason = f"timeout budget of {timeout:.0f}s exhausted ({reason})"

        raise DeploymentFailed(command, attempts, reason, stderr)
