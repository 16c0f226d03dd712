"""Exception hierarchy for the Endpoints deployment test.

Every error carries a machine-readable code and a recovery hint so the
harness and the CLI can decide whether to skip, fail, or retry.
"""


class DeployTestError(Exception):
    """Base exception for deployment test errors.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        code: str,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, str | bool]:
        """Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary with error details.
        """
        return {
            "error": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class SkipCondition(DeployTestError):
    """Required configuration is missing.

    Not a failure: the suite is marked skipped.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, "SKIP", recoverable=True)


class TemplateError(DeployTestError):
    """The configuration document could not be rendered."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}", "TEMPLATE", recoverable=False)
        self.path = path


class DeploymentFailed(DeployTestError):
    """The deploy command did not succeed within its timeout budget.

    Raised once all attempts are used up or the cumulative budget is spent.
    """

    def __init__(
        self,
        command: list[str],
        attempts: int,
        reason: str,
        stderr: str = "",
    ) -> None:
        message = f"`{' '.join(command)}` failed after {attempts} attempt(s): {reason}"
        if stderr:
            message += f"\n{stderr.strip()}"
        super().__init__(message, "DEPLOY_FAILED", recoverable=False)
        self.command = command
        self.attempts = attempts
        self.reason = reason
        self.stderr = stderr


class ProbeUnreachable(DeployTestError):
    """The probe request could not be sent at all."""

    def __init__(
        self,
        url: str,
        cause: Exception | None = None,
    ) -> None:
        message = f"Failed to reach {url}"
        if cause:
            message += f": {cause}"
        super().__init__(message, "PROBE_UNREACHABLE", recoverable=False)
        self.url = url
        self.cause = cause


class AssertionFailed(DeployTestError, AssertionError):
    """The probe response did not match what was sent.

    Subclasses AssertionError so test runners report a failure, not an error.
    """

    def __init__(
        self,
        field: str,
        expected: object,
        actual: object,
    ) -> None:
        message = f"Mismatch in '{field}': expected {expected!r}, got {actual!r}"
        super().__init__(message, "ASSERTION_FAILED", recoverable=False)
        self.field = field
        self.expected = expected
        self.actual = actual
