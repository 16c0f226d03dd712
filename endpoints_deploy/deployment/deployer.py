"""Deploy the working copy to App Engine through the gcloud CLI."""

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..config import DEPLOY_TIMEOUT_SECONDS
from ..observability import get_logger
from .command import CommandResult, CommandRunner

logger = get_logger(__name__)

# Version deletion is a control-plane call and does not need the deploy budget
DELETE_TIMEOUT_SECONDS = 10 * 60


@runtime_checkable
class Deployer(Protocol):
    """Anything that can push a working copy as a given version."""

    def deploy(self, project_id: str, version_id: str, working_dir: Path) -> None:
        ...


@runtime_checkable
class SupportsDelete(Protocol):
    """Deployers that can remove a version again."""

    def delete(self, project_id: str, version_id: str) -> None:
        ...


@dataclass(frozen=True)
class AppVersion:
    """A deployed, non-promoted App Engine version."""

    project_id: str
    version_id: str

    @property
    def base_url(self) -> str:
        """URL that routes straight to this version."""
        return f"https://{self.version_id}-dot-{self.project_id}.appspot.com"


def generate_version_id(prefix: str = "deploy-test") -> str:
    """Build a unique, App Engine-safe version id.

    Returns:
        Lowercase id such as ``deploy-test-20240101120000-a1b2``.
    """
    timestamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
    return f"{prefix}-{timestamp}-{secrets.token_hex(2)}"


class GcloudDeployer:
    """Deployer backed by ``gcloud app deploy``."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        gcloud: str = "gcloud",
        release_track: str | None = "beta",
        timeout: float = DEPLOY_TIMEOUT_SECONDS,
    ):
        """Initialize deployer.

        Args:
            runner: Command runner (retry policy)
            gcloud: gcloud executable
            release_track: gcloud release track, or None for GA
            timeout: Cumulative deploy budget in seconds
        """
        self.runner = runner or CommandRunner()
        self.gcloud = gcloud
        self.release_track = release_track
        self.timeout = timeout

    def _base_command(self) -> list[str]:
        # -q keeps gcloud from prompting
        return [self.gcloud, "-q"]

    def deploy_command(self, project_id: str, version_id: str) -> list[str]:
        """argv for deploying without promoting traffic."""
        command = self._base_command()
        if self.release_track:
            command.append(self.release_track)
        command += [
            "app",
            "deploy",
            "--project",
            project_id,
            "--version",
            version_id,
            "--no-promote",
        ]
        return command

    def delete_command(self, project_id: str, version_id: str) -> list[str]:
        """argv for deleting a version."""
        return self._base_command() + [
            "app",
            "versions",
            "delete",
            version_id,
            "--project",
            project_id,
        ]

    def deploy(self, project_id: str, version_id: str, working_dir: Path) -> None:
        """Deploy working_dir as version_id.

        Raises:
            DeploymentFailed: If the budget runs out without a successful deploy
        """
        logger.info("Deploying %s as %s/%s", working_dir, project_id, version_id)
        result: CommandResult = self.runner.execute_with_retry(
            self.deploy_command(project_id, version_id),
            timeout=self.timeout,
            cwd=working_dir,
        )
        logger.info("Deployed %s/%s in %.1fs", project_id, version_id, result.elapsed)

    def delete(self, project_id: str, version_id: str) -> None:
        """Delete a deployed version.

        Raises:
            DeploymentFailed: If gcloud cannot delete the version
        """
        logger.info("Deleting version %s/%s", project_id, version_id)
        self.runner.execute_with_retry(
            self.delete_command(project_id, version_id),
            timeout=DELETE_TIMEOUT_SECONDS,
        )


class DeploymentRunner:
    """Deploy through a Deployer, then wait for the service to settle."""

    def __init__(
        self,
        deployer: Deployer,
        delay: int = 0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize runner.

        Args:
            deployer: Deployment strategy
            delay: Seconds to wait after deploying (0 for none)
            sleep: Sleep function
        """
        self.deployer = deployer
        self.delay = delay
        self.sleep = sleep

    def run(self, project_id: str, version_id: str, working_dir: Path) -> AppVersion:
        """Deploy and apply the post-deploy delay.

        Returns:
            The deployed version

        Raises:
            DeploymentFailed: Propagated from the deployer
        """
        self.deployer.deploy(project_id, version_id, working_dir)

        if self.delay > 0:
            logger.info("Waiting %ds for the deployment to propagate", self.delay)
            self.sleep(self.delay)

        return AppVersion(project_id=project_id, version_id=version_id)
