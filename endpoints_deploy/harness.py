"""Orchestration of the echo deployment scenario.

The harness runs in two setup phases:

1. ``set_up()`` checks the gating flag and the API key. Nothing touches the
   filesystem or the network yet.
2. ``deploy_app()`` resolves the project and version, then ``before_deploy()``
   checks the identity values, clones the sample into a temporary directory
   and renders ``openapi.yaml`` and ``app.yaml``. Only then is the clone
   deployed.

Missing configuration raises SkipCondition in either phase. A failed deploy
raises DeploymentFailed and is never turned into a skip.
"""

import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

import httpx

from .config import DeploymentTestSettings
from .core import DeploymentFailed, SkipCondition
from .deployment import (
    AppVersion,
    Deployer,
    DeploymentRunner,
    GcloudDeployer,
    SupportsDelete,
    generate_version_id,
)
from .observability import bind_version, get_logger
from .probe import EchoResult, EndpointProbe
from .templating import ConfigTemplater
from .workspace import clone_directory_into_tmp, remove_working_copy

logger = get_logger(__name__)

SAMPLE_DIR = Path(__file__).resolve().parent.parent / "sample"

DEFAULT_MESSAGE = (
    "So if you're lost and on your own\n"
    "You can never surrender\n"
    "And if your path won't lead you home\n"
    "You can never surrender"
)

HTTP_TIMEOUT_SECONDS = 30.0


class HarnessState(str, Enum):
    """Lifecycle of one harness."""

    PENDING = "pending"
    SKIPPED = "skipped"
    RUNNING = "running"


class DeploymentHarness:
    """Deploy the sample once, then probe it."""

    def __init__(
        self,
        settings: DeploymentTestSettings,
        source_dir: Path = SAMPLE_DIR,
        deployer: Deployer | None = None,
        templater: ConfigTemplater | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize harness.

        Args:
            settings: Resolved configuration
            source_dir: Application source to clone and deploy
            deployer: Deployment strategy (gcloud by default)
            templater: Renders the configuration document
            http_client: Client for probing; built from the version URL when None
            sleep: Sleep function used for the post-deploy delay
        """
        self.settings = settings
        self.source_dir = Path(source_dir)
        self.deployer = deployer or GcloudDeployer()
        self.templater = templater or ConfigTemplater()
        self.sleep = sleep

        self.state = HarnessState.PENDING
        self.ready = False
        self.working_dir: Path | None = None
        self.app_version: AppVersion | None = None
        self._client = http_client
        self._owns_client = http_client is None

    def _skip(self, reason: str) -> None:
        self.state = HarnessState.SKIPPED
        logger.info("Skipping: %s", reason)
        raise SkipCondition(reason)

    def set_up(self) -> None:
        """Check the class-level preconditions.

        Raises:
            SkipCondition: If the suite is not enabled or the API key is unset
        """
        if not self.settings.deployment_tests_enabled:
            self._skip('To run this test, set RUN_DEPLOYMENT_TESTS env to "true".')

        if not self.settings.endpoints_apikey:
            self._skip("Set the GOOGLE_ENDPOINTS_APIKEY environment variable")

        self.ready = True

    def deploy_app(self) -> AppVersion:
        """Prepare the working copy and deploy it.

        Returns:
            The deployed version

        Raises:
            SkipCondition: If project or identity values are missing
            DeploymentFailed: If the deploy does not succeed in time
        """
        if not self.ready:
            raise RuntimeError("set_up() must succeed before deploy_app()")

        project_id = self.settings.project_id
        if not project_id:
            self._skip("Set the GOOGLE_PROJECT_ID environment variable")
        version_id = self.settings.version_id or generate_version_id()
        bind_version(version_id)

        working_dir = self.before_deploy(project_id)

        runner = DeploymentRunner(
            self.deployer,
            delay=self.settings.deployment_delay,
            sleep=self.sleep,
        )
        try:
            self.app_version = runner.run(project_id, version_id, working_dir)
        except DeploymentFailed as e:
            logger.error("Deployment failed: %s", e)
            raise

        self.state = HarnessState.RUNNING
        logger.info("Version live at %s", self.app_version.base_url)
        return self.app_version

    def before_deploy(self, project_id: str) -> Path:
        """Clone the source and render its configuration.

        Identity values are checked before cloning, so a skip leaves nothing
        behind.

        Returns:
            Path of the working copy
        """
        client_id = self.settings.client_id
        service_account_email = self.settings.service_account_email
        if not client_id or not service_account_email:
            self._skip(
                "Please set GOOGLE_CLIENT_ID, GOOGLE_PROJECT_ID "
                "and GOOGLE_SERVICE_ACCOUNT_EMAIL"
            )

        self.working_dir = clone_directory_into_tmp(self.source_dir)
        self.templater.apply(
            self.working_dir,
            ConfigTemplater.values_for(project_id, client_id, service_account_email),
        )
        return self.working_dir

    def probe(self) -> EndpointProbe:
        """Probe bound to the deployed version."""
        if self.state is not HarnessState.RUNNING or self.app_version is None:
            raise RuntimeError("No version deployed")

        if self._client is None:
            self._client = httpx.Client(
                base_url=self.app_version.base_url,
                timeout=HTTP_TIMEOUT_SECONDS,
            )
        return EndpointProbe(self._client, self.settings.endpoints_apikey)

    def tear_down(self) -> None:
        """Release the client, delete the version and drop the working copy.

        Deletion failures are logged; the run result stands.
        """
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

        if self.app_version is not None:
            if self.settings.keep_deployment:
                logger.info("Keeping version %s", self.app_version.version_id)
            elif isinstance(self.deployer, SupportsDelete):
                try:
                    self.deployer.delete(
                        self.app_version.project_id,
                        self.app_version.version_id,
                    )
                except DeploymentFailed as e:
                    logger.warning("Could not delete version: %s", e)
            self.app_version = None

        if self.working_dir is not None:
            remove_working_copy(self.working_dir)
            self.working_dir = None

        bind_version(None)

    def run_scenario(self, message: str = DEFAULT_MESSAGE) -> EchoResult:
        """Set up, deploy, probe once and tear down.

        Raises:
            SkipCondition: If configuration is missing
            DeploymentFailed: If the deploy fails
            ProbeUnreachable: If the service cannot be reached
            AssertionFailed: If the echo does not match
        """
        try:
            self.set_up()
            self.deploy_app()
            return self.probe().echo(message)
        finally:
            self.tear_down()
