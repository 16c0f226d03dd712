"""Configuration for the Endpoints deployment test.

Uses pydantic-settings for environment variable loading and validation.
Settings are built once and handed to the harness; nothing here is global.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Total budget for one deploy, retries included.
DEPLOY_TIMEOUT_SECONDS = 60 * 60


class DeploymentTestSettings(BaseSettings):
    """Settings for the echo deployment scenario.

    Environment variables:
        RUN_DEPLOYMENT_TESTS: Must be exactly "true" for the suite to run
        GOOGLE_ENDPOINTS_APIKEY: API key sent with each probe request
        GOOGLE_PROJECT_ID: Cloud project to deploy into
        GOOGLE_VERSION_ID: App Engine version id (generated when unset)
        GOOGLE_CLIENT_ID: OAuth client id written into openapi.yaml
        GOOGLE_SERVICE_ACCOUNT_EMAIL: Service account written into openapi.yaml
        GOOGLE_DEPLOYMENT_DELAY: Seconds to wait after deploying
        GOOGLE_KEEP_DEPLOYMENT: Keep the deployed version after the run
        LOG_LEVEL: Logging level
        LOG_JSON: Enable JSON log format
    """

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    # Gating
    run_deployment_tests: str | None = Field(
        default=None,
        validation_alias="RUN_DEPLOYMENT_TESTS",
        description='Enables the suite when set to "true"',
    )
    endpoints_apikey: str | None = Field(
        default=None,
        description="API key for the Endpoints service",
    )

    # Deployment target
    project_id: str | None = Field(
        default=None,
        description="Cloud project id",
    )
    version_id: str | None = Field(
        default=None,
        description="App Engine version id",
    )

    # Identity values substituted into openapi.yaml
    client_id: str | None = Field(
        default=None,
        description="OAuth client id",
    )
    service_account_email: str | None = Field(
        default=None,
        description="Service account email",
    )

    deployment_delay: int = Field(
        default=0,
        description="Seconds to sleep after a successful deploy (0=none)",
    )
    keep_deployment: bool = Field(
        default=False,
        description="Skip deleting the deployed version on teardown",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        validation_alias="LOG_JSON",
        description="Enable JSON log format",
    )

    @field_validator("deployment_delay", mode="before")
    @classmethod
    def _coerce_delay(cls, value: object) -> int:
        """Treat empty or non-numeric delays as no delay."""
        if value is None:
            return 0
        try:
            return max(int(str(value).strip()), 0)
        except ValueError:
            return 0

    @property
    def deployment_tests_enabled(self) -> bool:
        """Whether RUN_DEPLOYMENT_TESTS is exactly "true"."""
        return self.run_deployment_tests == "true"
