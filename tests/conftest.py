"""Shared pytest fixtures for the test suite.

Provides an isolated environment, settings built from it, and a throwaway
application source tree.
"""

# Add project root to path
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from endpoints_deploy.config import DeploymentTestSettings  # noqa: E402

GATING_ENV_VARS = [
    "RUN_DEPLOYMENT_TESTS",
    "GOOGLE_ENDPOINTS_APIKEY",
    "GOOGLE_PROJECT_ID",
    "GOOGLE_VERSION_ID",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_DEPLOYMENT_DELAY",
    "GOOGLE_KEEP_DEPLOYMENT",
    "LOG_LEVEL",
    "LOG_JSON",
]

FULL_ENV = {
    "RUN_DEPLOYMENT_TESTS": "true",
    "GOOGLE_ENDPOINTS_APIKEY": "test-api-key",
    "GOOGLE_PROJECT_ID": "test-project",
    "GOOGLE_VERSION_ID": "test-version",
    "GOOGLE_CLIENT_ID": "client-123.apps.googleusercontent.com",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL": "deployer@test-project.iam.gserviceaccount.com",
}

OPENAPI_TEMPLATE = """\
swagger: "2.0"
host: "YOUR-PROJECT-ID.appspot.com"
securityDefinitions:
  google_jwt:
    x-google-issuer: "YOUR-SERVICE-ACCOUNT-EMAIL"
    x-google-audiences: "YOUR-CLIENT-ID"
"""

APP_YAML_TEMPLATE = """\
runtime: python
env: flex
endpoints_api_service:
  name: YOUR-PROJECT-ID.appspot.com
"""


@pytest.fixture(autouse=True)
def clean_env(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every variable the harness reads.

    Integration tests keep the real environment; it decides whether they run.
    """
    if request.node.get_closest_marker("integration"):
        return
    for name in GATING_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., DeploymentTestSettings]:
    """Build settings from the given environment variables.

    Returns:
        Factory taking env var names as keyword arguments.
    """

    def _make(**env: str) -> DeploymentTestSettings:
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return DeploymentTestSettings(_env_file=None)

    return _make


@pytest.fixture
def full_env() -> dict[str, str]:
    """Environment with every required variable set."""
    return dict(FULL_ENV)


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A minimal application tree with templated configuration.

    Returns:
        Path to the source directory.
    """
    source = tmp_path / "app-source"
    source.mkdir()
    (source / "openapi.yaml").write_text(OPENAPI_TEMPLATE)
    (source / "app.yaml").write_text(APP_YAML_TEMPLATE)
    (source / "main.py").write_text("print('hello')\n")
    return source

