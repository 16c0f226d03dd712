"""Deployment test for the Cloud Endpoints echo sample."""

from .config import DEPLOY_TIMEOUT_SECONDS, DeploymentTestSettings
from .core import (
    AssertionFailed,
    DeploymentFailed,
    DeployTestError,
    ProbeUnreachable,
    SkipCondition,
    TemplateError,
)
from .harness import DeploymentHarness, HarnessState

__all__ = [
    # Harness
    "DeploymentHarness",
    "HarnessState",
    # Configuration
    "DEPLOY_TIMEOUT_SECONDS",
    "DeploymentTestSettings",
    # Exceptions
    "AssertionFailed",
    "DeploymentFailed",
    "DeployTestError",
    "ProbeUnreachable",
    "SkipCondition",
    "TemplateError",
]
