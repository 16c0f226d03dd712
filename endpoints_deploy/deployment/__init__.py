"""Deployment of the sample application."""

from .command import CommandResult, CommandRunner
from .deployer import (
    AppVersion,
    Deployer,
    DeploymentRunner,
    GcloudDeployer,
    SupportsDelete,
    generate_version_id,
)

__all__ = [
    "AppVersion",
    "CommandResult",
    "CommandRunner",
    "Deployer",
    "DeploymentRunner",
    "GcloudDeployer",
    "SupportsDelete",
    "generate_version_id",
]
