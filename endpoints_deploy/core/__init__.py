"""Core exceptions."""

from .exceptions import (
    AssertionFailed,
    DeploymentFailed,
    DeployTestError,
    ProbeUnreachable,
    SkipCondition,
    TemplateError,
)

__all__ = [
    "AssertionFailed",
    "DeploymentFailed",
    "DeployTestError",
    "ProbeUnreachable",
    "SkipCondition",
    "TemplateError",
]
