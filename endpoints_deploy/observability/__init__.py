"""Logging for the deployment test."""

from .logging import bind_version, current_version, get_logger, setup_logging

__all__ = [
    "bind_version",
    "current_version",
    "get_logger",
    "setup_logging",
]
