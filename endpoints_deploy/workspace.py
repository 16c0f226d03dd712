"""Temporary working copies of the application source."""

import shutil
import tempfile
from pathlib import Path

from .observability import get_logger

logger = get_logger(__name__)

# Never copied into the working copy
IGNORED_PATTERNS = ("__pycache__", "*.pyc", ".pytest_cache", ".venv", ".git")


def clone_directory_into_tmp(source_dir: Path, prefix: str = "endpoints-deploy-") -> Path:
    """Copy a source tree into a fresh temporary directory.

    Args:
        source_dir: Directory to clone.
        prefix: Prefix for the temporary directory name.

    Returns:
        Path to the clone. The caller owns it and removes it when done.

    Raises:
        FileNotFoundError: If source_dir does not exist.
    """
    source_dir = Path(source_dir).resolve()
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Source directory not found: {source_dir}")

    tmp_root = Path(tempfile.mkdtemp(prefix=prefix))
    target = tmp_root / source_dir.name
    shutil.copytree(
        source_dir,
        target,
        ignore=shutil.ignore_patterns(*IGNORED_PATTERNS),
    )
    logger.debug("Cloned %s into %s", source_dir, target)
    return target


def remove_working_copy(path: Path) -> None:
    """Remove a clone created by clone_directory_into_tmp.

    Args:
        path: Path returned by clone_directory_into_tmp.
    """
    tmp_root = Path(path).parent
    shutil.rmtree(tmp_root, ignore_errors=True)
    logger.debug("Removed working copy %s", tmp_root)
