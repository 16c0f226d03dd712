"""Tests for working copies in endpoints_deploy/workspace.py."""

from pathlib import Path

import pytest

from endpoints_deploy.workspace import clone_directory_into_tmp, remove_working_copy


class TestCloneDirectoryIntoTmp:
    """Test clone_directory_into_tmp."""

    def test_clone_is_a_separate_copy(self, source_dir: Path) -> None:
        clone = clone_directory_into_tmp(source_dir)
        try:
            assert clone != source_dir
            assert clone.name == source_dir.name
            assert (clone / "openapi.yaml").read_text() == (source_dir / "openapi.yaml").read_text()

            (clone / "openapi.yaml").write_text("changed")
            assert (source_dir / "openapi.yaml").read_text() != "changed"
        finally:
            remove_working_copy(clone)

    def test_skips_caches(self, source_dir: Path) -> None:
        (source_dir / "__pycache__").mkdir()
        (source_dir / "__pycache__" / "main.cpython-312.pyc").write_bytes(b"\0")

        clone = clone_directory_into_tmp(source_dir)
        try:
            assert not (clone / "__pycache__").exists()
            assert (clone / "main.py").exists()
        finally:
            remove_working_copy(clone)

    def test_each_clone_is_fresh(self, source_dir: Path) -> None:
        first = clone_directory_into_tmp(source_dir)
        second = clone_directory_into_tmp(source_dir)
        try:
            assert first != second
        finally:
            remove_working_copy(first)
            remove_working_copy(second)

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            clone_directory_into_tmp(tmp_path / "nope")


class TestRemoveWorkingCopy:
    """Test remove_working_copy."""

    def test_removes_temporary_root(self, source_dir: Path) -> None:
        clone = clone_directory_into_tmp(source_dir)
        remove_working_copy(clone)
        assert not clone.exists()
        assert not clone.parent.exists()
        assert source_dir.exists()
