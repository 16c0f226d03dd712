"""Tests for placeholder substitution in endpoints_deploy/templating.py."""

from pathlib import Path

import pytest
import yaml

from endpoints_deploy.core import TemplateError
from endpoints_deploy.templating import (
    CLIENT_ID_PLACEHOLDER,
    PLACEHOLDERS,
    PROJECT_ID_PLACEHOLDER,
    SERVICE_ACCOUNT_EMAIL_PLACEHOLDER,
    ConfigTemplater,
    render,
)

VALUES = ConfigTemplater.values_for(
    "my-project",
    "client-123.apps.googleusercontent.com",
    "sa@my-project.iam.gserviceaccount.com",
)


class TestRender:
    """Test the pure render function."""

    def test_replaces_all_placeholders(self) -> None:
        template = f"{PROJECT_ID_PLACEHOLDER} {CLIENT_ID_PLACEHOLDER} {SERVICE_ACCOUNT_EMAIL_PLACEHOLDER}"
        result = render(template, VALUES)
        assert result == (
            "my-project client-123.apps.googleusercontent.com "
            "sa@my-project.iam.gserviceaccount.com"
        )

    def test_replaces_every_occurrence(self) -> None:
        template = f"{PROJECT_ID_PLACEHOLDER}.appspot.com/{PROJECT_ID_PLACEHOLDER}"
        assert render(template, VALUES) == "my-project.appspot.com/my-project"

    def test_absent_placeholder_is_noop(self) -> None:
        template = "host: example.com\n"
        assert render(template, VALUES) == template

    def test_empty_mapping(self) -> None:
        template = f"host: {PROJECT_ID_PLACEHOLDER}"
        assert render(template, {}) == template


class TestConfigTemplater:
    """Test ConfigTemplater.apply against a working copy."""

    def test_values_for_covers_every_placeholder(self) -> None:
        assert set(VALUES) == set(PLACEHOLDERS)

    def test_rewrites_documents_without_placeholders(self, source_dir: Path) -> None:
        paths = ConfigTemplater().apply(source_dir, VALUES)

        assert [p.name for p in paths] == ["openapi.yaml", "app.yaml"]
        for path in paths:
            text = path.read_text()
            for placeholder in PLACEHOLDERS:
                assert placeholder not in text

        openapi = yaml.safe_load((source_dir / "openapi.yaml").read_text())
        assert openapi["host"] == "my-project.appspot.com"
        jwt = openapi["securityDefinitions"]["google_jwt"]
        assert jwt["x-google-issuer"] == "sa@my-project.iam.gserviceaccount.com"
        assert jwt["x-google-audiences"] == "client-123.apps.googleusercontent.com"

        app_yaml = yaml.safe_load((source_dir / "app.yaml").read_text())
        assert app_yaml["endpoints_api_service"]["name"] == "my-project.appspot.com"

    def test_single_document(self, source_dir: Path) -> None:
        paths = ConfigTemplater(filenames=["openapi.yaml"]).apply(source_dir, VALUES)
        assert paths == [source_dir / "openapi.yaml"]
        assert PROJECT_ID_PLACEHOLDER in (source_dir / "app.yaml").read_text()

    def test_missing_template_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateError) as exc_info:
            ConfigTemplater().apply(tmp_path, VALUES)
        assert "template not found" in exc_info.value.message

    def test_invalid_yaml_raises_and_writes_nothing(self, source_dir: Path) -> None:
        original = (source_dir / "openapi.yaml").read_text()
        (source_dir / "app.yaml").write_text("name: YOUR-PROJECT-ID\n")

        with pytest.raises(TemplateError):
            ConfigTemplater().apply(source_dir, {PROJECT_ID_PLACEHOLDER: "[broken"})

        assert (source_dir / "openapi.yaml").read_text() == original
