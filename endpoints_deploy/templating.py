"""Placeholder substitution for the deployment configuration documents."""

from collections.abc import Mapping, Sequence
from pathlib import Path

import yaml

from .core import TemplateError
from .observability import get_logger

logger = get_logger(__name__)

PROJECT_ID_PLACEHOLDER = "YOUR-PROJECT-ID"
CLIENT_ID_PLACEHOLDER = "YOUR-CLIENT-ID"
SERVICE_ACCOUNT_EMAIL_PLACEHOLDER = "YOUR-SERVICE-ACCOUNT-EMAIL"

PLACEHOLDERS = (
    PROJECT_ID_PLACEHOLDER,
    CLIENT_ID_PLACEHOLDER,
    SERVICE_ACCOUNT_EMAIL_PLACEHOLDER,
)

# openapi.yaml carries all three values, app.yaml names the Endpoints service
DEFAULT_DOCUMENTS = ("openapi.yaml", "app.yaml")


def render(template: str, values: Mapping[str, str]) -> str:
    """Replace every occurrence of each placeholder with its value.

    Placeholders missing from the template are ignored.

    Args:
        template: Template text.
        values: Mapping of placeholder token to replacement.

    Returns:
        Rendered text.
    """
    rendered = template
    for placeholder, value in values.items():
        rendered = rendered.replace(placeholder, value)
    return rendered


class ConfigTemplater:
    """Render configuration documents in place inside a working copy."""

    def __init__(self, filenames: Sequence[str] = DEFAULT_DOCUMENTS):
        """Initialize templater.

        Args:
            filenames: Document paths relative to the working directory.
        """
        self.filenames = tuple(filenames)

    @staticmethod
    def values_for(project_id: str, client_id: str, service_account_email: str) -> dict[str, str]:
        """Build the placeholder mapping for the three identity values."""
        return {
            PROJECT_ID_PLACEHOLDER: project_id,
            CLIENT_ID_PLACEHOLDER: client_id,
            SERVICE_ACCOUNT_EMAIL_PLACEHOLDER: service_account_email,
        }

    def apply(self, working_dir: Path, values: Mapping[str, str]) -> list[Path]:
        """Render each document and write it back into working_dir.

        All documents are rendered and validated before any is written.

        Args:
            working_dir: Temporary working copy (never the checked-in source).
            values: Mapping of placeholder token to replacement.

        Returns:
            Paths of the rewritten documents.

        Raises:
            TemplateError: If a document is missing or renders to invalid YAML.
        """
        rendered: dict[Path, str] = {}
        for filename in self.filenames:
            path = Path(working_dir) / filename
            try:
                template = path.read_text(encoding="utf-8")
            except FileNotFoundError as e:
                raise TemplateError(str(path), "template not found") from e

            document = render(template, values)
            try:
                yaml.safe_load(document)
            except yaml.YAMLError as e:
                raise TemplateError(str(path), f"rendered document is not valid YAML: {e}") from e
            rendered[path] = document

        for path, document in rendered.items():
            path.write_text(document, encoding="utf-8")
            logger.info("Rendered %s", path)
        return list(rendered)
