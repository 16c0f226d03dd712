"""CLI for running the echo deployment scenario outside pytest."""

from pathlib import Path
from typing import Optional

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import DeploymentTestSettings
from .core import (
    AssertionFailed,
    DeploymentFailed,
    DeployTestError,
    ProbeUnreachable,
    SkipCondition,
)
from .deployment import CommandRunner, GcloudDeployer
from .harness import DEFAULT_MESSAGE, HTTP_TIMEOUT_SECONDS, SAMPLE_DIR, DeploymentHarness
from .observability import setup_logging
from .probe import EndpointProbe

app = typer.Typer(
    name="endpoints-deploy-test",
    help="Deploy the Endpoints echo sample to App Engine and probe it",
    add_completion=False,
)
console = Console()

# Variables shown by `check`, in the order the harness consults them
GATING_VARIABLES = [
    ("RUN_DEPLOYMENT_TESTS", "run_deployment_tests"),
    ("GOOGLE_ENDPOINTS_APIKEY", "endpoints_apikey"),
    ("GOOGLE_PROJECT_ID", "project_id"),
    ("GOOGLE_CLIENT_ID", "client_id"),
    ("GOOGLE_SERVICE_ACCOUNT_EMAIL", "service_account_email"),
    ("GOOGLE_VERSION_ID", "version_id"),
    ("GOOGLE_DEPLOYMENT_DELAY", "deployment_delay"),
    ("GOOGLE_KEEP_DEPLOYMENT", "keep_deployment"),
]
SECRET_FIELDS = {"endpoints_apikey"}


def _skip_reason(settings: DeploymentTestSettings) -> str | None:
    """Reason the suite would be skipped, without touching anything."""
    if not settings.deployment_tests_enabled:
        return 'RUN_DEPLOYMENT_TESTS is not "true"'
    if not settings.endpoints_apikey:
        return "GOOGLE_ENDPOINTS_APIKEY is not set"
    if not settings.project_id:
        return "GOOGLE_PROJECT_ID is not set"
    if not settings.client_id or not settings.service_account_email:
        return "GOOGLE_CLIENT_ID or GOOGLE_SERVICE_ACCOUNT_EMAIL is not set"
    return None


def _print_failure(title: str, detail: str) -> None:
    # Command output may contain brackets, so the detail is printed raw
    console.print(f"[red]✗ {title}:[/red]")
    console.print(detail, markup=False, highlight=False)


def _load_settings() -> DeploymentTestSettings:
    """Settings from the environment, exiting 1 when a value is malformed."""
    try:
        return DeploymentTestSettings()
    except ValidationError as e:
        _print_failure("Invalid configuration", str(e))
        raise typer.Exit(code=1)


# ============================================================================
# Check Command
# ============================================================================


@app.command()
def check():
    """Show the gating environment and whether the suite would run."""
    settings = _load_settings()

    table = Table(title="Deployment test environment")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")

    for env_name, field in GATING_VARIABLES:
        value = getattr(settings, field)
        if value in (None, ""):
            shown = "[dim]unset[/dim]"
        elif field in SECRET_FIELDS:
            shown = "****"
        else:
            shown = str(value)
        table.add_row(env_name, shown)

    console.print(table)

    reason = _skip_reason(settings)
    if reason:
        console.print(f"[yellow]Suite would be skipped:[/yellow] {reason}")
    else:
        console.print("[green]✓ Suite would run[/green]")


# ============================================================================
# Run Command
# ============================================================================


@app.command()
def run(
    source: Path = typer.Option(SAMPLE_DIR, "--source", "-s", help="Application directory"),
    message: str = typer.Option(DEFAULT_MESSAGE, "--message", "-m", help="Text to echo"),
    keep: bool = typer.Option(False, "--keep", help="Keep the deployed version"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Deploy the application, probe /echo and clean up."""
    settings = _load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
    )
    if keep:
        settings.keep_deployment = True

    harness = DeploymentHarness(settings, source_dir=source)

    try:
        result = harness.run_scenario(message)
    except SkipCondition as e:
        console.print(f"[yellow]Skipped:[/yellow] {e.message}")
        return
    except DeploymentFailed as e:
        _print_failure("Deployment failed", e.message)
        raise typer.Exit(code=1)
    except (ProbeUnreachable, AssertionFailed) as e:
        _print_failure("Probe failed", e.message)
        raise typer.Exit(code=1)
    except DeployTestError as e:
        _print_failure("Error", str(e))
        raise typer.Exit(code=1)
    except FileNotFoundError as e:
        _print_failure("Source not found", str(e))
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[green]✓ Echo round trip succeeded[/green]\n\n"
            f"Status: {result.status_code}\n"
            f"Message length: {len(result.body['message'])}",
            title="Deployment Test Passed",
        )
    )


# ============================================================================
# Probe Command
# ============================================================================


@app.command()
def probe(
    base_url: str = typer.Argument(..., help="Base URL of the deployed service"),
    message: str = typer.Option(DEFAULT_MESSAGE, "--message", "-m", help="Text to echo"),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", "-k", help="API key (defaults to GOOGLE_ENDPOINTS_APIKEY)"
    ),
):
    """Probe an already deployed service."""
    key = api_key or _load_settings().endpoints_apikey
    if not key:
        console.print("[red]✗ No API key: pass --api-key or set GOOGLE_ENDPOINTS_APIKEY[/red]")
        raise typer.Exit(code=1)

    with httpx.Client(base_url=base_url, timeout=HTTP_TIMEOUT_SECONDS) as client:
        try:
            result = EndpointProbe(client, key).echo(message)
        except (ProbeUnreachable, AssertionFailed) as e:
            _print_failure("Probe failed", e.message)
            raise typer.Exit(code=1)

    console.print(f"[green]✓ {base_url} echoed the message (HTTP {result.status_code})[/green]")


# ============================================================================
# Cleanup Command
# ============================================================================


@app.command()
def cleanup(
    version_id: str = typer.Argument(..., help="Version to delete"),
    project_id: Optional[str] = typer.Option(
        None, "--project", "-p", help="Project (defaults to GOOGLE_PROJECT_ID)"
    ),
):
    """Delete a version left behind by --keep."""
    project = project_id or _load_settings().project_id
    if not project:
        console.print("[red]✗ No project: pass --project or set GOOGLE_PROJECT_ID[/red]")
        raise typer.Exit(code=1)

    deployer = GcloudDeployer(runner=CommandRunner(max_attempts=1))
    try:
        deployer.delete(project, version_id)
    except DeploymentFailed as e:
        _print_failure("Delete failed", e.message)
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Deleted {project}/{version_id}[/green]")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
