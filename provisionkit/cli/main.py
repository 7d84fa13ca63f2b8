"""Main CLI entry point using Typer."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import Config
from ..errors import ValidationError
from ..models.cleanup_plan import SCOPES, ResourceSelection
from ..models.environment import Environment
from ..models.provisioning_record import ProvisioningRequest
from ..models.resource_type import ResourceType
from ..provision.factory import resolve_provisioner
from ..provision.service import provision_cloud_resources
from ..teardown.audit import AuditStorage
from ..teardown.discovery import discover as discover_resources
from ..teardown.reporter import SEVERITY_STYLES, CleanupReporter
from ..teardown.service import preview_cleanup, run_cleanup
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="provisionkit",
    help="Provision and tear down per-environment cloud resources",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None


@app.callback()
def main(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Config file (default: ~/.provisionkit/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """provisionkit - cloud resource lifecycle for generated applications."""
    global config

    # Load configuration
    try:
        config = Config.load(config_path)
    except ValueError as e:
        console.print(f"✗ Invalid configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"provisionkit version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


@app.command()
def provision(
    project_path: Path = typer.Argument(Path("."), help="Project directory"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Project name (default: directory name)"),
    environments: Optional[List[str]] = typer.Option(
        None, "--env", "-e", help="Environment to provision (repeatable, default: all)"
    ),
    database: Optional[str] = typer.Option(None, "--database", help="Database provider: turso or supabase"),
    storage: Optional[str] = typer.Option(
        None, "--storage", help="Storage provider: vercel-blob, aws-s3 or cloudflare-r2"
    ),
    hosting: bool = typer.Option(False, "--hosting/--no-hosting", help="Create a Vercel project"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Override cloud mode: real or mock"),
    output_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Create databases, storage and hosting for a project and write env files."""
    try:
        if mode:
            config.cloud_mode = mode
            config.validate()

        project_path = project_path.resolve()
        request = ProvisioningRequest(
            project_name=name or project_path.name,
            project_path=project_path,
            environments=environments or list(Environment),
            database_provider=database,
            storage_provider=storage,
            hosting=hosting,
        )

        # Validate names up front so user errors exit with code 1
        provisioner = resolve_provisioner(config)
        provisioner.resource_names(request)

        if not output_json:
            console.print(f"☁️  Provisioning resources for [bold]{request.project_name}[/bold]...", style="cyan")

        result = provision_cloud_resources(request, config, provisioner=provisioner)

        if output_json:
            console.print_json(json.dumps(result.to_dict()))
        elif result.skipped:
            console.print("Automatic provisioning is disabled; nothing was created", style="yellow")
        else:
            _display_provisioning(result)

        if not result.success:
            raise typer.Exit(code=2)

    except typer.Exit:
        raise
    except (ValidationError, ValueError) as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during provisioning: {e}", style="bold red")
        logger.exception("Error in provision command")
        raise typer.Exit(code=2)


def _display_provisioning(result) -> None:
    record = result.record
    if record is not None and record.database is not None and record.database.databases:
        table = Table(title=f"Databases ({record.database.provider})", show_header=True, header_style="bold magenta")
        table.add_column("Environment", style="cyan")
        table.add_column("Name")
        table.add_column("URL", style="dim")
        for db in record.database.databases:
            table.add_row(db.environment.value, db.name, db.url)
        console.print(table)

    if record is not None and record.storage is not None:
        console.print(f"📦 Storage: {record.storage.provider} [bold]{record.storage.store_name}[/bold]")
    if record is not None and record.hosting is not None:
        console.print(f"🌐 Hosting: Vercel project [bold]{record.hosting.project_name}[/bold]")

    for path in result.env_files:
        console.print(f"  🔧 wrote {path}", style="dim")

    if result.success:
        console.print("✓ Provisioning complete", style="bold green")
    else:
        if result.failed_environments:
            console.print(f"✗ Failed environments: {', '.join(result.failed_environments)}", style="bold red")
        console.print(f"✗ {result.error}", style="bold red")


@app.command()
def discover(
    project_path: Path = typer.Argument(Path("."), help="Project directory"),
    output_json: bool = typer.Option(False, "--json", help="Print the inventory as JSON"),
):
    """Show the cloud resources attached to a project."""
    try:
        inventory = discover_resources(project_path)

        if output_json:
            console.print_json(json.dumps(inventory.to_dict()))
            return

        if inventory.is_empty:
            console.print("No cloud resources found", style="yellow")
            return

        graph = inventory.dependency_graph
        risk = graph.risk_assessment.overall
        style = SEVERITY_STYLES[risk]
        console.print(
            Panel(
                f"[bold]{inventory.project_name}[/bold]\n"
                f"Path: {inventory.project_path}\n"
                f"Deletion risk: [{style}]{risk.value.upper()}[/{style}]",
                style="cyan",
            )
        )

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Order", justify="right", width=5)
        table.add_column("Type", style="cyan")
        table.add_column("Resource")
        table.add_column("Environment", width=12)
        by_id = {res.resource_id: res for res in inventory.iter_resources()}
        for entry in graph.deletion_order:
            res = by_id[entry.resource_id]
            profile = res.resource_type.profile
            table.add_row(
                str(entry.priority),
                f"{profile.icon} {profile.label}",
                res.description,
                res.environment.value if res.environment else "-",
            )
        console.print(table)

        for mitigation in graph.risk_assessment.mitigations:
            console.print(f"  • {mitigation}", style="dim")

    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during discovery: {e}", style="bold red")
        logger.exception("Error in discover command")
        raise typer.Exit(code=2)


@app.command()
def cleanup(
    project_path: Path = typer.Argument(Path("."), help="Project directory"),
    types: Optional[List[str]] = typer.Option(
        None, "--type", "-t", help="Resource type to delete (repeatable, default: all found)"
    ),
    scope: str = typer.Option("all", "--scope", "-s", help="development, staging, production or all"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-x", help="Resource id to keep (repeatable)"),
    confirm: bool = typer.Option(False, "--confirm", help="Actually delete (default: preview only)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the typed confirmation"),
):
    """Delete a project's cloud resources in dependency order.

    Without --confirm only the plan is shown.
    """
    try:
        if scope not in SCOPES and scope not in ("dev", "stg", "prod"):
            console.print(f"✗ Invalid scope: {scope}. Must be one of: {', '.join(SCOPES)}", style="bold red")
            raise typer.Exit(code=1)

        if types:
            try:
                selected_types = [ResourceType(t) for t in types]
            except ValueError:
                valid = ", ".join(t.value for t in ResourceType)
                console.print(f"✗ Invalid resource type. Must be one of: {valid}", style="bold red")
                raise typer.Exit(code=1)
        else:
            inventory = discover_resources(project_path)
            selected_types = [t for t in ResourceType if inventory.has_type(t)]
            if not selected_types:
                console.print("No cloud resources found", style="yellow")
                return

        selection = ResourceSelection(
            selected_types=selected_types,
            scope=scope,
            excluded_resources=list(exclude or []),
        )

        plan = preview_cleanup(project_path, selection)
        reporter = CleanupReporter(console)
        reporter.display_plan(plan)

        if plan.is_empty:
            return

        if not confirm:
            console.print("Preview only. Re-run with --confirm to delete these resources.", style="yellow")
            return

        if not yes:
            typed = typer.prompt(f"Type the project name ({plan.project_name}) to confirm deletion")
            if typed.strip() != plan.project_name:
                console.print("✗ Confirmation did not match; nothing was deleted", style="bold red")
                raise typer.Exit(code=1)

        result = run_cleanup(
            project_path,
            selection,
            config=config,
            reporter=reporter,
            audit_storage=AuditStorage(config.resolved_audit_dir),
        )

        if result.run_id:
            console.print(f"Audit log: run [cyan]{result.run_id}[/cyan]", style="dim")
        if not result.success:
            raise typer.Exit(code=2)

    except typer.Exit:
        raise
    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during cleanup: {e}", style="bold red")
        logger.exception("Error in cleanup command")
        raise typer.Exit(code=2)


# Audit commands group
audit_app = typer.Typer(help="Cleanup audit log commands")
app.add_typer(audit_app, name="audit")


def _parse_date(value: Optional[str], option: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        console.print(f"✗ Invalid {option} date format. Use YYYY-MM-DD (UTC)", style="bold red")
        raise typer.Exit(code=1)


@audit_app.command("list")
def audit_list(
    since: Optional[str] = typer.Option(None, "--since", help="Start date (YYYY-MM-DD, UTC)"),
    until: Optional[str] = typer.Option(None, "--until", help="End date (YYYY-MM-DD, UTC)"),
):
    """List recorded cleanup runs."""
    try:
        since_dt = _parse_date(since, "--since")
        until_dt = _parse_date(until, "--until")
        runs = AuditStorage(config.resolved_audit_dir).query_runs(since=since_dt, until=until_dt)

        if not runs:
            console.print("No cleanup runs recorded", style="yellow")
            return

        table = Table(title="Cleanup Runs", show_header=True, header_style="bold magenta")
        table.add_column("Run ID", style="cyan")
        table.add_column("Timestamp")
        table.add_column("Project")
        table.add_column("Steps", justify="right")
        table.add_column("Status")
        for audit in runs:
            run = audit["run"]
            status = "[green]completed[/green]" if run["success"] else "[red]halted[/red]"
            table.add_row(
                run["run_id"],
                run["timestamp"][:19],
                run["project_name"],
                f"{run['completed_steps']}/{run['planned_steps']}",
                status,
            )
        console.print(table)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Error reading audit logs: {e}", style="bold red")
        logger.exception("Error in audit list command")
        raise typer.Exit(code=2)


@audit_app.command("show")
def audit_show(run_id: str = typer.Argument(..., help="Run ID")):
    """Show the audit log of one cleanup run."""
    try:
        audit = AuditStorage(config.resolved_audit_dir).get_run(run_id)
        if audit is None:
            console.print(f"✗ Run '{run_id}' not found", style="bold red")
            raise typer.Exit(code=1)

        run = audit["run"]
        console.print(
            Panel(
                f"[bold]Run {run['run_id']}[/bold]\n"
                f"Project: {run['project_name']} ({run['project_path']})\n"
                f"Timestamp: {run['timestamp']}\n"
                f"Risk level: {run['risk_level']}\n"
                f"Completed: {run['completed_steps']}  Failed: {run['failed_steps']}",
                style="cyan",
            )
        )

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Step", style="cyan")
        table.add_column("Type")
        table.add_column("Result")
        table.add_column("Duration", justify="right")
        for step in audit.get("steps", []):
            outcome = "[green]✓[/green]" if step["success"] else f"[red]✗ {step['error']}[/red]"
            table.add_row(step["step_id"], step["type"], outcome, f"{step['duration']:.1f}s")
        console.print(table)

        for instruction in audit.get("recovery", {}).get("instructions", []):
            console.print(f"  ↺ {instruction['description']}: {instruction['instruction']}", style="yellow")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Error reading audit log: {e}", style="bold red")
        logger.exception("Error in audit show command")
        raise typer.Exit(code=2)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
