"""Cleanup report formatting and display."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.cleanup_plan import CleanupPlan, DeletionStep
from ..models.cleanup_result import CleanupResult, DeletionStepResult, RecoveryAdvisory
from ..models.resource_type import Severity

PROGRESS_WIDTH = 20

SEVERITY_STYLES = {
    Severity.LOW: "green",
    Severity.MEDIUM: "yellow",
    Severity.HIGH: "red",
    Severity.CRITICAL: "bold red",
}


def progress_bar(done: int, total: int, width: int = PROGRESS_WIDTH) -> str:
    """Render a text progress bar such as ``██████░░░░ 60%``."""
    ratio = done / total if total else 1.0
    filled = round(ratio * width)
    return f"{'█' * filled}{'░' * (width - filled)} {round(ratio * 100)}%"


class CleanupReporter:
    """Display cleanup plans, progress and results."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize cleanup reporter.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def display_plan(self, plan: CleanupPlan) -> None:
        """Display a plan as a table with risk and duration estimates."""
        style = SEVERITY_STYLES[plan.risk_level]
        self.console.print()
        self.console.print(
            Panel(
                f"[bold]Cleanup Plan[/bold]\n"
                f"Project: {plan.project_name}\n"
                f"Scope: {plan.target_resources.scope}\n"
                f"Risk level: [{style}]{plan.risk_level.value.upper()}[/{style}]\n"
                f"Estimated duration: {plan.estimated_duration}s",
                style="cyan",
            )
        )

        if plan.is_empty:
            self.console.print("[yellow]No resources match the selection[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", width=3)
        table.add_column("Type", style="cyan")
        table.add_column("Resource", style="white")
        table.add_column("Environment", width=12)
        table.add_column("Backup", width=8)

        for step in plan.steps:
            profile = step.type.profile
            table.add_row(
                str(step.order),
                f"{profile.icon} {profile.label}",
                step.description,
                step.environment.value if step.environment else "-",
                "required" if step.requires_backup else "-",
            )
        self.console.print(table)

        if plan.backup_plan.entries:
            self.console.print(
                f"[dim]Back up {len(plan.backup_plan.entries)} resource(s) to "
                f"{plan.backup_plan.destination} before continuing[/dim]"
            )
        self.console.print()

    # Progress events

    def plan_started(self, plan: CleanupPlan) -> None:
        self.console.print(f"[bold]Deleting {len(plan.steps)} resource(s) for {plan.project_name}[/bold]")

    def step_started(self, step: DeletionStep, index: int, total: int) -> None:
        self.console.print(f"{step.type.profile.icon} [{index}/{total}] {step.description}...")

    def step_completed(self, result: DeletionStepResult, index: int, total: int) -> None:
        self.console.print(f"  [green]✓[/green] done in {result.duration:.1f}s  {progress_bar(index, total)}")

    def step_failed(self, result: DeletionStepResult, index: int, total: int) -> None:
        self.console.print(f"  [red]✗ {result.error}[/red]")

    def recovery(self, advisory: RecoveryAdvisory) -> None:
        """Display manual-recovery guidance."""
        lines = []
        for instruction in advisory.instructions:
            lines.append(
                f"{instruction.resource_type.profile.icon} {instruction.description}\n   {instruction.instruction}"
            )
        lines.extend(f"[dim]{note}[/dim]" for note in advisory.notes)
        self.console.print()
        self.console.print(Panel("\n".join(lines), title="Manual recovery", style="yellow"))

    def summary(self, result: CleanupResult) -> None:
        table = Table(title="Summary", show_header=True, header_style="bold magenta")
        table.add_column("Result", style="cyan", width=15)
        table.add_column("Count", justify="right", style="yellow", width=10)
        table.add_row("✓ Completed", f"[green]{result.completed_steps}[/green]")
        if result.failed_steps:
            table.add_row("✗ Failed", f"[red]{result.failed_steps}[/red]")
        table.add_row("━" * 15, "━" * 10, style="dim")
        table.add_row("[bold]Duration", f"[bold]{result.total_duration:.1f}s")

        self.console.print()
        self.console.print(table)
        if result.success:
            self.console.print("[green]✓ Cleanup completed[/green]", style="bold")
        else:
            self.console.print("[red]✗ Cleanup halted[/red]", style="bold")
