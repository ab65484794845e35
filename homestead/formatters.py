"""
Rich output formatting for Homestead operations.
"""

from collections import Counter
from typing import Optional

from rich.console import Console
from rich.table import Table

from .models import LinkOutcome, LinkStatus, MembershipResult, UserRecord


class ReportFormatter:
    """
    Renders provisioning results to a Rich console.

    Uses a fixed colour scheme:
    - green for created links and added memberships
    - dim for entries that were already in place
    - red for failures
    """

    def __init__(self, console: Optional[Console] = None):
        """Initialize formatter with Rich console."""
        self.console = console or Console()

        self.colors = {
            LinkStatus.CREATED: 'green',
            LinkStatus.ALREADY_EXISTS: 'dim',
            LinkStatus.FAILED: 'red',
        }

        self.symbols = {
            LinkStatus.CREATED: '+',
            LinkStatus.ALREADY_EXISTS: '=',
            LinkStatus.FAILED: '✗',
        }

    def link_table(self, outcomes: list[LinkOutcome]) -> Table:
        table = Table(title="Template links", show_lines=False)
        table.add_column("", width=1)
        table.add_column("Path")
        table.add_column("Status")
        table.add_column("Reason", style="dim")

        for outcome in outcomes:
            color = self.colors[outcome.status]
            table.add_row(
                f"[{color}]{self.symbols[outcome.status]}[/{color}]",
                outcome.path,
                f"[{color}]{outcome.status.value.replace('_', ' ')}[/{color}]",
                outcome.reason or "",
            )
        return table

    def link_summary(self, outcomes: list[LinkOutcome]) -> str:
        counts = Counter(outcome.status for outcome in outcomes)
        return (
            f"{counts[LinkStatus.CREATED]} created, "
            f"{counts[LinkStatus.ALREADY_EXISTS]} already existed, "
            f"{counts[LinkStatus.FAILED]} failed"
        )

    def print_links(self, outcomes: list[LinkOutcome]) -> None:
        if outcomes:
            self.console.print(self.link_table(outcomes))
        self.console.print(f"[bold]Links:[/bold] {self.link_summary(outcomes)}")

    def print_memberships(self, user: str, results: dict[str, MembershipResult]) -> None:
        for group, result in results.items():
            if result is MembershipResult.ADDED:
                self.console.print(f"  [green]+[/green] {user} added to {group}")
            else:
                self.console.print(f"  [dim]= {user} already in {group}[/dim]")

    def print_user(self, user: UserRecord) -> None:
        self.console.print(f"\n[bold green]✓ Created user {user.name}[/bold green]")
        self.console.print(f"  uid:   {user.uid}")
        self.console.print(f"  gid:   {user.gid}")
        self.console.print(f"  home:  {user.home_dir}")
        self.console.print(f"  shell: {user.shell}")
