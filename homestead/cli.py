"""
Homestead CLI - Provision developer accounts and their home directories.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from .errors import HomesteadError, PrivilegeError, StorageUnavailable
from .formatters import ReportFormatter
from .identity import AccountDatabase, GroupMembership, IdentityAllocator, IdentityProvisioner
from .linker import Owner, link_tree
from .models import LinkStatus
from .settings import get_settings
from .system import has_root_privileges, set_password

# Setup
app = typer.Typer(
    name="homestead",
    help="Provision developer accounts and home directories",
    add_completion=False,
)
console = Console()
formatter = ReportFormatter(console)


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Configure logging on module import
configure_logging()


def parse_group_list(groups: str | None) -> list[str]:
    """Split a comma-separated group argument, dropping empty entries."""
    if not groups:
        return []
    return [name.strip() for name in groups.split(",") if name.strip()]


def _require_root(action: str) -> None:
    """Raise PrivilegeError unless running as root."""
    if not has_root_privileges():
        raise PrivilegeError(f"{action} requires root privileges (try sudo)")


def _create_command_panel(title: str, color: str, detail: str) -> Panel:
    """Create a Rich Panel for command display.

    Args:
        title: Command title (e.g., "Homestead Create User")
        color: Border color (e.g., "blue", "cyan")
        detail: Second line describing the target

    Returns:
        Formatted Rich Panel
    """
    return Panel.fit(
        f"[bold {color}]{title}[/bold {color}]\n{detail}",
        border_style=color,
    )


def _handle_command_error(e: Exception, command_type: str) -> None:
    """Print a failed command and exit.

    Args:
        e: Exception that occurred
        command_type: Command name for the message

    Raises:
        SystemExit: Always exits with code 1
    """
    console.print(
        f"\n[bold red]✗ {command_type.capitalize()} failed:[/bold red] {e}"
    )
    raise typer.Exit(code=1)


def _link_outcomes_failed(outcomes) -> bool:
    return any(outcome.status is LinkStatus.FAILED for outcome in outcomes)


@app.command("create-user")
def create_user(
    name: str = typer.Argument(..., help="Name of the new user"),
    shell: str = typer.Option(
        None, "--shell", "-s", help="Login shell name or path (default from settings)"
    ),
    groups: str = typer.Option(
        None, "--groups", "-g", help="Comma-separated existing groups to join"
    ),
    home: Path = typer.Option(
        None, "--home", help="Home directory (default: <home_base>/<name>)"
    ),
    password_stdin: bool = typer.Option(
        False, "--password-stdin", help="Read the new password from the first line of stdin"
    ),
    template: Path = typer.Option(
        None, "--template", help="Template tree to link into the new home directory"
    ),
):
    """Create a user with a personal group, home directory and group memberships."""
    console.print(_create_command_panel("Homestead Create User", "blue", f"User: {name}"))

    try:
        _require_root("Creating users")
        if template is not None and not template.is_dir():
            raise HomesteadError(f"Template root {template} is not a directory")

        password = None
        if password_stdin:
            password = typer.get_text_stream("stdin").readline().rstrip("\n")

        provisioner = IdentityProvisioner.from_settings()
        user = provisioner.provision(
            name, shell=shell, groups=parse_group_list(groups), home_dir=home
        )
        formatter.print_user(user)

        if password is not None and not set_password(name, password):
            console.print(f"[yellow]⚠ Password for {name} was not set[/yellow]")

        if template is not None:
            outcomes = link_tree(template, user.home_dir, owner=Owner(user.uid, user.gid))
            formatter.print_links(outcomes)
            if _link_outcomes_failed(outcomes):
                raise typer.Exit(code=1)
    except HomesteadError as e:
        _handle_command_error(e, "create-user")


@app.command("add-groups")
def add_groups(
    user: str = typer.Argument(..., help="Existing user"),
    groups: str = typer.Argument(..., help="Comma-separated existing groups"),
):
    """Add a user to existing groups; nothing changes if any group is unknown."""
    console.print(_create_command_panel("Homestead Add Groups", "cyan", f"User: {user}"))

    try:
        _require_root("Editing group membership")
        database = AccountDatabase.from_settings()
        if database.find_user(user) is None:
            raise HomesteadError(f"User '{user}' does not exist")
        results = GroupMembership(database).add_member_to_groups(parse_group_list(groups), user)
        formatter.print_memberships(user, results)
    except HomesteadError as e:
        _handle_command_error(e, "add-groups")


@app.command()
def link(
    dest: Path = typer.Argument(..., help="Destination directory, usually a home directory"),
    template: Path = typer.Option(
        None, "--template", help="Template tree to mirror (default from settings)"
    ),
    owner: str = typer.Option(
        None, "--owner", help="User that should own created links and directories"
    ),
):
    """Mirror a template tree into DEST with symbolic links, never overwriting."""
    template = template or get_settings().template_root
    console.print(_create_command_panel("Homestead Link", "green", f"{template} → {dest}"))

    try:
        link_owner = None
        if owner is not None:
            _require_root("Setting link ownership")
            record = AccountDatabase.from_settings().find_user(owner)
            if record is None:
                raise HomesteadError(f"User '{owner}' does not exist")
            link_owner = Owner(record.uid, record.gid)

        outcomes = link_tree(template, dest, owner=link_owner)
    except (HomesteadError, NotADirectoryError) as e:
        _handle_command_error(e, "link")

    formatter.print_links(outcomes)
    if _link_outcomes_failed(outcomes):
        raise typer.Exit(code=1)


@app.command("next-ids")
def next_ids():
    """Show the uid and gid the next new user would receive."""
    settings = get_settings()
    try:
        allocator = IdentityAllocator(AccountDatabase.from_settings(settings), floor=settings.id_floor)
        console.print(f"Next uid: [bold]{allocator.next_free_uid()}[/bold]")
        console.print(f"Next gid: [bold]{allocator.next_free_gid()}[/bold]")
    except StorageUnavailable as e:
        _handle_command_error(e, "next-ids")


@app.command()
def version():
    """Show Homestead version."""
    from . import __version__

    console.print(f"Homestead version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
