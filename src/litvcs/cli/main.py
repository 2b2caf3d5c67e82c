"""Main CLI entry point for lit."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from litvcs.constants import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    LIT_DIR,
)
from litvcs.core import ChangeType, Repository
from litvcs.exceptions import (
    LitError,
    NotARepositoryError,
    StorageIOError,
    UncommittedChangesError,
)
from litvcs.logging_config import configure_logging

console = Console()
app = typer.Typer(
    name="lit",
    help="A minimal content-addressed version control system",
    add_completion=False,
)

_CHANGE_STYLES = {
    ChangeType.CREATED: "green",
    ChangeType.MODIFIED: "yellow",
    ChangeType.DELETED: "red",
    ChangeType.RENAMED: "cyan",
}


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging on stderr",
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging("DEBUG" if verbose else None)


def _fail(error: Exception) -> NoReturn:
    """Report a library error and exit with the matching code."""
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", style="red")
    code = EXIT_SYSTEM_ERROR if isinstance(error, StorageIOError) else EXIT_USER_ERROR
    raise typer.Exit(code)


def _open_repository() -> Repository:
    """Open the repository containing the current directory or exit."""
    try:
        return Repository.discover(Path.cwd())
    except NotARepositoryError:
        console.print(
            "[bold red]Error:[/bold red] Not a lit repository",
            style="red",
        )
        console.print(
            f"  No {LIT_DIR}/ directory found in {escape(str(Path.cwd()))} or its parents",
            style="dim",
        )
        console.print(
            "\nRun [bold]lit init[/bold] to initialize a repository",
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)


@app.command()
def version() -> None:
    """Show lit version."""
    from litvcs import __version__
    typer.echo(f"lit version {__version__}")


@app.command()
def init(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
) -> None:
    """Initialize a lit repository in the current directory."""
    workspace_root = Path.cwd()

    try:
        repo = Repository.init(workspace_root)
    except LitError as e:
        _fail(e)

    if not quiet:
        success_message = f"""[bold green]✓[/bold green] Initialized empty lit repository

[dim]Repository root:[/dim] {escape(str(repo.workspace_root))}
[dim]Storage location:[/dim] {escape(str(repo.lit_dir))}
[dim]Default branch:[/dim] {repo.current_branch()}

[bold]Next steps:[/bold]
  1. Stage files: [cyan]lit add .[/cyan]
  2. Create the first commit: [cyan]lit commit -m "Initial commit"[/cyan]
"""
        console.print(Panel(success_message, border_style="green", title="lit initialized"))


@app.command()
def add(
    path: str = typer.Argument(".", help="File or directory to stage"),
) -> None:
    """Stage changed, deleted and untracked files under a path."""
    repo = _open_repository()

    try:
        stats = repo.stage(Path.cwd() / path)
    except LitError as e:
        _fail(e)

    for path_str in stats["added"]:
        console.print(f"  [green]+[/green] {escape(path_str)}")
    for path_str in stats["updated"]:
        console.print(f"  [yellow]*[/yellow] {escape(path_str)}")
    for path_str in stats["removed"]:
        console.print(f"  [red]-[/red] {escape(path_str)}")

    total = sum(len(paths) for paths in stats.values())
    console.print(f"\n[bold green]>[/bold green] {total} change(s) staged for commit")


@app.command()
def commit(
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message (required)",
    ),
    allow_empty: bool = typer.Option(
        False,
        "--allow-empty",
        help="Allow a commit with no staged changes",
    ),
) -> None:
    """Commit the staging area as a snapshot."""
    repo = _open_repository()

    # Require message
    if not message:
        console.print(
            "[bold red]Error:[/bold red] Commit message is required",
            style="red",
        )
        console.print(
            "  Use [bold]-m \"your message\"[/bold] to provide a commit message",
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)

    try:
        commit_hash = repo.commit(message, allow_empty=allow_empty)
        commit_obj = repo.commits.read_commit(commit_hash)
        head = repo.head()
    except LitError as e:
        _fail(e)

    console.print(f"[bold green]>[/bold green] Committed [bold cyan]{commit_hash[:7]}[/bold cyan]")
    console.print(f"  [dim]On:[/dim]      {escape(head.describe())}")
    console.print(f"  [dim]Date:[/dim]    {commit_obj.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
    parent = commit_obj.parents[0][:7] if commit_obj.parents else "(root commit)"
    console.print(f"  [dim]Parent:[/dim]  {parent}")
    console.print(f"\n  {escape(message)}")


@app.command()
def status(
    short: bool = typer.Option(
        False,
        "--short",
        help="Show short format output",
    ),
) -> None:
    """Show working tree, staging area and HEAD drift."""
    repo = _open_repository()

    try:
        report = repo.status()
        head = repo.head()
        head_commit = repo.head_commit()
    except LitError as e:
        _fail(e)

    if short:
        # Two columns like git: staged, then unstaged
        paths = sorted(set(report.staged) | set(report.unstaged))
        for rel_path in paths:
            staged = report.staged.get(rel_path)
            unstaged = report.unstaged.get(rel_path)
            x = staged.value[0].upper() if staged else " "
            y = unstaged.value[0].upper() if unstaged else " "
            console.print(f"{x}{y} {escape(rel_path)}", highlight=False)
        for rel_path in report.untracked:
            console.print(f"?? {escape(rel_path)}", highlight=False)
        return

    if head.detached:
        console.print(f"[bold]HEAD detached at[/bold] {head.location[:7]}")
    else:
        console.print(f"[bold]On branch:[/bold] {escape(head.location)}")

    if head_commit:
        console.print(f"[bold]HEAD:[/bold] {head_commit[:7]}")
    else:
        console.print("[bold]HEAD:[/bold] [dim](no commits yet)[/dim]")
    console.print()

    if report.staged:
        console.print("[bold green]Changes to be committed:[/bold green]")
        for rel_path, change in sorted(report.staged.items()):
            style = _CHANGE_STYLES[change]
            console.print(f"  [{style}]{change.value}:[/{style}] {escape(rel_path)}")
        console.print()

    if report.unstaged:
        console.print("[bold yellow]Changes not staged for commit:[/bold yellow]")
        console.print("  [dim](use \"lit add <path>\" to stage)[/dim]")
        for rel_path, change in sorted(report.unstaged.items()):
            style = _CHANGE_STYLES[change]
            console.print(f"  [{style}]{change.value}:[/{style}] {escape(rel_path)}")
        console.print()

    if report.untracked:
        console.print("[bold red]Untracked files:[/bold red]")
        for rel_path in report.untracked:
            console.print(f"  {escape(rel_path)}")
        console.print()

    if not report.has_changes:
        if head_commit:
            console.print("[dim]Nothing to commit (working tree clean)[/dim]")
        else:
            console.print("[yellow]No files staged for commit[/yellow]")
            console.print("  Use [bold]lit add <file>[/bold] to stage files")


@app.command()
def log(
    max_count: Optional[int] = typer.Option(
        None,
        "--max-count",
        "-n",
        help="Limit number of commits to show",
    ),
    oneline: bool = typer.Option(
        False,
        "--oneline",
        help="Show each commit on a single line",
    ),
) -> None:
    """Show commit history reachable from HEAD."""
    repo = _open_repository()

    try:
        records = repo.log(limit=max_count)
    except LitError as e:
        _fail(e)

    if not records:
        console.print("[dim]No commits yet[/dim]")
        return

    if oneline:
        for record in records:
            first_line = record.commit.name.split("\n")[0]
            console.print(f"[yellow]{record.hash[:7]}[/yellow] {escape(first_line)}")
        return

    for i, record in enumerate(records):
        commit_obj = record.commit
        console.print(f"[bold yellow]commit {record.hash}[/bold yellow]")

        if commit_obj.parents:
            parents = " ".join(parent[:7] for parent in commit_obj.parents)
            console.print(f"[dim]Parent: {parents}[/dim]")
        else:
            console.print("[dim]Parent: (root commit)[/dim]")

        date_str = commit_obj.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        console.print(f"[bold]Date:[/bold]   {date_str}")
        console.print()

        for line in commit_obj.name.split("\n"):
            console.print(f"    {escape(line)}")

        if i < len(records) - 1:
            console.print()


@app.command()
def branch(
    name: Optional[str] = typer.Argument(None, help="Branch to create or delete"),
    delete: bool = typer.Option(
        False,
        "--delete",
        "-d",
        help="Delete the branch instead of creating it",
    ),
) -> None:
    """List branches, or create/delete one."""
    repo = _open_repository()

    try:
        if name is None:
            current = repo.current_branch()
            branches = repo.branches()
            if not branches:
                console.print("[dim]No branches yet[/dim]")
            for branch_name in branches:
                if branch_name == current:
                    console.print(f"* [green]{escape(branch_name)}[/green]")
                else:
                    console.print(f"  {escape(branch_name)}")
            return

        if delete:
            repo.delete_branch(name)
            console.print(f"Deleted branch [bold]{escape(name)}[/bold]")
            head = repo.head()
            if head.detached:
                console.print(f"[dim]HEAD is now detached at {head.location[:7]}[/dim]")
        else:
            commit_hash = repo.create_branch(name)
            console.print(
                f"Created branch [bold]{escape(name)}[/bold] at {commit_hash[:7]}"
            )
    except LitError as e:
        _fail(e)


@app.command()
def checkout(
    location: str = typer.Argument(..., help="Branch name or commit hash"),
    detach: bool = typer.Option(
        False,
        "--detach",
        "-d",
        help="Check out the commit a branch points to, detaching HEAD",
    ),
) -> None:
    """Switch HEAD to a branch or commit and load its files."""
    repo = _open_repository()

    try:
        head = repo.checkout(location, detach=detach)
    except UncommittedChangesError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", style="red")
        report = e.report
        if report is not None:
            for rel_path in sorted(set(report.staged) | set(report.unstaged)):
                console.print(f"  {escape(rel_path)}", style="dim")
        raise typer.Exit(EXIT_USER_ERROR)
    except LitError as e:
        _fail(e)

    if head.detached:
        console.print(f"HEAD is now detached at [bold cyan]{head.location[:7]}[/bold cyan]")
    else:
        console.print(f"Switched to branch [bold]{escape(head.location)}[/bold]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
