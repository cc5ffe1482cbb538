"""CLI entry point for tmuxy."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from tmuxy import __version__
from tmuxy.config import (
    DEFAULT_WORKSPACE,
    Config,
    ConfigError,
    ConfigFormatError,
    LeafPane,
    SplitPane,
    count_leaves,
    ensure_config_file,
    load_config,
    write_default_config,
)
from tmuxy.tmux_manager import (
    EmptyWorkspaceError,
    ExternalCommandError,
    TmuxClient,
    WorkspaceNotFoundError,
    close_workspace,
    get_workspace,
    open_workspace,
)
from tmuxy.xdg_paths import CONFIG_ENV_VAR, get_config_file_path

app = typer.Typer(
    name="tmuxy",
    help="Open tmux workspaces described in a config file.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-C", envvar=CONFIG_ENV_VAR, help="Config file path."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"tmuxy {__version__}")
        raise typer.Exit()


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/] {escape(message)}")
    return typer.Exit(1)


def _load(config_path: Path | None) -> Config:
    """Load the config, creating the default one on first run."""
    try:
        path = ensure_config_file(config_path)
        return load_config(path)
    except ConfigFormatError as e:
        err_console.print(f"[red]Error:[/] Invalid config file: {e.path}")
        for message in e.errors:
            err_console.print(f"  [yellow]{escape(message)}[/]")
        raise typer.Exit(1) from None
    except ConfigError as e:
        raise _fail(str(e)) from None


def _print_dry_run(commands: list[str]) -> None:
    console.print("[yellow]Commands that would be executed:[/]")
    for cmd in commands:
        console.print(f"  {cmd}", markup=False, highlight=False)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    """Declarative tmux workspace manager."""


@app.command("open")
def open_command(
    workspace: Annotated[str, typer.Argument(help="Workspace to load.")] = DEFAULT_WORKSPACE,
    working_directory: Annotated[
        Path | None,
        typer.Argument(help="Directory relative pane directories resolve against (default: current directory)."),
    ] = None,
    recreate: Annotated[
        bool,
        typer.Option("--recreate", "-r", help="Recreate the workspace if its session already exists."),
    ] = False,
    detach: Annotated[
        bool,
        typer.Option("--detach", "-d", help="Leave the session running without attaching."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Preview commands without executing."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print each tmux command as it runs."),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """Open a workspace, building its tmux session if needed."""
    config = _load(config_path)

    working_dir = Path.cwd()
    if working_directory is not None:
        working_dir = (working_dir / working_directory.expanduser()).resolve()

    def echo(line: str) -> None:
        console.print(f"$ {line}", style="dim", markup=False, highlight=False)

    client = TmuxClient(working_dir=working_dir, dry_run=dry_run, echo=echo if verbose and not dry_run else None)

    try:
        commands = open_workspace(client, config, workspace, recreate=recreate, attach=not detach)
    except (WorkspaceNotFoundError, EmptyWorkspaceError) as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        err_console.print("[dim]Use 'tmuxy list' to see available workspaces.[/]")
        raise typer.Exit(1) from None
    except ExternalCommandError as e:
        raise _fail(str(e)) from None

    if dry_run:
        _print_dry_run(commands)
    elif detach and not commands:
        console.print(f"[blue]Session already running:[/] {escape(workspace)}")


@app.command("close")
def close_command(
    workspace: Annotated[str, typer.Argument(help="Workspace to close.")],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Preview commands without executing."),
    ] = False,
) -> None:
    """Kill the tmux session of a workspace."""
    client = TmuxClient(working_dir=Path.cwd(), dry_run=dry_run)
    try:
        commands = close_workspace(client, workspace)
    except ExternalCommandError as e:
        raise _fail(str(e)) from None

    if dry_run:
        _print_dry_run(commands)
    else:
        console.print(f"[green]✓[/] Closed {escape(workspace)}")


@app.command("list")
def list_command(config_path: ConfigOption = None) -> None:
    """List the workspaces defined in the config file."""
    config = _load(config_path)

    if not config.workspaces:
        console.print("[yellow]No workspaces defined.[/]")
        return

    table = Table(title="Workspaces")
    table.add_column("Name", style="bold")
    table.add_column("Windows", justify="right")
    table.add_column("Panes", justify="right")

    for name, ws in sorted(config.workspaces.items()):
        panes = sum(count_leaves(window.pane) for window in ws.windows)
        table.add_row(name, str(len(ws.windows)), str(panes))

    console.print(table)


def _pane_tree(branch: Tree, pane: LeafPane | SplitPane, index: int) -> int:
    """Add a pane subtree to ``branch`` and return the next free pane index."""
    if isinstance(pane, SplitPane):
        node = branch.add(f"[cyan]{pane.direction.value}[/] split, second {pane.percent}%")
        index = _pane_tree(node, pane.first, index)
        return _pane_tree(node, pane.second, index)

    label = f"[bold]pane {index}[/]"
    if pane.command:
        label += f"  [green]{escape(pane.command)}[/]"
    if pane.directory is not None:
        label += f"  [dim]{escape(str(pane.directory))}[/]"
    branch.add(label)
    return index + 1


@app.command("show")
def show_command(
    workspace: Annotated[str, typer.Argument(help="Workspace to show.")] = DEFAULT_WORKSPACE,
    config_path: ConfigOption = None,
) -> None:
    """Show the windows and panes of a workspace."""
    config = _load(config_path)
    try:
        ws = get_workspace(config, workspace)
    except (WorkspaceNotFoundError, EmptyWorkspaceError) as e:
        raise _fail(str(e)) from None

    tree = Tree(f"[bold]{escape(workspace)}[/]")
    for index, window in enumerate(ws.windows):
        title = f"window {index}"
        if window.name:
            title += f" [magenta]{escape(window.name)}[/]"
        _pane_tree(tree.add(title), window.pane, 0)

    console.print(tree)


@app.command()
def init_config(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """Create the default configuration file."""
    config_file = config_path or get_config_file_path()

    if config_file.exists() and not force:
        err_console.print(f"[yellow]Config file already exists:[/] {config_file}")
        raise typer.Exit(1)

    try:
        write_default_config(config_file)
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"[green]✓[/] Created config file: {config_file}")


if __name__ == "__main__":
    app()
