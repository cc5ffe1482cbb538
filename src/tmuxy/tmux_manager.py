"""Tmux session management for tmuxy."""

import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from tmuxy.config import Config, Workspace
from tmuxy.layouts import compile_window
from tmuxy.utils import format_command, session_name_for, session_target, window_target


class ExternalCommandError(RuntimeError):
    """A tmux command failed to launch or exited non-zero."""

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Failed executing command `{command}`: {reason}")


class WorkspaceNotFoundError(LookupError):
    """The requested workspace is not defined in the config."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Workspace {name} does not exist")


class EmptyWorkspaceError(ValueError):
    """The requested workspace defines no windows."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Workspace {name} has no windows")


@dataclass
class TmuxClient:
    """Issues tmux commands, or only records them in dry-run mode.

    Every command line is recorded in ``commands`` in the order issued, so a dry
    run shows exactly what a live run would execute.
    """

    working_dir: Path  # captured once at startup; relative pane directories resolve against it
    dry_run: bool = False
    binary: str = "tmux"
    echo: Callable[[str], None] | None = None
    commands: list[str] = field(default_factory=list)

    def run(self, *args: str, interactive: bool = False) -> str:
        """Run a tmux command.

        Args:
            *args: Arguments after the tmux binary.
            interactive: Inherit the terminal instead of capturing output (attach).

        Returns:
            The shell-quoted command line.

        Raises:
            ExternalCommandError: If tmux cannot be launched or exits non-zero.
        """
        cmd = [self.binary, *args]
        line = format_command(cmd)
        self.commands.append(line)
        if self.echo is not None:
            self.echo(line)
        if self.dry_run:
            return line

        try:
            if interactive:
                result = subprocess.run(cmd, check=False)
            else:
                result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise ExternalCommandError(line, str(e)) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip() if not interactive else ""
            reason = stderr or f"exit status {result.returncode}"
            raise ExternalCommandError(line, reason)
        return line

    def check(self, *args: str) -> bool:
        """Run a read-only tmux query and report whether it succeeded.

        Queries run in dry-run mode too and are not recorded. A tmux binary that
        cannot be launched counts as failure.
        """
        try:
            result = subprocess.run([self.binary, *args], capture_output=True, check=False)
        except OSError:
            return False
        return result.returncode == 0


def is_inside_tmux() -> bool:
    """Check if we're running inside a tmux session."""
    return os.environ.get("TMUX") is not None


def session_exists(client: TmuxClient, session_name: str) -> bool:
    """Check if a tmux session with the given name exists.

    Args:
        client: The tmux client.
        session_name: The session name to check.

    Returns:
        True if the session exists, False otherwise.
    """
    return client.check("has-session", "-t", session_target(session_name))


def kill_session(client: TmuxClient, session_name: str) -> list[str]:
    """Kill a tmux session.

    Args:
        client: The tmux client.
        session_name: The session to kill.

    Returns:
        List of commands that were (or would be) executed.
    """
    return [client.run("kill-session", "-t", session_target(session_name))]


def attach_session(client: TmuxClient, session_name: str) -> list[str]:
    """Attach to a tmux session, or switch to it when already inside tmux.

    Args:
        client: The tmux client.
        session_name: The session name to attach to.

    Returns:
        List of commands that were (or would be) executed.
    """
    if is_inside_tmux():
        return [client.run("switch-client", "-t", session_target(session_name), interactive=True)]
    return [client.run("attach-session", "-t", session_target(session_name), interactive=True)]


def get_workspace(config: Config, name: str) -> Workspace:
    """Look up a workspace that can be opened.

    Raises:
        WorkspaceNotFoundError: If no workspace has this name.
        EmptyWorkspaceError: If the workspace has no windows.
    """
    workspace = config.workspaces.get(name)
    if workspace is None:
        raise WorkspaceNotFoundError(name)
    if not workspace.windows:
        raise EmptyWorkspaceError(name)
    return workspace


def build_session(client: TmuxClient, session_name: str, workspace: Workspace) -> list[str]:
    """Create a detached session with every window of a workspace laid out.

    Args:
        client: The tmux client.
        session_name: The session to create. Must not exist yet.
        workspace: The workspace to build.

    Returns:
        List of commands that were (or would be) executed.
    """
    commands: list[str] = []
    start_dir = str(client.working_dir)

    for index, window in enumerate(workspace.windows):
        name_args = ["-n", window.name] if window.name else []
        if index == 0:
            commands.append(client.run("new-session", "-d", "-s", session_name, "-c", start_dir, *name_args))
        else:
            commands.append(
                client.run("new-window", "-d", "-t", window_target(session_name, index), "-c", start_dir, *name_args)
            )
        commands.extend(compile_window(client, session_name, index, window.pane))

    return commands


def open_workspace(
    client: TmuxClient,
    config: Config,
    name: str,
    recreate: bool = False,
    attach: bool = True,
) -> list[str]:
    """Open a workspace: attach to its session, building it first if needed.

    An existing session is attached as is unless ``recreate`` is set, in which
    case it is killed and built again. A failure leaves whatever was already
    created in place.

    Args:
        client: The tmux client.
        config: The loaded config.
        name: The workspace name.
        recreate: Kill and rebuild an existing session.
        attach: Attach once the session is ready; otherwise leave it running detached.

    Returns:
        List of commands that were (or would be) executed.

    Raises:
        WorkspaceNotFoundError: If the workspace is not defined.
        EmptyWorkspaceError: If the workspace has no windows.
        ExternalCommandError: If a tmux command fails.
    """
    workspace = get_workspace(config, name)
    session_name = session_name_for(name)
    commands: list[str] = []

    if session_exists(client, session_name):
        if not recreate:
            return attach_session(client, session_name) if attach else commands
        commands.extend(kill_session(client, session_name))

    commands.extend(build_session(client, session_name, workspace))

    if attach:
        commands.extend(attach_session(client, session_name))

    return commands


def close_workspace(client: TmuxClient, name: str) -> list[str]:
    """Kill the session belonging to a workspace.

    Args:
        client: The tmux client.
        name: The workspace name.

    Returns:
        List of commands that were (or would be) executed.
    """
    return kill_session(client, session_name_for(name))
