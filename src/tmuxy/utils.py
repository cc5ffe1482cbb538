"""Utility functions for tmuxy."""

import shlex
from collections.abc import Sequence
from pathlib import Path


def session_name_for(workspace: str) -> str:
    """Derive the tmux session name for a workspace.

    tmux silently replaces ``.`` and ``:`` in session names with ``_`` because
    both are target separators. Doing the same here keeps every
    ``session:window.pane`` target we build pointing at the session tmux created.

    Args:
        workspace: The workspace name.

    Returns:
        The session name tmux will use.
    """
    return workspace.replace(".", "_").replace(":", "_")


def session_target(session: str) -> str:
    """Format an exact-match session target.

    A bare name lets tmux fall back to prefix and pattern matching, so ``web``
    would address a running ``webapp`` when no ``web`` session exists.
    """
    return f"={session}"


def pane_target(session: str, window: int, pane: int) -> str:
    """Format a ``session:window.pane`` target."""
    return f"{session}:{window}.{pane}"


def window_target(session: str, window: int) -> str:
    """Format a ``session:window`` target."""
    return f"{session}:{window}"


def normalize_directory(directory: Path, working_dir: Path) -> Path:
    """Resolve a pane directory against the directory tmuxy was started in.

    Args:
        directory: Directory from the layout, absolute or relative. ``~`` is expanded.
        working_dir: The working directory captured at startup.

    Returns:
        An absolute path.
    """
    directory = directory.expanduser()
    if directory.is_absolute():
        return directory
    return working_dir / directory


def format_command(args: Sequence[str]) -> str:
    """Format an argument list as a shell-quoted command line."""
    return shlex.join(args)
