"""Compile pane trees into tmux split and respawn commands."""

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from tmuxy.config import LeafPane, SplitDirection, SplitPane
from tmuxy.utils import normalize_directory, pane_target

if TYPE_CHECKING:
    from tmuxy.tmux_manager import TmuxClient

# on_split(target_index, direction, percent)
SplitHandler = Callable[[int, SplitDirection, int], None]
# on_leaf(pane_index, leaf)
LeafHandler = Callable[[int, LeafPane], None]


def _walk_splits(pane: LeafPane | SplitPane, index: int, on_split: SplitHandler) -> int:
    """Emit split events in pre-order and return the number of leaves under ``pane``.

    ``index`` is the pane currently holding this node's whole region. Splitting it
    puts ``second`` directly after it; every split inside ``first`` then pushes
    ``second`` one index further, so ``second`` starts at ``index + leaves(first)``.
    """
    if isinstance(pane, LeafPane):
        return 1
    on_split(index, pane.direction, pane.percent)
    first_leaves = _walk_splits(pane.first, index, on_split)
    second_leaves = _walk_splits(pane.second, index + first_leaves, on_split)
    return first_leaves + second_leaves


def _walk_leaves(pane: LeafPane | SplitPane, index: int, on_leaf: LeafHandler) -> int:
    if isinstance(pane, LeafPane):
        on_leaf(index, pane)
        return index + 1
    index = _walk_leaves(pane.first, index, on_leaf)
    return _walk_leaves(pane.second, index, on_leaf)


def walk_pane(
    pane: LeafPane | SplitPane,
    on_split: SplitHandler,
    on_leaf: LeafHandler,
    index: int = 0,
) -> int:
    """Walk a pane tree in the order tmux needs to build it.

    All splits come first, a node before its children, each addressed to the pane
    that holds the node's region at that moment. Leaves follow left to right and
    are addressed ``index``, ``index + 1``, ... which is how tmux numbers the panes
    once every split is applied.

    Any exception raised by a handler stops the walk and propagates.

    Args:
        pane: Root of the pane tree.
        on_split: Called with the target pane index, direction and percent.
        on_leaf: Called with the final pane index and the leaf.
        index: Pane index of the root region.

    Returns:
        The number of leaf panes.
    """
    leaves = _walk_splits(pane, index, on_split)
    _walk_leaves(pane, index, on_leaf)
    return leaves


def split_args(target: str, direction: SplitDirection, percent: int) -> list[str]:
    """Build a split-window argument list."""
    return ["split-window", "-t", target, direction.flag, "-p", str(percent)]


def respawn_args(target: str, leaf: LeafPane, working_dir: Path) -> list[list[str]]:
    """Build the commands that replace a pane's shell and type its startup command.

    Args:
        target: The pane target.
        leaf: The leaf pane definition.
        working_dir: The startup working directory relative paths resolve against.

    Returns:
        One argument list per tmux command, in order.
    """
    respawn = ["respawn-pane", "-k", "-t", target]
    if leaf.directory is not None:
        respawn.extend(["-c", str(normalize_directory(leaf.directory, working_dir))])

    commands = [respawn]
    if leaf.command:
        commands.append(["send-keys", "-t", target, "-l", leaf.command])
        if leaf.submit:
            commands.append(["send-keys", "-t", target, "Enter"])
    return commands


def compile_window(client: "TmuxClient", session: str, window: int, pane: LeafPane | SplitPane) -> list[str]:
    """Split a freshly created window into ``pane``'s layout and start each leaf.

    The window must contain exactly one pane, index 0.

    Args:
        client: The tmux client commands are issued through.
        session: The session name.
        window: The window index.
        pane: Root of the window's pane tree.

    Returns:
        List of commands that were (or would be) executed.

    Raises:
        ExternalCommandError: If tmux rejects a command. Nothing issued before is undone.
    """
    commands: list[str] = []

    def on_split(index: int, direction: SplitDirection, percent: int) -> None:
        commands.append(client.run(*split_args(pane_target(session, window, index), direction, percent)))

    def on_leaf(index: int, leaf: LeafPane) -> None:
        for args in respawn_args(pane_target(session, window, index), leaf, client.working_dir):
            commands.append(client.run(*args))

    walk_pane(pane, on_split, on_leaf)
    return commands
