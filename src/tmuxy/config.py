"""Workspace configuration for tmuxy."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Union, cast

import yaml
from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError, field_validator

from tmuxy.xdg_paths import get_config_file_path

DEFAULT_WORKSPACE = "default"

DEFAULT_CONFIG = """\
# tmuxy workspaces
#
# Each workspace is a list of windows. A window holds one pane tree: either a
# leaf pane (optional command and directory) or a split with two child panes.
#
#   direction: vertical (stacked) or horizontal (side by side)
#   percent:   share of the space given to the second pane (0-100, default 50)
#   command:   text typed into the pane; set submit: true to also press Enter
#   directory: starting directory, relative paths resolve against the directory
#              tmuxy was started in
workspace:
  default:
    windows:
      - name: main
        pane:
          direction: horizontal
          percent: 30
          first: {}
          second:
            direction: vertical
            first: {}
            second: {}
"""


class ConfigError(Exception):
    """Base class for configuration errors."""


class ConfigIoError(ConfigError):
    """The config file could not be read or written."""


class ConfigFormatError(ConfigError):
    """The config file is not valid YAML or does not match the schema."""

    def __init__(self, path: Path, errors: list[str]) -> None:
        self.path = path
        self.errors = errors
        super().__init__(f"Invalid config {path}: " + "; ".join(errors))


class SplitDirection(StrEnum):
    """Orientation of a pane split."""

    VERTICAL = "vertical"  # stacked (top/bottom)
    HORIZONTAL = "horizontal"  # side-by-side (left/right)

    @property
    def flag(self) -> str:
        """The tmux split-window flag for this direction."""
        return "-v" if self is SplitDirection.VERTICAL else "-h"


_DIRECTION_ALIASES = {"v": "vertical", "h": "horizontal"}


class LeafPane(BaseModel):
    """A pane with optional startup command and directory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str | None = None
    directory: Path | None = None
    submit: bool = False  # press Enter after typing the command


class SplitPane(BaseModel):
    """A pane divided in two; ``percent`` is the share given to ``second``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    first: "Pane"
    second: "Pane"
    direction: SplitDirection
    percent: int = Field(default=50, ge=0, le=100)

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: object) -> object:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _DIRECTION_ALIASES.get(lowered, lowered)
        return value


def _pane_kind(value: object) -> str:
    """Tell split panes from leaves by their shape."""
    if isinstance(value, SplitPane):
        return "split"
    if isinstance(value, dict) and ("first" in value or "second" in value):
        return "split"
    return "leaf"


Pane = Annotated[
    Union[Annotated[SplitPane, Tag("split")], Annotated[LeafPane, Tag("leaf")]],
    Discriminator(_pane_kind),
]

SplitPane.model_rebuild()


class Window(BaseModel):
    """A tmux window and its pane tree."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = None
    pane: Pane = LeafPane()


class Workspace(BaseModel):
    """An ordered list of windows, opened as one tmux session."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    windows: list[Window] = []


class Config(BaseModel):
    """All workspaces defined in the config file."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    workspaces: dict[str, Workspace] = Field(default_factory=dict, alias="workspace")


def count_leaves(pane: LeafPane | SplitPane) -> int:
    """Count the leaf panes in a pane tree."""
    if isinstance(pane, SplitPane):
        return count_leaves(pane.first) + count_leaves(pane.second)
    return 1


def ensure_config_file(config_path: Path | None = None) -> Path:
    """Create the config file with the default workspace if it does not exist.

    Args:
        config_path: Optional path to config file. Uses default if None.

    Returns:
        The config file path.

    Raises:
        ConfigIoError: If the path is a directory or cannot be written.
    """
    path = config_path or get_config_file_path()
    if path.is_dir():
        raise ConfigIoError(f"Config file at {path} is a directory")
    if not path.exists():
        write_default_config(path)
    return path


def write_default_config(path: Path) -> None:
    """Write the default config to ``path``, creating parent directories.

    Raises:
        ConfigIoError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    except OSError as e:
        raise ConfigIoError(f"Could not write config file {path}: {e}") from e


def parse_config(text: str, path: Path) -> Config:
    """Parse and validate config YAML.

    Args:
        text: The YAML document.
        path: Where the document came from, for error messages.

    Returns:
        The validated config.

    Raises:
        ConfigFormatError: On YAML syntax errors or schema violations.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigFormatError(path, [f"YAML parse error: {e}"]) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigFormatError(path, ["expected a mapping at the top level"])

    try:
        return Config.model_validate(cast(dict[str, object], raw))
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(loc) for loc in error['loc']) or '(root)'}: {error['msg']}" for error in e.errors()
        ]
        raise ConfigFormatError(path, messages) from e


def load_config(config_path: Path | None = None) -> Config:
    """Load workspaces from the config file.

    Args:
        config_path: Optional path to config file. Uses default if None.

    Returns:
        The loaded config.

    Raises:
        ConfigIoError: If the file cannot be read.
        ConfigFormatError: If the file is invalid.
    """
    path = config_path or get_config_file_path()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigIoError(f"Could not read config file {path}: {e}") from e
    return parse_config(text, path)
