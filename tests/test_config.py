"""Tests for tmuxy.config module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tmuxy.config import (
    DEFAULT_CONFIG,
    Config,
    ConfigFormatError,
    ConfigIoError,
    LeafPane,
    SplitDirection,
    SplitPane,
    Window,
    count_leaves,
    ensure_config_file,
    load_config,
    parse_config,
    write_default_config,
)

SAMPLE = """\
workspace:
  web:
    windows:
      - name: code
        pane:
          direction: horizontal
          percent: 30
          first:
            command: nvim
            directory: src
          second:
            direction: v
            first:
              command: npm run dev
              submit: true
            second: {}
      - name: shell
"""


def parse(text: str) -> Config:
    return parse_config(text, Path("config.yaml"))


def one_pane(pane: str) -> str:
    """Wrap a flow-style pane in a single-window workspace document."""
    return f"workspace:\n  w:\n    windows:\n      - pane: {pane}\n"


class TestParseConfig:
    """Tests for parse_config function."""

    def test_sample(self) -> None:
        """Should parse windows and nested panes."""
        config = parse(SAMPLE)
        web = config.workspaces["web"]
        assert [w.name for w in web.windows] == ["code", "shell"]

        root = web.windows[0].pane
        assert isinstance(root, SplitPane)
        assert root.direction == SplitDirection.HORIZONTAL
        assert root.percent == 30
        assert root.first == LeafPane(command="nvim", directory=Path("src"))

        assert isinstance(root.second, SplitPane)
        assert root.second.direction == SplitDirection.VERTICAL
        assert root.second.percent == 50
        assert root.second.first == LeafPane(command="npm run dev", submit=True)
        assert root.second.second == LeafPane()

    def test_window_without_pane(self) -> None:
        """A window without a pane gets one empty leaf."""
        config = parse(SAMPLE)
        assert config.workspaces["web"].windows[1].pane == LeafPane()

    @pytest.mark.parametrize("value", ["vertical", "Vertical", "VERTICAL", "v", " V "])
    def test_direction_aliases(self, value: str) -> None:
        """Directions are case-insensitive and accept tmux flag letters."""
        config = parse(one_pane(f"{{direction: '{value}', first: {{}}, second: {{}}}}"))
        pane = config.workspaces["w"].windows[0].pane
        assert isinstance(pane, SplitPane)
        assert pane.direction is SplitDirection.VERTICAL

    def test_unknown_direction(self) -> None:
        """An unknown direction is rejected."""
        text = one_pane("{direction: diagonal, first: {}, second: {}}")
        with pytest.raises(ConfigFormatError) as exc_info:
            parse(text)
        assert any("direction" in message for message in exc_info.value.errors)

    @pytest.mark.parametrize("percent", [0, 100])
    def test_percent_bounds_accepted(self, percent: int) -> None:
        """Percent accepts both ends of 0..100."""
        text = one_pane(f"{{direction: h, percent: {percent}, first: {{}}, second: {{}}}}")
        pane = parse(text).workspaces["w"].windows[0].pane
        assert isinstance(pane, SplitPane)
        assert pane.percent == percent

    @pytest.mark.parametrize("percent", [-1, 101])
    def test_percent_out_of_range(self, percent: int) -> None:
        """Percent outside 0..100 is rejected."""
        text = one_pane(f"{{direction: h, percent: {percent}, first: {{}}, second: {{}}}}")
        with pytest.raises(ConfigFormatError) as exc_info:
            parse(text)
        assert any("percent" in message for message in exc_info.value.errors)

    def test_split_missing_second(self) -> None:
        """A split needs both children."""
        text = one_pane("{direction: h, first: {}}")
        with pytest.raises(ConfigFormatError) as exc_info:
            parse(text)
        assert any("second" in message for message in exc_info.value.errors)

    def test_unknown_leaf_key(self) -> None:
        """Unknown keys are errors rather than silently ignored."""
        text = one_pane("{comand: vim}")
        with pytest.raises(ConfigFormatError):
            parse(text)

    def test_unknown_top_level_key(self) -> None:
        """A misspelled top-level key is reported instead of loading no workspaces."""
        with pytest.raises(ConfigFormatError) as exc_info:
            parse("workspac:\n  dev: {}\n")
        assert any(message.startswith("workspac:") for message in exc_info.value.errors)

    def test_empty_document(self) -> None:
        """An empty file defines no workspaces."""
        assert parse("").workspaces == {}

    def test_empty_workspace_allowed(self) -> None:
        """Workspaces without windows load; opening them is what fails."""
        config = parse("workspace:\n  w: {}\n")
        assert config.workspaces["w"].windows == []

    def test_invalid_yaml(self) -> None:
        """YAML syntax errors are format errors."""
        with pytest.raises(ConfigFormatError, match="YAML parse error"):
            parse("workspace: [unclosed\n")

    def test_non_mapping(self) -> None:
        """The top level must be a mapping."""
        with pytest.raises(ConfigFormatError, match="mapping"):
            parse("- a\n- b\n")

    def test_error_carries_path(self) -> None:
        """Format errors name the file."""
        with pytest.raises(ConfigFormatError) as exc_info:
            parse_config("- a\n", Path("/etc/tmuxy.yaml"))
        assert exc_info.value.path == Path("/etc/tmuxy.yaml")
        assert "/etc/tmuxy.yaml" in str(exc_info.value)


class TestModels:
    """Tests for the layout models."""

    def test_split_defaults(self) -> None:
        """Percent defaults to 50."""
        pane = SplitPane(first=LeafPane(), second=LeafPane(), direction=SplitDirection.HORIZONTAL)
        assert pane.percent == 50

    def test_frozen(self) -> None:
        """Layout models are immutable."""
        pane = LeafPane(command="vim")
        with pytest.raises(ValidationError):
            pane.command = "emacs"  # type: ignore[misc]

    def test_direction_flags(self) -> None:
        """Directions map to tmux split-window flags."""
        assert SplitDirection.VERTICAL.flag == "-v"
        assert SplitDirection.HORIZONTAL.flag == "-h"

    def test_workspaces_by_field_name(self) -> None:
        """Config accepts the field name as well as the file key."""
        config = Config(workspaces={})
        assert config.workspaces == {}

    def test_window_default(self) -> None:
        """Window defaults to no name and a single leaf."""
        window = Window()
        assert window.name is None
        assert window.pane == LeafPane()


class TestCountLeaves:
    """Tests for count_leaves function."""

    def test_leaf(self) -> None:
        """A leaf counts as one."""
        assert count_leaves(LeafPane()) == 1

    def test_nested(self) -> None:
        """Counts leaves through every level."""
        h = SplitDirection.HORIZONTAL
        tree = SplitPane(
            first=SplitPane(first=LeafPane(), second=LeafPane(), direction=h),
            second=SplitPane(
                first=LeafPane(),
                second=SplitPane(first=LeafPane(), second=LeafPane(), direction=h),
                direction=h,
            ),
            direction=h,
        )
        assert count_leaves(tree) == 5


class TestLoadConfig:
    """Tests for load_config and the default config file."""

    def test_load(self, tmp_path: Path) -> None:
        """Should load workspaces from a file."""
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE, encoding="utf-8")
        config = load_config(path)
        assert list(config.workspaces) == ["web"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is an IO error."""
        with pytest.raises(ConfigIoError, match="Could not read"):
            load_config(tmp_path / "nope.yaml")

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """TMUXY_CONFIG selects the file when no path is given."""
        path = tmp_path / "custom.yaml"
        path.write_text(SAMPLE, encoding="utf-8")
        monkeypatch.setenv("TMUXY_CONFIG", str(path))
        assert "web" in load_config().workspaces

    def test_default_config_is_valid(self) -> None:
        """The bundled default config parses and has a default workspace."""
        config = parse(DEFAULT_CONFIG)
        windows = config.workspaces["default"].windows
        assert len(windows) == 1
        assert count_leaves(windows[0].pane) == 3

    def test_ensure_creates_default(self, tmp_path: Path) -> None:
        """A missing config file is created with the default content."""
        path = tmp_path / "nested" / "config.yaml"
        assert ensure_config_file(path) == path
        assert path.read_text(encoding="utf-8") == DEFAULT_CONFIG

    def test_ensure_keeps_existing(self, tmp_path: Path) -> None:
        """An existing config file is left untouched."""
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE, encoding="utf-8")
        ensure_config_file(path)
        assert path.read_text(encoding="utf-8") == SAMPLE

    def test_ensure_rejects_directory(self, tmp_path: Path) -> None:
        """A directory at the config path is an IO error."""
        with pytest.raises(ConfigIoError, match="is a directory"):
            ensure_config_file(tmp_path)

    def test_write_default_overwrites(self, tmp_path: Path) -> None:
        """write_default_config replaces existing content."""
        path = tmp_path / "config.yaml"
        path.write_text("old", encoding="utf-8")
        write_default_config(path)
        assert path.read_text(encoding="utf-8") == DEFAULT_CONFIG
