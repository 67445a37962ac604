"""Tests for it2open.config module."""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError
from rich.console import Console

from it2open.config import (
    Config,
    ConfigWarning,
    Placement,
    _deep_merge,
    _load_yaml_file,
    display_config_warnings,
    load_config,
    save_config,
)


class TestConfig:
    """Tests for Config model."""

    def test_default_values(self) -> None:
        """Should match the documented defaults."""
        config = Config()
        assert config.columns == 4
        assert config.new_tab is True
        assert config.delay == 0.25
        assert config.placement == Placement.ROW_MAJOR
        assert config.skip_blank_lines is True
        assert config.osascript == "osascript"
        assert config.timeout is None

    def test_placement_from_string(self) -> None:
        """Should accept placement names."""
        assert Config.model_validate({"placement": "column-major"}).placement == Placement.COLUMN_MAJOR

    def test_rejects_zero_columns(self) -> None:
        """Columns must be at least 1."""
        with pytest.raises(ValidationError):
            Config(columns=0)

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_rejects_non_finite_delay(self, value: float) -> None:
        """Delay must be a finite number."""
        with pytest.raises(ValidationError):
            Config(delay=value)

    def test_ignore_parent_configs_default(self) -> None:
        """Should default ignore_parent_configs to False."""
        assert Config().ignore_parent_configs is False


class TestPlacement:
    """Tests for Placement enum."""

    def test_values(self) -> None:
        assert Placement.ROW_MAJOR.value == "row-major"
        assert Placement.COLUMN_MAJOR.value == "column-major"


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_flat_merge(self) -> None:
        """Should merge flat dicts with override winning."""
        base: dict[str, object] = {"columns": 4, "delay": 0.25}
        override: dict[str, object] = {"delay": 1.0, "new_tab": False}
        assert _deep_merge(base, override) == {"columns": 4, "delay": 1.0, "new_tab": False}

    def test_nested_merge(self) -> None:
        """Should recursively merge nested dicts."""
        base: dict[str, object] = {"a": {"x": 1, "y": 2}}
        override: dict[str, object] = {"a": {"y": 3}}
        assert _deep_merge(base, override) == {"a": {"x": 1, "y": 3}}

    def test_does_not_mutate_inputs(self) -> None:
        """Should leave both inputs unchanged."""
        base: dict[str, object] = {"columns": 4}
        override: dict[str, object] = {"columns": 2}
        _deep_merge(base, override)
        assert base == {"columns": 4}
        assert override == {"columns": 2}


class TestLoadYamlFile:
    """Tests for _load_yaml_file function."""

    def test_missing_file(self) -> None:
        """Should return empty dict for missing file."""
        data, warnings = _load_yaml_file(Path("/nonexistent/path/config.yaml"))
        assert data == {}
        assert warnings == []

    def test_valid_yaml(self, tmp_path: Path) -> None:
        """Should parse valid YAML file."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"columns": 3}), encoding="utf-8")
        data, warnings = _load_yaml_file(path)
        assert data == {"columns": 3}
        assert warnings == []

    def test_empty_file(self, tmp_path: Path) -> None:
        """Should return empty dict for empty file."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert _load_yaml_file(path) == ({}, [])

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Should return empty dict with warning for invalid YAML."""
        path = tmp_path / "config.yaml"
        path.write_text("invalid: yaml: content:", encoding="utf-8")
        data, warnings = _load_yaml_file(path)
        assert data == {}
        assert len(warnings) == 1
        assert "YAML parse error" in warnings[0].message

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        """Should warn when the top level is not a mapping."""
        path = tmp_path / "config.yaml"
        path.write_text("- item1\n- item2\n", encoding="utf-8")
        data, warnings = _load_yaml_file(path)
        assert data == {}
        assert len(warnings) == 1
        assert warnings[0].value == "list"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_returns_defaults(self) -> None:
        """Should return defaults when file doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config, warnings = load_config(Path(tmpdir) / "nonexistent.yaml")
            assert config == Config()
            assert warnings == []

    def test_loads_valid_config(self) -> None:
        """Should load valid config from file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text(
                yaml.dump({"columns": 2, "new_tab": False, "delay": 0.5, "placement": "column-major"}),
                encoding="utf-8",
            )
            config, warnings = load_config(config_path)
            assert config.columns == 2
            assert config.new_tab is False
            assert config.delay == 0.5
            assert config.placement == Placement.COLUMN_MAJOR
            assert warnings == []

    def test_invalid_yaml_returns_defaults_with_warning(self) -> None:
        """Should return defaults with warning for invalid YAML."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text("invalid: yaml: content:", encoding="utf-8")
            config, warnings = load_config(config_path)
            assert config == Config()
            assert len(warnings) == 1

    def test_partial_recovery(self) -> None:
        """Should drop the bad field and keep the valid ones."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text(yaml.dump({"columns": 0, "delay": 1.5}), encoding="utf-8")
            config, warnings = load_config(config_path)
            assert config.columns == 4
            assert config.delay == 1.5
            assert [w.field_name for w in warnings] == ["columns"]

    def test_infinite_delay_dropped(self) -> None:
        """Should drop an infinite delay and keep the default."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text("delay: .inf\ncolumns: 2\n", encoding="utf-8")
            config, warnings = load_config(config_path)
            assert config.delay == 0.25
            assert config.columns == 2
            assert [w.field_name for w in warnings] == ["delay"]

    def test_strict_mode_no_recovery(self) -> None:
        """Strict mode should not attempt partial recovery."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text(yaml.dump({"columns": "many", "delay": 1.5}), encoding="utf-8")
            config, warnings = load_config(config_path, strict=True)
            assert len(warnings) >= 1
            assert config == Config()


class TestLayeredConfig:
    """Tests for layered project configuration loading."""

    def _setup(self, tmp_path: Path) -> tuple[Path, Path]:
        user_config = tmp_path / "user.yaml"
        project_dir = tmp_path / "project"
        project_dir.mkdir()
        user_config.write_text(yaml.dump({"columns": 6, "delay": 0.5}), encoding="utf-8")
        return user_config, project_dir

    def test_project_config_overrides_user(self, tmp_path: Path) -> None:
        """Project config should override user config values."""
        user_config, project_dir = self._setup(tmp_path)
        (project_dir / ".it2open.yaml").write_text(yaml.dump({"columns": 2}), encoding="utf-8")

        config, _warnings = load_config(user_config, project_dir=project_dir)
        assert config.columns == 2
        assert config.delay == 0.5

    def test_local_config_overrides_project(self, tmp_path: Path) -> None:
        """Local config should override project config values."""
        user_config, project_dir = self._setup(tmp_path)
        (project_dir / ".it2open.yaml").write_text(yaml.dump({"columns": 2}), encoding="utf-8")
        (project_dir / ".it2open.yaml.local").write_text(yaml.dump({"columns": 3}), encoding="utf-8")

        config, _warnings = load_config(user_config, project_dir=project_dir)
        assert config.columns == 3

    def test_ignore_parent_configs(self, tmp_path: Path) -> None:
        """Should skip user config when a project config asks to."""
        user_config, project_dir = self._setup(tmp_path)
        (project_dir / ".it2open.yaml").write_text(
            yaml.dump({"ignore_parent_configs": True, "new_tab": False}), encoding="utf-8"
        )

        config, _warnings = load_config(user_config, project_dir=project_dir)
        assert config.columns == 4
        assert config.delay == 0.25
        assert config.new_tab is False

    def test_ignore_parent_configs_in_local(self, tmp_path: Path) -> None:
        """The local config can also ignore the user config."""
        user_config, project_dir = self._setup(tmp_path)
        (project_dir / ".it2open.yaml.local").write_text(
            yaml.dump({"ignore_parent_configs": True}), encoding="utf-8"
        )

        config, _warnings = load_config(user_config, project_dir=project_dir)
        assert config.columns == 4

    def test_no_project_configs(self, tmp_path: Path) -> None:
        """Should use only the user config when no project files exist."""
        user_config, project_dir = self._setup(tmp_path)
        config, warnings = load_config(user_config, project_dir=project_dir)
        assert config.columns == 6
        assert warnings == []


class TestSaveConfig:
    """Tests for save_config function."""

    def test_saves_config(self, tmp_path: Path) -> None:
        """Should write a YAML file that loads back to the same config."""
        path = tmp_path / "config.yaml"
        original = Config(columns=3, placement=Placement.COLUMN_MAJOR, timeout=30.0)
        save_config(original, path)

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert raw["placement"] == "column-major"
        config, warnings = load_config(path)
        assert config == original
        assert warnings == []

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        """Should create missing parent directories."""
        path = tmp_path / "nested" / "dir" / "config.yaml"
        save_config(Config(), path)
        assert path.exists()


class TestDisplayConfigWarnings:
    """Tests for display_config_warnings function."""

    def test_no_warnings_no_output(self) -> None:
        """Should print nothing for an empty list."""
        console = Console(record=True, width=100)
        display_config_warnings([], console)
        assert console.export_text() == ""

    def test_displays_warnings(self) -> None:
        """Should show file, field and message."""
        console = Console(record=True, width=100)
        warning = ConfigWarning(file="config.yaml", field_name="columns", message="too small", value=0)
        display_config_warnings([warning], console)
        output = console.export_text()
        assert "Config Warnings" in output
        assert "columns" in output
        assert "too small" in output
        assert "(got: 0)" in output
