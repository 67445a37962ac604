"""Configuration management for it2open."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import cast

import yaml
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from it2open.xdg_paths import get_config_file_path

PROJECT_CONFIG_NAME = ".it2open.yaml"
LOCAL_CONFIG_NAME = ".it2open.yaml.local"


class Placement(StrEnum):
    """How commands are distributed over the pane grid."""

    ROW_MAJOR = "row-major"  # a b / c d: fill across columns first
    COLUMN_MAJOR = "column-major"  # a c / b d: fill down each column first


class Config(BaseModel):
    """Configuration settings for it2open."""

    columns: int = Field(default=4, ge=1)
    new_tab: bool = True
    delay: float = Field(default=0.25, ge=0, allow_inf_nan=False)
    placement: Placement = Placement.ROW_MAJOR
    skip_blank_lines: bool = True

    # Interpreter used to run the generated script
    osascript: str = "osascript"
    timeout: float | None = Field(default=None, gt=0, allow_inf_nan=False)

    # When true in a project config, ignore the user config
    ignore_parent_configs: bool = False


@dataclass
class ConfigWarning:
    """A config validation warning."""

    file: str
    field_name: str
    message: str
    value: object = field(default=None, repr=False)


def _deep_merge(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    """Recursively merge override dict into base dict.

    Args:
        base: The base dictionary.
        override: The dictionary with overriding values.

    Returns:
        A new merged dictionary.
    """
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)  # type: ignore[arg-type]
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> tuple[dict[str, object], list[ConfigWarning]]:
    """Load a YAML mapping from a file.

    Args:
        path: Path to the YAML file.

    Returns:
        Tuple of (parsed dict, warnings). The dict is empty when the file is
        missing, unreadable or not a mapping.
    """
    if not path.exists():
        return {}, []
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return {}, [ConfigWarning(file=str(path), field_name="(file)", message=f"YAML parse error: {e}")]
    except OSError as e:
        return {}, [ConfigWarning(file=str(path), field_name="(file)", message=f"File read error: {e}")]

    if raw is None:
        return {}, []
    if not isinstance(raw, dict):
        return {}, [
            ConfigWarning(
                file=str(path),
                field_name="(file)",
                message="expected a mapping at the top level",
                value=type(raw).__name__,
            )
        ]
    return cast(dict[str, object], raw), []


def _validation_warnings(error: ValidationError) -> list[ConfigWarning]:
    return [
        ConfigWarning(
            file="merged config",
            field_name=".".join(str(loc) for loc in item["loc"]),
            message=item["msg"],
            value=item.get("input"),
        )
        for item in error.errors()
    ]


def load_config(
    config_path: Path | None = None,
    project_dir: Path | None = None,
    strict: bool = False,
) -> tuple[Config, list[ConfigWarning]]:
    """Load configuration with layered merging.

    Loading order (last value wins):
    1. User config (~/.config/it2open/config.yaml)
    2. Project config (.it2open.yaml in project_dir)
    3. Project local config (.it2open.yaml.local in project_dir)

    A project config with ``ignore_parent_configs: true`` skips the user config.

    Args:
        config_path: Optional path to user config file. Uses default if None.
        project_dir: Optional directory holding the project config files.
        strict: If True, fall back to defaults instead of dropping bad fields.

    Returns:
        Tuple of (loaded Config, list of ConfigWarnings).
    """
    warnings: list[ConfigWarning] = []

    user_config, user_warnings = _load_yaml_file(config_path or get_config_file_path())
    merged = user_config

    if project_dir:
        project_config, project_warnings = _load_yaml_file(project_dir / PROJECT_CONFIG_NAME)
        local_config, local_warnings = _load_yaml_file(project_dir / LOCAL_CONFIG_NAME)
        project_layers = _deep_merge(project_config, local_config)
        if project_layers.get("ignore_parent_configs", False):
            merged = project_layers
            user_warnings = []
        else:
            merged = _deep_merge(user_config, project_layers)
        warnings.extend(user_warnings)
        warnings.extend(project_warnings)
        warnings.extend(local_warnings)
    else:
        warnings.extend(user_warnings)

    try:
        return Config.model_validate(merged), warnings
    except ValidationError as e:
        warnings.extend(_validation_warnings(e))
        if strict:
            return Config(), warnings

        # Drop the offending top-level keys and keep the rest
        for item in e.errors():
            if item["loc"]:
                merged.pop(str(item["loc"][0]), None)
        try:
            return Config.model_validate(merged), warnings
        except ValidationError:
            return Config(), warnings


def display_config_warnings(warnings: list[ConfigWarning], console: Console) -> None:
    """Display config warnings using Rich formatting.

    Args:
        warnings: List of warnings to display.
        console: Rich console to output to.
    """
    if not warnings:
        return

    text = Text()
    for i, warning in enumerate(warnings):
        if i > 0:
            text.append("\n")
        text.append(f"  {warning.file}: ", style="dim")
        text.append(warning.field_name, style="bold")
        text.append(f" - {warning.message}", style="yellow")
        if warning.value is not None:
            text.append(f" (got: {warning.value!r})", style="dim")

    console.print(Panel(text, title="[yellow]Config Warnings[/]", border_style="yellow"))


def config_to_dict(config: Config) -> dict[str, object]:
    """Convert a config to plain YAML-friendly values."""
    return config.model_dump(mode="json")


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to YAML file.

    Args:
        config: The configuration to save.
        config_path: Optional path to config file. Uses default if None.
    """
    path = config_path or get_config_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)
