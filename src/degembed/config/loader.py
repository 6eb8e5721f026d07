"""YAML configuration loading with dotted-key overrides."""

import os
from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import DEGEmbedConfig

# Points data_dir at a reference data install without editing the YAML
DATA_DIR_ENV_VAR = "DEGEMBED_DATA_DIR"


def _set_dotted(config_dict: dict[str, Any], key: str, value: Any) -> None:
    """Set config_dict["a"]["b"] for key "a.b", refusing unknown sections and fields."""
    *sections, leaf = key.split(".")
    target = config_dict
    for section in sections:
        if not isinstance(target.get(section), dict):
            raise KeyError(f"Unknown config section '{section}' in override '{key}'")
        target = target[section]
    if leaf not in target:
        raise KeyError(f"Unknown config field '{leaf}' in override '{key}'")
    target[leaf] = value


def load_config(config_path: Path | str) -> DEGEmbedConfig:
    """
    Load and validate degembed configuration from a YAML file.

    If DEGEMBED_DATA_DIR is set it replaces the file's data_dir.

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = pydantic_yaml.parse_yaml_raw_as(
        DEGEmbedConfig, config_path.read_text(encoding="utf-8")
    )

    env_data_dir = os.environ.get(DATA_DIR_ENV_VAR)
    if env_data_dir:
        config = config.model_copy(update={"data_dir": Path(env_data_dir)})
    return config


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> DEGEmbedConfig:
    """
    Load config from YAML and apply CLI overrides.

    Args:
        config_path: Path to YAML configuration file
        overrides: Values keyed by field name; dotted keys address nested
            fields, e.g. {"analysis.workers": 4}

    Returns:
        Re-validated DEGEmbedConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        KeyError: If an override names an unknown section
        pydantic.ValidationError: If the overridden config is invalid
    """
    config_dict = load_config(config_path).model_dump()
    for key, value in overrides.items():
        _set_dotted(config_dict, key, value)
    return DEGEmbedConfig.model_validate(config_dict)
