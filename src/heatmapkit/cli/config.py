"""
Configuration file support for the heatmapkit CLI.

Supports YAML and JSON config files with CLI argument override.

Example config (YAML):

    input: data/expression.csv
    output: results/expression_log2
    transform:
      method: log2p1
      centering: median
      clip: true
      clip_method: iqr
      clip_multiplier: 3.0
    colors:
      low: blue
      mid: white
      high: red
    range:
      low: -2.0
      high: 2.0
"""

import json
from argparse import Namespace
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from heatmapkit.color.gradient import Color
from heatmapkit.heatmap.operations import Centering, ClipMethod, ScalarTransform


@dataclass
class TransformConfig:
    """Transform section."""
    method: str = "identity"
    centering: str = "none"
    clip: bool = False
    clip_method: str = "iqr"
    clip_multiplier: float = 3.0


@dataclass
class ColorsConfig:
    """Gradient colours section."""
    low: str = "blue"
    high: str = "red"
    mid: Optional[str] = None


@dataclass
class RangeConfig:
    """Explicit colour range (defaults to the data min/max when absent)."""
    low: Optional[float] = None
    high: Optional[float] = None


@dataclass
class ConfigSchema:
    """
    Complete configuration schema.

    Mirrors the CLI argument structure for consistency.
    """
    input: Optional[Path] = None
    output: Optional[Path] = None
    transform: TransformConfig = field(default_factory=TransformConfig)
    colors: ColorsConfig = field(default_factory=ColorsConfig)
    range: RangeConfig = field(default_factory=RangeConfig)


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in ('.yaml', '.yml', '.json'):
        raise ValueError(
            f"Unsupported config format: {suffix}. "
            f"Use .yaml, .yml, or .json"
        )

    try:
        with open(config_path, 'r') as f:
            if suffix == '.json':
                config = json.load(f)
            else:
                config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def _merge_value(cli_value: Any, config_value: Any, was_explicitly_set: bool) -> Any:
    """
    Merge a single config value with CLI argument.

    Rules:
    - CLI args ALWAYS override config if explicitly set
    - If CLI arg not set, use config value
    - If neither set, keep CLI default
    """
    if was_explicitly_set:
        return cli_value
    if config_value is not None:
        return config_value
    return cli_value


def _explicit_args(cli_args: Optional[List[str]]) -> set:
    """Destination names of the long options present on the command line."""
    explicit = set()
    short_to_long = {'i': 'input', 'o': 'output'}
    for arg in cli_args or []:
        if arg.startswith('--'):
            explicit.add(arg[2:].split('=', 1)[0].replace('-', '_'))
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in short_to_long:
            explicit.add(short_to_long[arg[1]])
    # --no-clip sets the same destination as --clip
    if 'no_clip' in explicit:
        explicit.add('clip')
    return explicit


# (config section, config key) -> argparse destination
_MAPPINGS = {
    ('transform', 'method'): 'transform',
    ('transform', 'centering'): 'centering',
    ('transform', 'clip'): 'clip',
    ('transform', 'clip_method'): 'clip_method',
    ('transform', 'clip_multiplier'): 'clip_multiplier',
    ('colors', 'low'): 'low_color',
    ('colors', 'high'): 'high_color',
    ('colors', 'mid'): 'mid_color',
}

_COLOR_ARGS = {'low_color', 'high_color', 'mid_color'}


def merge_config_with_args(
    config: Dict[str, Any],
    args: Namespace,
    cli_args: Optional[List[str]] = None,
) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Only destinations the subcommand actually defines are merged, so one
    config file can be shared by `transform` and `colorize`.

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values)

    Returns:
        Updated Namespace with merged values
    """
    explicit = _explicit_args(cli_args)
    merged = Namespace(**vars(args))

    for key in ('input', 'output'):
        if key in config and hasattr(merged, key):
            value = Path(config[key]) if config[key] is not None else None
            setattr(merged, key, _merge_value(getattr(merged, key), value, key in explicit))

    for (section, key), dest in _MAPPINGS.items():
        if section not in config or key not in (config[section] or {}):
            continue
        if not hasattr(merged, dest):
            continue
        value = config[section][key]
        if dest in _COLOR_ARGS and value is not None:
            value = Color.parse(tuple(value) if isinstance(value, list) else value)
        setattr(merged, dest, _merge_value(getattr(merged, dest), value, dest in explicit))

    if 'range' in config and hasattr(merged, 'range'):
        section = config['range'] or {}
        low, high = section.get('low'), section.get('high')
        if low is not None and high is not None:
            merged.range = _merge_value(merged.range, [float(low), float(high)], 'range' in explicit)

    return merged


def _section(config: Dict[str, Any], name: str, schema_cls):
    """Build one schema section, rejecting keys the schema does not define."""
    values = config.get(name) or {}
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got: {values!r}")
    known = {f.name for f in fields(schema_cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(
            f"Unknown {name} key '{unknown[0]}'. Use {', '.join(sorted(known))}"
        )
    return schema_cls(**values)


def validate_config(config: Dict[str, Any]) -> ConfigSchema:
    """
    Validate configuration structure and values.

    Returns:
        The configuration as a ConfigSchema

    Raises:
        ValueError: If configuration is invalid
    """
    schema = ConfigSchema(
        input=Path(config['input']) if config.get('input') is not None else None,
        output=Path(config['output']) if config.get('output') is not None else None,
        transform=_section(config, 'transform', TransformConfig),
        colors=_section(config, 'colors', ColorsConfig),
        range=_section(config, 'range', RangeConfig),
    )

    transform = schema.transform
    choices = {
        'method': [t.value for t in ScalarTransform],
        'centering': [c.value for c in Centering],
        'clip_method': [m.value for m in ClipMethod],
    }
    for key, valid in choices.items():
        value = getattr(transform, key)
        if value not in valid:
            raise ValueError(
                f"Invalid transform {key} '{value}'. "
                f"Choose from: {', '.join(valid)}"
            )

    if not isinstance(transform.clip, bool):
        raise ValueError(f"transform clip must be true/false, got: {transform.clip}")

    multiplier = transform.clip_multiplier
    if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)) or multiplier <= 0:
        raise ValueError(
            f"clip_multiplier must be positive number, got: {multiplier}"
        )

    for value in (schema.colors.low, schema.colors.high, schema.colors.mid):
        if value is not None:
            Color.parse(tuple(value) if isinstance(value, list) else value)

    low, high = schema.range.low, schema.range.high
    if (low is None) != (high is None):
        raise ValueError("range needs both low and high")
    if low is not None and float(low) > float(high):
        raise ValueError(f"range low ({low}) must be <= high ({high})")

    return schema
