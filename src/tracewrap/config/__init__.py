"""Load and merge YAML config specs.

A spec is either a path to a YAML file (absolute, relative to the working
directory, or a file name inside `builtin_config_dir`) or a
``dotted.key=value`` override whose value is parsed as YAML.
"""

from pathlib import Path
from typing import Any

import yaml

builtin_config_dir = Path(__file__).parent

DEFAULT_CONFIG_FILE = builtin_config_dir / "default.yaml"


def get_config_path(spec: str | Path) -> Path:
    """Resolve a config file spec to an existing path."""
    path = Path(spec)
    candidates = [path, builtin_config_dir / path]
    if not path.suffix:
        candidates.append(builtin_config_dir / f"{path}.yaml")
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"Could not find config file for spec {str(spec)!r}")


def _parse_value(raw_value: str) -> Any:
    if not raw_value:
        return None
    try:
        return yaml.safe_load(raw_value)
    except yaml.YAMLError:
        # e.g. scoped package names: "@" cannot start a plain YAML scalar
        return raw_value


def _key_value_spec_to_nested_dict(spec: str) -> dict:
    key, _, raw_value = spec.partition("=")
    value = _parse_value(raw_value)
    for part in reversed(key.strip().split(".")):
        value = {part: value}
    return value


def get_config_from_spec(spec: str | Path) -> dict:
    """Load a single config spec into a dict."""
    if isinstance(spec, str) and "=" in spec and not Path(spec).is_file():
        return _key_value_spec_to_nested_dict(spec)
    path = get_config_path(spec)
    return yaml.safe_load(path.read_text()) or {}
