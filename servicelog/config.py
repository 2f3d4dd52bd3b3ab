"""
Project configuration.

A ``servicelog.toml`` file, found by walking up from the working directory,
names the note store, the equipment model, and the caller's access tier:

    store = "notes.json"
    equipment_model = "HyPM XR 3"
    equipment_models = "equipment.yml"   # or an inline [equipment_models] table
    default_stack_count = 1
    access = "elevated"
    author_id = "u-17"
    author_name = "Sam Doe"

The equipment model table maps model names to stack counts. As a YAML file
it is either a plain mapping or has the mapping under ``models``.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .categories import AccessTier
from .stacks import MAX_STACK_COUNT, MIN_STACK_COUNT

CONFIG_FILENAME = "servicelog.toml"
DEFAULT_STORE = "notes.json"


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass(frozen=True)
class LogbookConfig:
    root: Path
    store_path: Path
    equipment_model: str | None = None
    stack_count: int = MIN_STACK_COUNT
    access: AccessTier = AccessTier.BASIC
    author_id: str | None = None
    author_name: str | None = None


def find_config(start: Path) -> Path | None:
    """Find servicelog.toml by walking up from ``start``."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _coerce_stack_count(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: stack count must be an integer, got {value!r}")
    if not MIN_STACK_COUNT <= value <= MAX_STACK_COUNT:
        raise ConfigError(f"{where}: stack count must be between {MIN_STACK_COUNT} and {MAX_STACK_COUNT}")
    return value


def _coerce_models(data: Any, where: str) -> dict[str, int]:
    if isinstance(data, dict) and isinstance(data.get("models"), dict):
        data = data["models"]
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected a mapping of equipment model to stack count")
    return {str(model): _coerce_stack_count(count, f"{where}[{model}]") for model, count in data.items()}


def load_equipment_models(path: Path) -> dict[str, int]:
    """Load the equipment model -> stack count table from YAML."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML ({e})") from e
    except OSError as e:
        raise ConfigError(f"{path}: {e}") from e
    return _coerce_models(data, str(path))


def resolve_stack_count(model: str | None, models: dict[str, int], default: int) -> int:
    """Stack count for an equipment model, falling back to ``default``."""
    if model and model in models:
        return models[model]
    return default


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value.strip() or None


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> LogbookConfig:
    """
    Load configuration from ``path`` (or the auto-detected servicelog.toml).

    Without a config file every setting takes its default and the store lives
    in the working directory.
    """
    if path is None:
        path = find_config(cwd or Path.cwd())
    if path is None:
        root = (cwd or Path.cwd()).resolve()
        return LogbookConfig(root=root, store_path=root / DEFAULT_STORE)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: invalid TOML ({e})") from e
    except OSError as e:
        raise ConfigError(f"{path}: {e}") from e

    root = path.resolve().parent

    store = data.get("store", DEFAULT_STORE)
    if not isinstance(store, str) or not store.strip():
        raise ConfigError("store must be a non-empty path")

    default_count = _coerce_stack_count(data.get("default_stack_count", MIN_STACK_COUNT), "default_stack_count")

    raw_models = data.get("equipment_models", {})
    if isinstance(raw_models, str):
        models = load_equipment_models(root / raw_models)
    else:
        models = _coerce_models(raw_models, "equipment_models")

    access_raw = str(data.get("access", AccessTier.BASIC.value)).strip().lower()
    try:
        access = AccessTier(access_raw)
    except ValueError:
        allowed = ", ".join(t.value for t in AccessTier)
        raise ConfigError(f"access must be one of: {allowed}") from None

    model = _optional_str(data, "equipment_model")
    return LogbookConfig(
        root=root,
        store_path=root / store,
        equipment_model=model,
        stack_count=resolve_stack_count(model, models, default_count),
        access=access,
        author_id=_optional_str(data, "author_id"),
        author_name=_optional_str(data, "author_name"),
    )
