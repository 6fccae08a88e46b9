"""Template source loading (YAML files keyed by locale)."""
from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from nestval.core.errors import AppError, Ok, Result, file_not_found, file_read_error


@lru_cache(maxsize=64)
def _read(path: str) -> Result[dict, AppError]:
    source = Path(path)
    if not source.is_file():
        return file_not_found(source, origin="template_loader")
    try:
        with open(source, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        return file_read_error(source, e, origin="template_loader")
    if not isinstance(data, dict):
        return file_read_error(source, ValueError("top level must be a mapping of locales"), origin="template_loader")
    return Ok(data)


def load_templates(path: str | Path) -> Result[dict, AppError]:
    """Read one template file: ``{locale: {nested keys: template}}``.

    Parsed files are memoized; callers treat the returned tree as read-only.
    """
    return _read(str(Path(path).resolve()))


def deep_merge(base: Mapping, override: Mapping) -> dict:
    """New mapping with ``override`` merged into ``base``; later sources win."""
    merged: dict[str, Any] = {k: (deep_merge(v, {}) if isinstance(v, Mapping) else v) for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge(value, {})
        else:
            merged[key] = value
    return merged
