from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sizeopt.options.size_opts import SizeOpts

SECTION = "size_opt"
DEFAULT_PRESET = "default"


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load YAML config into a dict. An empty file yields an empty dict."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def options_from_config(raw: Dict[str, Any], preset: Optional[str] = None) -> SizeOpts:
    """Build `SizeOpts` from the `size_opt` section of a merged config.

    `preset` wins over the configured one; overrides are applied on top.
    """
    section = raw.get(SECTION) or {}
    name = preset or section.get("preset", DEFAULT_PRESET)
    opts = SizeOpts.preset(name)

    overrides = section.get("overrides") or {}
    unknown = sorted(set(overrides) - set(SizeOpts.field_names()))
    if unknown:
        raise ValueError(f"Unknown {SECTION} overrides: {', '.join(unknown)}")
    return replace(opts, **overrides)


@dataclass
class AppConfig:
    raw: Dict[str, Any]

    @classmethod
    def from_files(cls, *paths: str | Path) -> "AppConfig":
        merged: Dict[str, Any] = {}
        for path in paths:
            merged = deep_merge(merged, load_yaml(path))
        return cls(raw=merged)

    def size_opts(self, preset: Optional[str] = None) -> SizeOpts:
        return options_from_config(self.raw, preset)
