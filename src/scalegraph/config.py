"""
Engine configuration.

Groups the few knobs the engine has: layout constants, store strictness
and where an imported root is placed. Loadable from YAML:

    strict: true
    root_id: imported-scale
    root_position: {x: 100, y: 250}
    layout:
      horizontal_step: 550
      estimated_height: 180
      vertical_gap: 24
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

import yaml

from scalegraph.assembler import DEFAULT_ROOT_ID, DEFAULT_ROOT_POSITION
from scalegraph.layout import DEFAULT_LAYOUT, LayoutConstants
from scalegraph.model import Position


_TOP_LEVEL_KEYS = {"strict", "root_id", "root_position", "layout"}


@dataclass(frozen=True)
class EngineConfig:
    layout: LayoutConstants = field(default_factory=lambda: DEFAULT_LAYOUT)
    strict: bool = True
    root_position: Position = DEFAULT_ROOT_POSITION
    root_id: str = DEFAULT_ROOT_ID

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> "EngineConfig":
        d = d or {}
        unknown = set(d) - _TOP_LEVEL_KEYS
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        layout_d = d.get("layout") or {}
        layout_keys = {f.name for f in fields(LayoutConstants)}
        unknown = set(layout_d) - layout_keys
        if unknown:
            raise ValueError(f"Unknown layout keys: {sorted(unknown)}")

        pos = d.get("root_position")
        return cls(
            layout=LayoutConstants(**layout_d),
            strict=bool(d.get("strict", True)),
            root_position=Position(pos["x"], pos["y"]) if pos else DEFAULT_ROOT_POSITION,
            root_id=d.get("root_id", DEFAULT_ROOT_ID),
        )

    @classmethod
    def from_yaml(cls, text: str) -> "EngineConfig":
        return cls.from_dict(yaml.safe_load(text))


def load_config(filepath: str) -> EngineConfig:
    """
    Load an EngineConfig from a YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file contains unknown keys
    """
    with open(filepath, "r", encoding="utf-8") as f:
        return EngineConfig.from_yaml(f.read())


__all__ = ["EngineConfig", "load_config"]
