# spritr/core/config.py
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from app_config import DEFAULTS
from spritr.core.errors import ConfigError
from spritr.core.layers import Category


@dataclass(frozen=True)
class SpriteConfig:
    """
    Runtime values fed in by the form controls.
    Immutable; use replace() to derive an updated copy.
    """
    fps: float = 3
    scale: int = 3
    cell_size: int = 20
    sprite_name: str = "sample"

    def __post_init__(self) -> None:
        if not self.fps or self.fps <= 0:
            raise ConfigError(f"fps must be > 0 (got {self.fps!r})")
        if int(self.scale) <= 0:
            raise ConfigError(f"scale must be > 0 (got {self.scale!r})")
        if int(self.cell_size) <= 0:
            raise ConfigError(f"cell_size must be > 0 (got {self.cell_size!r})")

    @classmethod
    def from_defaults(cls, overrides: Optional[dict[str, Any]] = None) -> "SpriteConfig":
        values = dict(DEFAULTS.get("sprite", {}))
        values.update(overrides or {})
        return cls(**values)

    def replace(self, **changes: Any) -> "SpriteConfig":
        return replace(self, **changes)


def load_categories(entries: Optional[List[dict]] = None) -> List[Category]:
    """Build the ordered category list (declaration order = randomize order)."""
    raw = DEFAULTS["categories"] if entries is None else entries
    cats: List[Category] = []
    seen: set[str] = set()
    for entry in raw:
        name = str(entry["name"])
        if name in seen:
            raise ConfigError(f"duplicate category name: {name}")
        seen.add(name)
        cats.append(Category(name=name, nullable=bool(entry.get("nullable", False))))
    return cats
