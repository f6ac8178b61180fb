# spritr/core/randomizer.py
from __future__ import annotations
import math
import random
from typing import Dict, List, Optional, Sequence

from spritr.core.layers import Category, LayerStore
from spritr.core.logging import get_logger


class LayerSelector:
    """Category-constrained random outfit picker."""

    def __init__(self, categories: Sequence[Category], rng: Optional[random.Random] = None) -> None:
        self._log = get_logger(__name__)
        self.categories: List[Category] = list(categories)
        self.rng = rng or random.Random()

    def pick_index(self, n: int, nullable: bool) -> int:
        """
        floor(random() * n), minus round(random()) for nullable slots.
        Two independent draws; any negative result means "nothing shown".
        """
        index = math.floor(self.rng.random() * n)
        if nullable:
            # half-up rounding, not Python's banker's round()
            index -= math.floor(self.rng.random() + 0.5)
        return index

    def randomize(self, store: LayerStore) -> Dict[str, Optional[str]]:
        """
        Resample visibility for every category in declaration order.
        Returns {category: shown layer name or None} for the categories present.
        """
        picks: Dict[str, Optional[str]] = {}
        for cat in self.categories:
            group = store.by_category(cat.name)
            if not group:
                self._log.debug("randomize: no layers in %r", cat.name)
                continue
            selected = self.pick_index(len(group), cat.nullable)
            chosen = None
            for i, layer in enumerate(group):
                layer.show = i == selected
                if layer.show:
                    chosen = layer.name
            picks[cat.name] = chosen
        self._log.info("randomize -> %s", picks)
        return picks
