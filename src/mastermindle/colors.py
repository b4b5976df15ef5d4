"""
The colors a code can be built from.

(placed in its own module as the scoring, feedback, and round modules all need it)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from src.core.models import Color

logger = logging.getLogger(__name__)

# Both the number of slots and the number of colors must stay within these bounds
MIN_SIZE = 1
MAX_SIZE = 12

# Stable order: a ColorSpace of size n always uses the first n entries
PALETTE: tuple[Color, ...] = (
    "red",
    "blue",
    "green",
    "yellow",
    "purple",
    "orange",
    "pink",
    "brown",
    "cyan",
    "black",
    "white",
    "lime",
)


def clamp_size(value: int, name: str = "size") -> int:
    """Pull a slot or color count back into [MIN_SIZE, MAX_SIZE] instead of failing."""
    clamped = max(MIN_SIZE, min(MAX_SIZE, int(value)))
    if clamped != value:
        logger.warning("%s=%s out of range, clamped to %s", name, value, clamped)
    return clamped


@dataclass(frozen=True)
class ColorSpace:
    colors: tuple[Color, ...]

    @classmethod
    def from_count(cls, count: int) -> ColorSpace:
        return cls(PALETTE[: clamp_size(count, "colors")])

    def __len__(self) -> int:
        return len(self.colors)

    def __contains__(self, color: object) -> bool:
        return color in self.colors

    def random_solution(
        self, slots: int, rng: random.Random | None = None
    ) -> tuple[Color, ...]:
        """Every slot gets drawn independently and uniformly (with replacement)."""
        rng = rng or random.Random()
        return tuple(
            self.colors[rng.randrange(len(self.colors))]
            for _ in range(clamp_size(slots, "slots"))
        )
