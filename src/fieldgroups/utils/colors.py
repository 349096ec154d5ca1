"""Colour sources for newly created groups."""

from __future__ import annotations

import random
import re

HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def is_hex_color(value: str) -> bool:
    return bool(value) and HEX_COLOR_PATTERN.match(value) is not None


class RandomColorSource:
    """Random ``#RRGGBB`` colours; pass a seed for reproducible runs."""

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self._rng = rng if rng is not None else random.Random(seed)

    def next_color(self) -> str:
        return "#" + "".join(self._rng.choice("0123456789ABCDEF") for _ in range(6))


class PaletteColorSource:
    """Cycles through a fixed palette."""

    def __init__(self, palette: list[str]):
        if not palette:
            raise ValueError("Palette cannot be empty")
        invalid = [c for c in palette if not is_hex_color(c)]
        if invalid:
            raise ValueError(f"Invalid hex colors in palette: {invalid}")
        self._palette = list(palette)
        self._index = 0

    def next_color(self) -> str:
        color = self._palette[self._index % len(self._palette)]
        self._index += 1
        return color
