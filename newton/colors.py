"""Root colors and their iteration-dependent shades."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
from matplotlib import colors as mcolors

RGB = tuple[float, float, float]

# Full-intensity primaries: "lime" is matplotlib's name for (0, 1, 0).
BASE_COLOR_NAMES = ("red", "lime", "blue", "cyan", "magenta")
DARKENING = 0.8


def resolve_palette(names: Iterable[str]) -> tuple[RGB, ...]:
    """Convert matplotlib color specifications into RGB triples in ``[0, 1]``."""

    palette = []
    for name in names:
        try:
            palette.append(tuple(float(c) for c in mcolors.to_rgb(name)))
        except ValueError as exc:
            raise ValueError(f"Unknown color {name!r}.") from exc
    return tuple(palette)


BASE_COLORS = resolve_palette(BASE_COLOR_NAMES)


def shade(base: Sequence[float], level: int, max_level: int) -> RGB:
    """Darken ``base`` towards black by ``level`` equal steps.

    Each step removes ``0.8 * channel / max_level`` from every channel, so
    level 0 is the base color and level ``max_level - 1`` is the darkest.
    """

    if not 0 <= level < max_level:
        raise ValueError(f"shade level must be in [0, {max_level}), got {level}.")
    r, g, b = (float(c) - level * (DARKENING * float(c) / max_level) for c in base)
    return r, g, b


def shade_table(palette: Sequence[Sequence[float]], max_level: int) -> np.ndarray:
    """Every shade of every palette color, shaped ``(len(palette), max_level, 3)``."""

    base = np.asarray(palette, dtype=np.float64)[:, np.newaxis, :]
    levels = np.arange(max_level, dtype=np.float64)[np.newaxis, :, np.newaxis]
    return base - levels * (DARKENING * base / max_level)
