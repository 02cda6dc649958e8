"""Mapping between pixel indices and points of the complex plane."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

NUM_PIXELS = 400


@dataclass(frozen=True)
class SamplingGrid:
    """A square ``num_pixels`` x ``num_pixels`` sampling of the complex plane.

    ``origin`` is the top-left corner. Real parts grow to the right with the
    column index ``i``; imaginary parts shrink downwards with the row index ``j``.
    """

    origin: complex
    width: float
    num_pixels: int = NUM_PIXELS

    def __post_init__(self) -> None:
        if not self.width > 0:
            raise ValueError(f"width must be positive, got {self.width}.")
        if self.num_pixels < 1:
            raise ValueError(f"num_pixels must be at least 1, got {self.num_pixels}.")

    @property
    def step(self) -> float:
        return self.width / self.num_pixels

    def pixel_to_complex(self, i: int, j: int) -> complex:
        dz = self.step
        return complex(self.origin.real + i * dz, self.origin.imag - j * dz)

    def axes(self) -> tuple[np.ndarray, np.ndarray]:
        """Return the real coordinate of every column and imaginary coordinate of every row."""

        dz = np.float64(self.step)
        index = np.arange(self.num_pixels, dtype=np.float64)
        x = np.float64(self.origin.real) + index * dz
        y = np.float64(self.origin.imag) - index * dz
        return x, y

    def points(self) -> np.ndarray:
        """Complex starting points for every pixel, indexed ``[row, column]``."""

        x, y = self.axes()
        X, Y = np.meshgrid(x, y)
        Z = X.astype(np.complex128)
        Z.imag = Y
        return Z
