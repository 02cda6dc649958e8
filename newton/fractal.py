"""Newton fractal generation: root classification and coloring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import PIL.Image

from .colors import BASE_COLORS, RGB, shade, shade_table
from .iterator import MAX_ITERATIONS, TOLERANCE, ErrorCode, NewtonIterator
from .polynomial import Polynomial, format_complex
from .renderer import iterate_grid
from .sampling import NUM_PIXELS, SamplingGrid

logger = logging.getLogger(__name__)

MIN_DEGREE = 3
MAX_DEGREE = 5
UNSET = -1
ENGINES = ("python", "tensorflow")


class RootRegistry:
    """Insertion-ordered list of distinct roots, matched within a tolerance.

    The index of a root is its color slot, so the first root discovered owns
    slot 0.
    """

    def __init__(self, tolerance: float = TOLERANCE) -> None:
        self.tolerance = tolerance
        self._roots: list[complex] = []

    def __len__(self) -> int:
        return len(self._roots)

    def __iter__(self):
        return iter(self._roots)

    def __getitem__(self, index: int) -> complex:
        return self._roots[index]

    def find(self, candidate: complex) -> Optional[int]:
        for index, root in enumerate(self._roots):
            if abs(root - candidate) < self.tolerance:
                return index
        return None

    def find_or_add(self, candidate: complex) -> int:
        index = self.find(candidate)
        if index is None:
            self._roots.append(complex(candidate))
            index = len(self._roots) - 1
            logger.debug("Registered root %d at %s", index, format_complex(candidate))
        return index


@dataclass(frozen=True)
class FractalImage:
    """Color grid of a Newton fractal, indexed ``[row, column]``.

    ``slots`` holds the root slot of each pixel or ``-1`` where the iteration
    did not converge; ``shades`` holds the shade level used for the pixel.
    """

    slots: np.ndarray
    shades: np.ndarray
    iterations: np.ndarray
    palette: tuple[RGB, ...]
    max_iterations: int

    @property
    def unset(self) -> np.ndarray:
        return self.slots == UNSET

    def color(self, i: int, j: int) -> Optional[RGB]:
        """Color of pixel column ``i``, row ``j``, or ``None`` if unset."""

        rows, cols = self.slots.shape
        if not (0 <= i < cols and 0 <= j < rows):
            raise IndexError(f"pixel ({i}, {j}) is outside the {cols}x{rows} image.")
        slot = int(self.slots[j, i])
        if slot == UNSET:
            return None
        return shade(self.palette[slot % len(self.palette)], int(self.shades[j, i]), self.max_iterations)

    def rgb(self, background: Sequence[float] = (0.0, 0.0, 0.0)) -> np.ndarray:
        """RGB float image in ``[0, 1]``; unset pixels take ``background``."""

        table = shade_table(self.palette, self.max_iterations)
        unset = self.unset
        slots = np.where(unset, 0, self.slots) % len(self.palette)
        rgb = table[slots, self.shades]
        rgb[unset] = np.asarray(background, dtype=np.float64)
        return rgb

    def to_image(self, background: Sequence[float] = (0.0, 0.0, 0.0)) -> PIL.Image.Image:
        rgb_uint8 = np.uint8(np.clip(np.rint(self.rgb(background) * 255), 0, 255))
        return PIL.Image.fromarray(rgb_uint8)


class FractalGenerator:
    """Generate the Newton fractal of a degree 3 to 5 polynomial.

    Each pixel of a square region of the complex plane, whose top-left corner
    is ``origin``, is used as a starting point for Newton-Raphson and colored
    by the root it reaches. Roots are discovered while scanning and keep their
    color slot for the lifetime of the generator, so successive renders use
    the same colors.
    """

    def __init__(
        self,
        polynomial: Polynomial,
        origin: complex,
        width: float,
        *,
        num_pixels: int = NUM_PIXELS,
        max_iterations: int = MAX_ITERATIONS,
        tolerance: float = TOLERANCE,
        palette: Sequence[RGB] = BASE_COLORS,
    ) -> None:
        degree = polynomial.degree()
        if degree < MIN_DEGREE or degree > MAX_DEGREE:
            raise ValueError(
                f"Degree of polynomial must be between {MIN_DEGREE} and {MAX_DEGREE} inclusive, got {degree}."
            )
        if len(palette) < MAX_DEGREE:
            raise ValueError(f"palette needs at least {MAX_DEGREE} colors, got {len(palette)}.")

        self.iterator = NewtonIterator(polynomial, max_iterations=max_iterations, tolerance=tolerance)
        self.grid = SamplingGrid(complex(origin), float(width), num_pixels)
        self.palette = tuple(tuple(float(c) for c in color) for color in palette)
        self.registry = RootRegistry(tolerance)
        self.image: Optional[FractalImage] = None
        self._wrap_warned = False

    @property
    def polynomial(self) -> Polynomial:
        return self.iterator.polynomial

    @property
    def origin(self) -> complex:
        return self.grid.origin

    @property
    def width(self) -> float:
        return self.grid.width

    @property
    def num_pixels(self) -> int:
        return self.grid.num_pixels

    @property
    def max_iterations(self) -> int:
        return self.iterator.max_iterations

    @property
    def roots(self) -> tuple[complex, ...]:
        return tuple(self.registry)

    def pixel_to_complex(self, i: int, j: int) -> complex:
        return self.grid.pixel_to_complex(i, j)

    def find_root(self, candidate: complex) -> Optional[int]:
        return self.registry.find(candidate)

    def format_roots(self) -> list[str]:
        return [format_complex(root) for root in self.registry]

    def print_roots(self) -> None:
        print(" ".join(self.format_roots()))

    def create_fractal(
        self,
        color_iterations: bool = False,
        *,
        engine: str = "python",
        device: Optional[str] = None,
    ) -> FractalImage:
        """Classify every pixel by the root it converges to.

        With ``color_iterations`` the shade of a pixel darkens with the number
        of Newton steps it needed. ``engine="tensorflow"`` computes all
        iterations in one vectorized pass before classifying the pixels.
        """

        if engine not in ENGINES:
            raise ValueError(f"Unknown engine '{engine}'. Valid choices: {', '.join(ENGINES)}.")

        n = self.num_pixels
        slots = np.full((n, n), UNSET, dtype=np.int16)
        shades = np.zeros((n, n), dtype=np.int32)
        iterations = np.zeros((n, n), dtype=np.int32)

        if engine == "tensorflow":
            basins = iterate_grid(
                self.polynomial,
                self.grid,
                max_iterations=self.iterator.max_iterations,
                tolerance=self.iterator.tolerance,
                device=device,
            )
            iterations[...] = basins.iterations
            # Columns outer, rows inner: the same order the scalar scan uses.
            converged = np.argwhere((basins.errors == int(ErrorCode.OK)).T)
            for i, j in converged:
                slots[j, i] = self._slot_for(basins.roots[j, i])
        else:
            for i in range(n):
                for j in range(n):
                    result = self.iterator.iterate(self.grid.pixel_to_complex(i, j))
                    iterations[j, i] = result.iterations
                    if result.error is not ErrorCode.OK:
                        continue
                    slots[j, i] = self._slot_for(result.root)

        converged_mask = slots != UNSET
        if color_iterations:
            shades[converged_mask] = iterations[converged_mask] - 1

        self.image = FractalImage(
            slots=slots,
            shades=shades,
            iterations=iterations,
            palette=self.palette,
            max_iterations=self.max_iterations,
        )
        logger.info(
            "Rendered %dx%d fractal: %d root(s), %d unset pixel(s)",
            n,
            n,
            len(self.registry),
            int(np.count_nonzero(~converged_mask)),
        )
        return self.image

    def save_fractal(
        self,
        path: str | Path,
        *,
        background: Sequence[float] = (0.0, 0.0, 0.0),
        image_format: str = "png",
    ) -> Path:
        """Write the most recent render to ``path``."""

        if self.image is None:
            raise RuntimeError("create_fractal must be called before save_fractal.")
        return write_image(self.image.to_image(background), Path(path), image_format)

    def _slot_for(self, root: complex) -> int:
        index = self.registry.find_or_add(root)
        if index >= len(self.palette) and not self._wrap_warned:
            logger.warning(
                "Found %d distinct roots for a degree %d polynomial; reusing palette colors",
                index + 1,
                self.polynomial.degree(),
            )
            self._wrap_warned = True
        return index


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_image(image: PIL.Image.Image, output_path: Path, image_format: str = "png") -> Path:
    """Write ``image`` to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=_pil_format_name(image_format))
    return output_path
