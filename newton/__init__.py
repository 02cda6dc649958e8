"""Public API for Newton fractal utilities."""

from .colors import BASE_COLORS, resolve_palette, shade
from .fractal import FractalGenerator, FractalImage, RootRegistry, write_image
from .iterator import MAX_ITERATIONS, TOLERANCE, ErrorCode, IterationResult, NewtonIterator, iterate
from .polynomial import Polynomial, format_complex
from .renderer import BasinResult, iterate_grid
from .sampling import NUM_PIXELS, SamplingGrid

__all__ = [
    "BASE_COLORS",
    "BasinResult",
    "ErrorCode",
    "FractalGenerator",
    "FractalImage",
    "IterationResult",
    "MAX_ITERATIONS",
    "NUM_PIXELS",
    "NewtonIterator",
    "Polynomial",
    "RootRegistry",
    "SamplingGrid",
    "TOLERANCE",
    "format_complex",
    "iterate",
    "iterate_grid",
    "resolve_palette",
    "shade",
    "write_image",
]
