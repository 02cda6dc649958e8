"""Newton-Raphson iteration on complex polynomials."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .polynomial import Polynomial

MAX_ITERATIONS = 20
TOLERANCE = 1.0e-10


class ErrorCode(IntEnum):
    """Outcome of a single Newton-Raphson run."""

    OK = 0
    ZERO_DERIVATIVE = -1
    MAX_ITER_EXCEEDED = -2


@dataclass(frozen=True)
class IterationResult:
    """Result of iterating from one starting point.

    ``root`` is the converged root when ``error`` is ``ErrorCode.OK`` and the
    last working point otherwise.
    """

    root: complex
    iterations: int
    error: ErrorCode

    @property
    def converged(self) -> bool:
        return self.error is ErrorCode.OK


def _check_limits(max_iterations: int, tolerance: float) -> None:
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}.")
    if not tolerance > 0:
        raise ValueError(f"tolerance must be positive, got {tolerance}.")


def iterate(
    polynomial: Polynomial,
    derivative: Polynomial,
    z0: complex,
    *,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> IterationResult:
    """Apply ``z <- z - f(z) / f'(z)`` starting from ``z0``.

    Stops as soon as two successive iterates are closer than ``tolerance``,
    when ``f'(z)`` is exactly zero, or after ``max_iterations`` steps.
    """

    _check_limits(max_iterations, tolerance)
    z = complex(z0)
    count = 0
    for _ in range(max_iterations):
        fz = polynomial.evaluate(z)
        fpz = derivative.evaluate(z)
        if fpz == 0:
            return IterationResult(z, count + 1, ErrorCode.ZERO_DERIVATIVE)
        z_new = z - fz / fpz
        count += 1
        if abs(z_new - z) < tolerance:
            return IterationResult(z_new, count, ErrorCode.OK)
        z = z_new
    return IterationResult(z, count, ErrorCode.MAX_ITER_EXCEEDED)


class NewtonIterator:
    """Newton-Raphson solver bound to one polynomial and its derivative."""

    def __init__(
        self,
        polynomial: Polynomial,
        *,
        max_iterations: int = MAX_ITERATIONS,
        tolerance: float = TOLERANCE,
    ) -> None:
        _check_limits(max_iterations, tolerance)
        self.polynomial = polynomial
        self.derivative = polynomial.derivative()
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    def iterate(self, z0: complex) -> IterationResult:
        return iterate(
            self.polynomial,
            self.derivative,
            z0,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
        )
