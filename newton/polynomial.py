"""Polynomials with complex coefficients."""

from __future__ import annotations

from typing import Iterable

import numpy as np


class Polynomial:
    """A polynomial ``a0 + a1*z + ... + an*z**n`` with complex coefficients.

    Coefficients are stored lowest degree first. Trailing zero coefficients are
    trimmed on construction, so the top coefficient is non-zero unless the
    polynomial is the zero polynomial ``(0j,)``.
    """

    __slots__ = ("_coefficients",)

    def __init__(self, coefficients: Iterable[complex]) -> None:
        coeffs = [complex(c) for c in coefficients]
        while len(coeffs) > 1 and coeffs[-1] == 0:
            coeffs.pop()
        if not coeffs:
            coeffs = [0j]
        self._coefficients = tuple(coeffs)

    @classmethod
    def from_roots(cls, roots: Iterable[complex]) -> Polynomial:
        """Build the monic polynomial ``(z - r0)(z - r1)...``."""

        coeffs = [1 + 0j]
        for root in roots:
            shifted = [0j] + coeffs
            for k, c in enumerate(coeffs):
                shifted[k] -= complex(root) * c
            coeffs = shifted
        return cls(coeffs)

    @property
    def coefficients(self) -> tuple[complex, ...]:
        return self._coefficients

    def degree(self) -> int:
        return len(self._coefficients) - 1

    def evaluate(self, z):
        """Evaluate the polynomial at ``z`` using Horner's scheme.

        ``z`` may be a complex scalar or a numpy array, in which case the
        evaluation is elementwise.
        """

        result = self._coefficients[-1]
        if isinstance(z, np.ndarray):
            result = np.full(z.shape, result, dtype=np.complex128)
        for c in reversed(self._coefficients[:-1]):
            result = result * z + c
        return result

    __call__ = evaluate

    def derivative(self) -> Polynomial:
        if self.degree() == 0:
            return Polynomial([0j])
        return Polynomial(c * power for power, c in enumerate(self._coefficients) if power > 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self._coefficients == other._coefficients

    def __hash__(self) -> int:
        return hash(self._coefficients)

    def __repr__(self) -> str:
        return f"Polynomial({list(self._coefficients)!r})"

    def __str__(self) -> str:
        terms = []
        for power, c in enumerate(self._coefficients):
            if c == 0:
                continue
            if power == 0:
                terms.append(f"({format_complex(c)})")
            else:
                terms.append(f"({format_complex(c)})z^{power}")
        return "+".join(terms) if terms else "0"


def format_complex(z: complex, precision: int = 6) -> str:
    """Format ``z`` as ``re+imi`` with a fixed number of decimals."""

    sign = "-" if z.imag < 0 else "+"
    return f"{z.real:.{precision}f}{sign}{abs(z.imag):.{precision}f}i"
