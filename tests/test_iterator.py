import cmath

import pytest

from newton import MAX_ITERATIONS, TOLERANCE, ErrorCode, NewtonIterator, Polynomial, iterate

CUBE = Polynomial([-1, 0, 0, 1])
CUBE_ROOTS = [cmath.exp(2j * cmath.pi * k / 3) for k in range(3)]


def test_defaults():
    assert MAX_ITERATIONS == 20
    assert TOLERANCE == 1.0e-10


def test_cube_roots_of_unity():
    result = iterate(CUBE, CUBE.derivative(), 1 + 1j)
    assert result.error is ErrorCode.OK
    assert result.converged
    assert 1 <= result.iterations <= MAX_ITERATIONS
    assert abs(CUBE.evaluate(result.root)) < 1e-8
    assert min(abs(result.root - r) for r in CUBE_ROOTS) < TOLERANCE


def test_zero_derivative_on_first_step():
    constant = Polynomial([5])
    result = iterate(constant, constant.derivative(), 1 + 1j)
    assert result.error is ErrorCode.ZERO_DERIVATIVE
    assert result.iterations == 1
    assert not result.converged


def test_zero_derivative_at_critical_point():
    result = iterate(CUBE, CUBE.derivative(), 0j)
    assert result.error is ErrorCode.ZERO_DERIVATIVE
    assert result.iterations == 1


def test_max_iterations_exceeded():
    result = iterate(CUBE, CUBE.derivative(), 10 + 10j, max_iterations=2)
    assert result.error is ErrorCode.MAX_ITER_EXCEEDED
    assert result.iterations == 2


def test_error_codes_match_legacy_values():
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.ZERO_DERIVATIVE) == -1
    assert int(ErrorCode.MAX_ITER_EXCEEDED) == -2


def test_iterator_returns_independent_results():
    newton = NewtonIterator(CUBE)
    first = newton.iterate(1 + 1j)
    second = newton.iterate(0j)
    assert first.error is ErrorCode.OK
    assert second.error is ErrorCode.ZERO_DERIVATIVE
    assert first == iterate(CUBE, CUBE.derivative(), 1 + 1j)
    with pytest.raises(AttributeError):
        first.root = 0j


def test_iterator_owns_derivative():
    newton = NewtonIterator(CUBE, max_iterations=5, tolerance=1e-6)
    assert newton.derivative == Polynomial([0, 0, 3])
    assert newton.iterate(2 + 0j).iterations <= 5


def test_looser_tolerance_stops_earlier():
    strict = iterate(CUBE, CUBE.derivative(), 2 + 2j)
    loose = iterate(CUBE, CUBE.derivative(), 2 + 2j, tolerance=1e-2)
    assert loose.error is ErrorCode.OK
    assert loose.iterations <= strict.iterations


@pytest.mark.parametrize("kwargs", [{"max_iterations": 0}, {"tolerance": 0.0}, {"tolerance": -1.0}])
def test_invalid_limits(kwargs):
    with pytest.raises(ValueError):
        iterate(CUBE, CUBE.derivative(), 1 + 1j, **kwargs)
    with pytest.raises(ValueError):
        NewtonIterator(CUBE, **kwargs)
