"""Vectorized Newton-Raphson over a whole sampling grid with TensorFlow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .iterator import MAX_ITERATIONS, TOLERANCE, ErrorCode, _check_limits
from .polynomial import Polynomial
from .sampling import SamplingGrid


@dataclass(frozen=True)
class BasinResult:
    """Per-pixel Newton outcomes, indexed ``[row, column]``."""

    roots: np.ndarray
    iterations: np.ndarray
    errors: np.ndarray
    grid: SamplingGrid


def _horner(coefficients: tf.Tensor, zs: tf.Tensor) -> tf.Tensor:
    result = tf.fill(tf.shape(zs), coefficients[-1])
    for k in range(int(coefficients.shape[0]) - 2, -1, -1):
        result = result * zs + coefficients[k]
    return result


@tf.function
def _newton_step(
    f: tf.Tensor,
    fp: tf.Tensor,
    zs: tf.Tensor,
    ns: tf.Tensor,
    errs: tf.Tensor,
    active: tf.Tensor,
    tolerance: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single Newton update for points that are still iterating."""

    fz = _horner(f, zs)
    fpz = _horner(fp, zs)
    zero = tf.logical_and(active, tf.equal(fpz, tf.zeros_like(fpz)))
    stepping = tf.logical_and(active, tf.logical_not(zero))
    safe_fpz = tf.where(zero, tf.ones_like(fpz), fpz)
    zs_new = zs - fz / safe_fpz
    converged = tf.logical_and(stepping, tf.abs(zs_new - zs) < tolerance)

    ns = ns + tf.cast(active, tf.int32)
    zs = tf.where(stepping, zs_new, zs)
    errs = tf.where(zero, tf.fill(tf.shape(errs), int(ErrorCode.ZERO_DERIVATIVE)), errs)
    errs = tf.where(converged, tf.zeros_like(errs), errs)
    active = tf.logical_and(stepping, tf.logical_not(converged))
    return zs, ns, errs, active


@tf.function
def _newton_run(
    f: tf.Tensor,
    fp: tf.Tensor,
    zs: tf.Tensor,
    max_iterations: tf.Tensor,
    tolerance: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate Newton's method using a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros(tf.shape(zs), tf.int32)
    errs = tf.fill(tf.shape(zs), int(ErrorCode.MAX_ITER_EXCEEDED))
    active = tf.ones(tf.shape(zs), tf.bool)

    def cond(i: tf.Tensor, zs: tf.Tensor, ns: tf.Tensor, errs: tf.Tensor, active: tf.Tensor) -> tf.Tensor:
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(
        i: tf.Tensor, zs: tf.Tensor, ns: tf.Tensor, errs: tf.Tensor, active: tf.Tensor
    ) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
        zs, ns, errs, active = _newton_step(f, fp, zs, ns, errs, active, tolerance)
        return i + 1, zs, ns, errs, active

    return tf.while_loop(cond, body, (i, zs, ns, errs, active))


def iterate_grid(
    polynomial: Polynomial,
    grid: SamplingGrid,
    *,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
    device: Optional[str] = None,
) -> BasinResult:
    """Run Newton-Raphson from every pixel of ``grid`` at once.

    Per pixel the outcome matches :func:`newton.iterator.iterate`; pixels that
    are still moving after ``max_iterations`` steps report
    ``ErrorCode.MAX_ITER_EXCEEDED``.
    """

    _check_limits(max_iterations, tolerance)
    derivative = polynomial.derivative()
    points = grid.points()

    with tf.device(device if device is not None else "/CPU:0"):
        f = tf.constant(np.array(polynomial.coefficients, dtype=np.complex128))
        fp = tf.constant(np.array(derivative.coefficients, dtype=np.complex128))
        zs = tf.convert_to_tensor(points, dtype=tf.complex128)
        _, zs, ns, errs, _ = _newton_run(
            f,
            fp,
            zs,
            tf.constant(max_iterations, dtype=tf.int32),
            tf.constant(tolerance, dtype=tf.float64),
        )

    return BasinResult(
        roots=zs.numpy(),
        iterations=ns.numpy(),
        errors=errs.numpy(),
        grid=grid,
    )
