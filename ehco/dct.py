"""Orthonormal type-II discrete cosine transform on fixed-size blocks."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

_INT16_MIN = -32768
_INT16_MAX = 32767


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def precompute_dct_matrix(n: int) -> np.ndarray:
    """Return the n-by-n orthonormal DCT-II matrix, indexed [k, n]."""
    if n <= 0:
        raise ValueError("DCT size must be positive")
    k = np.arange(n)[:, None]
    idx = np.arange(n)[None, :]
    scale = np.full((n, 1), math.sqrt(2.0 / n))
    scale[0, 0] = math.sqrt(1.0 / n)
    return scale * np.cos(math.pi * k / (2.0 * n) * (2 * idx + 1))


def apply(
    signal: Sequence[int] | np.ndarray,
    start: int,
    length: int,
    dct_matrix: np.ndarray,
) -> np.ndarray:
    """Transform ``length`` samples of ``signal`` beginning at ``start``."""
    segment = np.asarray(signal[start:start + length], dtype=np.float64)
    if segment.size < length:
        raise ValueError("signal is shorter than the requested block")
    matrix = np.asarray(dct_matrix, dtype=np.float64)
    if matrix.shape[0] < length or matrix.shape[1] < length:
        raise ValueError("DCT matrix is smaller than the requested block")
    return matrix[:length, :length] @ segment


def inverse(
    transformed: Sequence[float] | np.ndarray, dct_matrix: np.ndarray
) -> np.ndarray:
    """Invert a block transform, rounding to 16-bit samples."""
    coefficients = np.asarray(transformed, dtype=np.float64)
    length = coefficients.size
    matrix = np.asarray(dct_matrix, dtype=np.float64)
    if matrix.shape[0] < length or matrix.shape[1] < length:
        raise ValueError("DCT matrix is smaller than the block")
    sums = coefficients @ matrix[:length, :length]
    rounded = _round_half_away(sums)
    return np.clip(rounded, _INT16_MIN, _INT16_MAX).astype(np.int16)