import math

import numpy as np
import pytest

from ehco import dct


def test_matrix_is_orthonormal():
    matrix = dct.precompute_dct_matrix(16)
    assert matrix.shape == (16, 16)
    assert np.allclose(matrix @ matrix.T, np.eye(16))


def test_first_row_is_constant():
    n = 8
    matrix = dct.precompute_dct_matrix(n)
    assert np.allclose(matrix[0], math.sqrt(1.0 / n))


def test_invalid_size():
    with pytest.raises(ValueError):
        dct.precompute_dct_matrix(0)


def test_round_trip_full_block():
    matrix = dct.precompute_dct_matrix(32)
    rng = np.random.default_rng(1)
    signal = rng.integers(-30000, 30000, size=32).astype(np.int16)
    transformed = dct.apply(signal, 0, 32, matrix)
    restored = dct.inverse(transformed, matrix)
    assert restored.dtype == np.int16
    assert np.array_equal(restored, signal)


def test_apply_with_offset_and_short_block():
    matrix = dct.precompute_dct_matrix(16)
    signal = np.arange(-20, 20, dtype=np.int16)
    transformed = dct.apply(signal, 5, 10, matrix)
    assert transformed.shape == (10,)
    expected = matrix[:10, :10] @ signal[5:15].astype(float)
    assert np.allclose(transformed, expected)


def test_constant_signal_has_only_dc():
    matrix = dct.precompute_dct_matrix(8)
    transformed = dct.apply([100] * 8, 0, 8, matrix)
    assert transformed[0] == pytest.approx(100 * math.sqrt(8))
    assert np.allclose(transformed[1:], 0.0)


def test_apply_rejects_short_signal():
    matrix = dct.precompute_dct_matrix(8)
    with pytest.raises(ValueError):
        dct.apply([1, 2, 3], 0, 8, matrix)


def test_inverse_rounds_half_away_from_zero():
    restored = dct.inverse([0.5, -0.5, 2.5], np.eye(3))
    assert restored.tolist() == [1, -1, 3]


def test_inverse_clips_to_int16():
    restored = dct.inverse([1e9, -1e9], np.eye(2))
    assert restored.tolist() == [32767, -32768]