"""Tests for the X-adic codec, shifter and carry normalizer."""
import numpy as np
import pytest

from dpol import DimensionMismatchError, PrecisionInsufficientError, PrecisionOverflowError
from dpol.matrix import as_integer_matrix
from dpol.xadic import encode, decode, digit_length, shift, normalize, fast


def _random_nonnegative(n, m, X, digits, seed):
    np.random.seed(seed)
    values = [int(np.random.randint(0, X)) for _ in range(n * m * digits)]
    out = np.empty((n, m), dtype=object)
    for idx in range(n * m):
        acc = 0
        for d in values[idx * digits:(idx + 1) * digits]:
            acc = acc * X + d
        out.flat[idx] = acc
    return out


# ============================================================
# Codec
# ============================================================

class TestCodec:

    def test_layout(self):
        """Slice t holds the X^t digit of every entry."""
        E = encode([[7, 130]], 5, 4)
        # 7 = 2 + 1*5, 130 = 0 + 1*5 + 0*25 + 1*125
        assert np.array_equal(E, [[2, 0, 1, 1, 0, 0, 0, 1]])

    def test_roundtrip(self):
        for seed, X in enumerate([2, 5, 10, 1009, 2 ** 31 - 1]):
            A = _random_nonnegative(3, 4, X, digits=6, seed=seed)
            p = max(digit_length(v, X) for v in A.flat)
            assert np.array_equal(decode(encode(A, X, p), X, p), A)
            assert np.array_equal(decode(encode(A, X, p + 3), X, p + 3), A)

    def test_digits_clean(self):
        A = _random_nonnegative(2, 2, 7, digits=4, seed=9)
        E = encode(A, 7, 4)
        assert all(0 <= v < 7 for v in E.flat)

    def test_truncation_drops_high_digits(self):
        A = as_integer_matrix([[5 ** 6 + 3, 5 ** 2 * 4 + 1]])
        assert np.array_equal(decode(encode(A, 5, 3), 5, 3), [[3, 101]])

    def test_strict_raises_on_truncation(self):
        with pytest.raises(PrecisionInsufficientError):
            encode([[5 ** 3]], 5, 3, strict=True)
        encode([[5 ** 3 - 1]], 5, 3, strict=True)

    def test_negative_entries(self):
        A = as_integer_matrix([[-1, -130], [0, 62]])
        E = encode(A, 5, 4)
        assert all(0 <= v < 5 for v in E.flat)
        assert np.array_equal(decode(E, 5, 4), A % 5 ** 4)
        assert np.array_equal(decode(E, 5, 4, signed=True), A)
        with pytest.raises(PrecisionInsufficientError):
            encode(A, 5, 4, strict=True)

    def test_decode_dirty(self):
        """Dirty digits decode to their positional value unchanged."""
        assert np.array_equal(decode(np.array([[7, 3]], dtype=object), 5, 2), [[22]])
        assert np.array_equal(decode(np.array([[-1, 1]], dtype=object), 5, 2), [[4]])

    def test_decode_int64(self):
        E = encode([[10 ** 12]], 1009, 5).astype(np.int64)
        assert decode(E, 1009, 5)[0, 0] == 10 ** 12

    def test_digit_length(self):
        assert digit_length(0, 10) == 1
        assert digit_length(9, 10) == 1
        assert digit_length(10, 10) == 2
        assert digit_length(-999, 10) == 3
        assert digit_length(2 ** 64, 2) == 65

    def test_bad_shape(self):
        with pytest.raises(DimensionMismatchError):
            decode(np.zeros((2, 5), dtype=object), 5, 2)

    def test_bad_radix(self):
        with pytest.raises(ValueError):
            encode([[1]], 1, 3)
        with pytest.raises(ValueError):
            encode([[1]], 5, 0)


# ============================================================
# Shift
# ============================================================

class TestShift:

    def test_multiplies_by_power(self):
        A = _random_nonnegative(3, 2, 7, digits=3, seed=4)
        p = 6
        for s in range(4):
            shifted = shift(encode(A, 7, p), s, p)
            assert np.array_equal(decode(shifted, 7, p), A * 7 ** s)

    def test_low_slices_zero(self):
        E = encode([[1, 2], [3, 4]], 5, 4)
        shifted = shift(E, 2, 4)
        assert not np.any(shifted[:, :4] != 0)
        assert np.array_equal(shifted[:, 4:], E[:, :4])

    def test_truncates_past_last_slice(self):
        A = as_integer_matrix([[5 ** 3 - 1]])  # digits 4,4,4
        shifted = shift(encode(A, 5, 3), 2, 3)
        assert np.array_equal(decode(shifted, 5, 3), (A * 25) % 125)

    def test_shift_beyond_precision_is_zero(self):
        E = encode([[123, 45]], 5, 3)
        for s in (3, 4, 10):
            assert not np.any(shift(E, s, 3) != 0)

    def test_negative_shift_rejected(self):
        with pytest.raises(ValueError):
            shift(encode([[1]], 5, 3), -1, 3)

    def test_preserves_dtype_and_input(self):
        E = encode([[17, 3]], 5, 3).astype(np.int64)
        before = E.copy()
        out = shift(E, 1, 3)
        assert out.dtype == np.int64
        assert np.array_equal(E, before)


# ============================================================
# Normalize
# ============================================================

class TestNormalize:

    def test_carry_chain(self):
        dirty = np.array([[12, 7, 0]], dtype=object)
        assert np.array_equal(normalize(dirty, 5, 3), [[2, 4, 1]])

    def test_multi_unit_carry(self):
        dirty = np.array([[5 ** 4 - 1, 0, 0, 0, 0]], dtype=object)
        assert np.array_equal(normalize(dirty, 5, 5), [[4, 4, 4, 4, 0]])

    def test_negative_digits(self):
        dirty = np.array([[-1, 0, 1]], dtype=object)
        assert np.array_equal(normalize(dirty, 5, 3), [[4, 4, 0]])

    def test_preserves_value(self):
        np.random.seed(0)
        for X in (3, 10, 257):
            dirty = as_integer_matrix(np.random.randint(-5000, 5000, size=(4, 3 * 6)))
            clean = normalize(dirty, X, 6)
            assert all(0 <= v < X for v in clean.flat)
            assert np.array_equal(decode(clean, X, 6), decode(dirty, X, 6) % X ** 6)

    def test_idempotent(self):
        np.random.seed(1)
        dirty = as_integer_matrix(np.random.randint(-10 ** 6, 10 ** 6, size=(3, 2 * 5)))
        once = normalize(dirty, 11, 5)
        assert np.array_equal(normalize(once, 11, 5), once)

    def test_overflow_dropped(self):
        dirty = np.array([[0, 0, 5]], dtype=object)
        assert np.array_equal(normalize(dirty, 5, 3), [[0, 0, 0]])

    def test_strict_overflow_raises(self):
        with pytest.raises(PrecisionOverflowError):
            normalize(np.array([[0, 0, 5]], dtype=object), 5, 3, strict=True)
        with pytest.raises(PrecisionOverflowError):
            normalize(np.array([[-1, 0, 0]], dtype=object), 5, 3, strict=True)
        normalize(np.array([[24, 4, 3]], dtype=object), 5, 3, strict=True)

    def test_int64_matches_object(self):
        np.random.seed(2)
        dirty = np.random.randint(-10 ** 9, 10 ** 9, size=(5, 4 * 7)).astype(np.int64)
        fast_result = normalize(dirty, 13, 7)
        slow_result = normalize(dirty.astype(object), 13, 7)
        assert fast_result.dtype == np.int64
        assert np.array_equal(fast_result, slow_result)

    def test_int64_strict(self):
        dirty = np.array([[0, 0, 5]], dtype=np.int64)
        with pytest.raises(PrecisionOverflowError):
            normalize(dirty, 5, 3, strict=True)

    def test_large_radix_leaves_int64(self):
        X = 2 ** 40 + 15
        dirty = np.array([[X + 1, 0]], dtype=np.int64)
        out = normalize(dirty, X, 2)
        assert out.dtype == object
        assert np.array_equal(out, [[1, 1]])

    def test_narrow_dtype_does_not_wrap(self):
        dirty = np.array([[2 ** 31 - 1, 2 ** 31 - 1]], dtype=np.int32)
        out = normalize(dirty, 5, 2)
        assert out.dtype == object
        assert decode(out, 5, 2)[0, 0] == (2 ** 31 - 1) * 6 % 25

    def test_input_untouched(self):
        dirty = np.array([[12, 7, 0]], dtype=np.int64)
        normalize(dirty, 5, 3)
        assert np.array_equal(dirty, [[12, 7, 0]])


class TestFastKernel:

    def test_carry_sweep_in_place(self):
        a = np.array([[12, 7, 0], [0, 0, 5]], dtype=np.int64)
        overflow = fast.carry_sweep_int64(a, np.int64(5), 1, 3)
        assert overflow
        assert np.array_equal(a, [[2, 4, 1], [0, 0, 0]])

    def test_warmup(self):
        fast.warmup()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
