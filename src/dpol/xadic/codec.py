"""
X-adic Codec: digit-sliced positional encoding of integer matrices.

An n x m matrix is stored as an n x (m * p) matrix. Slice t, columns
[t*m, (t+1)*m), holds the coefficient of X^t of every entry:

    A = sum_{t=0}^{p-1} slice_t * X^t

Negative entries are encoded as their residue mod X^p (the truncated
X-adic expansion, whose high digits are all X-1), and decode(signed=True)
maps residues back to the symmetric range.

Author: Carmen Esteban
"""

import numpy as np

from dpol.errors import DimensionMismatchError, PrecisionInsufficientError
from dpol.matrix import as_integer_matrix, zeros


def check_radix(X, p):
    if X < 2:
        raise ValueError(f"Radix X must be >= 2, got {X}")
    if p < 1:
        raise ValueError(f"Slice count p must be >= 1, got {p}")


def slice_width(A_xadic, p):
    """Logical column count m of an n x (m * p) X-adic matrix."""
    cols = A_xadic.shape[1]
    if cols % p != 0:
        raise DimensionMismatchError(
            f"{cols} columns cannot be split into {p} slices")
    return cols // p


def digit_length(value, X):
    """Number of base-X digits of |value| (0 has one digit)."""
    value = abs(int(value))
    count = 1
    while value >= X:
        value //= X
        count += 1
    return count


def encode(A, X, p, strict=False):
    """
    Encode an integer matrix into p base-X digit slices.

    Parameters
    ----------
    A : array-like
        n x m integer matrix.
    X : int
        Radix.
    p : int
        Number of digits kept per entry.
    strict : bool
        Raise instead of dropping digits beyond p.

    Returns
    -------
    numpy.ndarray (object)
        Clean n x (m * p) X-adic matrix.

    Raises
    ------
    PrecisionInsufficientError
        With strict=True, if an entry lies outside [0, X^p).
    """
    check_radix(X, p)
    work = as_integer_matrix(A)
    n, m = work.shape

    out = zeros(n, m * p)
    for t in range(p):
        q = work // X
        out[:, t * m:(t + 1) * m] = work - q * X
        work = q

    if strict:
        lost = np.count_nonzero(work)
        if lost:
            raise PrecisionInsufficientError(
                f"{lost} entries need more than p={p} base-{X} digits")
    return out


def decode(A_xadic, X, p, signed=False):
    """
    Collapse an X-adic matrix back to plain integers.

    Digits are not range-checked: a dirty (un-normalized) encoding decodes
    to the same value its clean form would, as long as nothing sits past
    slice p-1.

    Parameters
    ----------
    A_xadic : numpy.ndarray
        n x (m * p) matrix, int64 or object.
    X : int
        Radix.
    p : int
        Number of slices.
    signed : bool
        Reduce mod X^p and lift to (-X^p / 2, X^p / 2].

    Returns
    -------
    numpy.ndarray (object)
        n x m integer matrix.
    """
    check_radix(X, p)
    m = slice_width(A_xadic, p)
    digits = A_xadic.astype(object)

    acc = digits[:, (p - 1) * m:p * m].copy()
    for t in range(p - 2, -1, -1):
        acc = acc * X + digits[:, t * m:(t + 1) * m]

    if signed:
        modulus = X ** p
        acc = acc % modulus
        acc = np.where(acc > modulus // 2, acc - modulus, acc)
    return acc
