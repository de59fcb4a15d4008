"""
DPOL Apply: evaluate a sparse inverse expansion on an X-adic right-hand side.

Unrolling C(k) B from the outermost level inwards gives

    C(i+1) B = C(i) (B + X^(2^(i+1)-1) R[i] B) + X^(2^(i+2)-2) M[i] B

so a single accumulator E and a running factor F suffice:

    E = 0, F = B
    for i = k-1 .. 0:
        E = normalize(E + shift(M[i] F, 2^(i+2)-2))
        F = normalize(F + shift(R[i] F, 2^(i+1)-1))
    E = normalize(E + A0 F)

Every product multiplies a table by a normalized digit matrix, so entries
stay near n * X * max(X, |R|) however long the represented integers get.

Auto-routes the arithmetic:
  - int64 when that bound fits a machine word (numpy matmul + Numba sweep)
  - Python ints (dtype=object) otherwise

Author: Carmen Esteban
"""

import sys
import time

import numpy as np

from dpol.errors import DimensionMismatchError, PrecisionInsufficientError
from dpol.levels import level_for_digits, precision_for_level
from dpol.matrix import max_abs
from dpol.xadic import normalize, shift
from dpol.xadic.codec import slice_width

# Intermediates must stay below this in the int64 path
WORD_LIMIT = 1 << 62

BACKENDS = ("auto", "int64", "object")


def working_bound(expansion):
    """Largest magnitude any intermediate can reach while applying."""
    X = expansion.X
    table_max = max([X] + [max_abs(R_i) for R_i in expansion.R])
    return 2 * expansion.n * table_max * X + 2 * X


def select_backend(expansion, backend="auto"):
    """
    Pick the dtype used for the digit arithmetic.

    Returns
    -------
    numpy dtype
        np.int64 or object.
    """
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend {backend!r}, expected one of {BACKENDS}")
    if backend == "object":
        return object

    fits = working_bound(expansion) < WORD_LIMIT
    if backend == "int64" and not fits:
        raise ValueError(
            f"int64 backend unsafe for n={expansion.n}, X={expansion.X}: "
            f"intermediates may reach {working_bound(expansion)}")
    return np.int64 if fits else object


def apply_expansion(expansion, B_xadic, p, backend="auto", verbose=False):
    """
    Compute the X-adic encoding of A^-1 B mod X^p.

    A level-k expansion is only exact to 2^(k+1) - 1 digits. A larger p
    lifts the expansion first (to the least level covering p), so every
    returned digit is correct; the input expansion is left untouched.

    Parameters
    ----------
    expansion : SparseInverseExpansion
        Output of build_expansion.
    B_xadic : numpy.ndarray
        n x (m * p) X-adic matrix, clean or dirty.
    p : int
        Number of slices; at least 2^(k+1) - 1.
    backend : str
        'auto', 'int64' or 'object'.
    verbose : bool
        Print backend and timing.

    Returns
    -------
    numpy.ndarray (object)
        Clean n x (m * p) X-adic matrix of A^-1 B mod X^p.

    Raises
    ------
    PrecisionInsufficientError
        If p < 2^(k+1) - 1.
    DimensionMismatchError
        If B_xadic does not have n rows or p does not split its columns.
    """
    k, X = expansion.k, expansion.X
    required = precision_for_level(k)
    if p < required:
        raise PrecisionInsufficientError(
            f"p={p} slices cannot hold a level-{k} expansion (needs {required})")
    if p > required:
        expansion = expansion.extended(level_for_digits(p), verbose=verbose)
        k = expansion.k
    if B_xadic.shape[0] != expansion.n:
        raise DimensionMismatchError(
            f"B has {B_xadic.shape[0]} rows, expansion is {expansion.n} x {expansion.n}")
    m = slice_width(B_xadic, p)

    dtype = select_backend(expansion, backend)
    if verbose:
        name = "int64" if dtype is np.int64 else "object"
        print(f"  [DPOL] Apply k={k}, p={p}, {expansion.n} x {m}, backend={name}")
        sys.stdout.flush()

    t0 = time.time()
    A0 = expansion.A0.astype(dtype)
    R = [R_i.astype(dtype) for R_i in expansion.R]
    M = [M_i.astype(dtype) for M_i in expansion.M]

    # A dirty input may carry digits outside the word range; clean it first.
    factor = normalize(B_xadic.astype(object), X, p).astype(dtype)
    acc = np.zeros(factor.shape, dtype=dtype)

    for i in range(k - 1, -1, -1):
        acc = normalize(acc + shift(M[i] @ factor, (1 << (i + 2)) - 2, p), X, p)
        factor = normalize(factor + shift(R[i] @ factor, (1 << (i + 1)) - 1, p), X, p)

    acc = normalize(acc + A0 @ factor, X, p)

    if verbose:
        print(f"  [DPOL] Apply done [{time.time() - t0:.2f}s]")
        sys.stdout.flush()
    return acc.astype(object)
