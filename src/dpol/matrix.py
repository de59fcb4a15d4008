"""
DPOL Matrix: exact integer matrix primitives.

All matrices handled by the engine are 2-D numpy arrays with dtype=object
holding Python ints, so every product and sum is exact regardless of size.
numpy supplies the dense kernels (matmul, slicing, elementwise ufuncs);
this module adds the pieces numpy does not have:
  - Coercion of lists / int or float arrays / scipy.sparse into that form
  - Exact entrywise quotient with remainder checking
  - Fraction-free (Bareiss) determinant
  - Hadamard/Cramer bound on the entries of A^-1 B

Author: Carmen Esteban
"""

import math

import numpy as np
from scipy import sparse

from dpol.errors import DimensionMismatchError, InvariantViolationError


def as_integer_matrix(A, name="A"):
    """
    Coerce A to a 2-D object array of Python ints.

    Parameters
    ----------
    A : array-like or scipy.sparse matrix
        Nested lists, numpy array (integer, integral float or object)
        or any scipy sparse matrix.
    name : str
        Used in error messages.

    Returns
    -------
    numpy.ndarray
        Fresh (n, m) array with dtype=object.
    """
    if sparse.issparse(A):
        A = A.toarray()
    arr = np.asarray(A)
    if arr.ndim != 2:
        raise DimensionMismatchError(
            f"{name} must be 2-D, got {arr.ndim}-D with shape {arr.shape}")

    values = []
    for v in arr.flat:
        iv = int(v)
        if iv != v:
            raise ValueError(f"{name} has a non-integral entry: {v!r}")
        values.append(iv)

    out = np.empty(arr.shape, dtype=object)
    out.flat[:] = values
    return out


def zeros(n, m):
    """Object-dtype zero matrix."""
    out = np.empty((n, m), dtype=object)
    out.fill(0)
    return out


def identity(n):
    out = zeros(n, n)
    for i in range(n):
        out[i, i] = 1
    return out


def exact_quotient(N, X):
    """
    Entrywise N / X, which must divide exactly.

    Raises
    ------
    InvariantViolationError
        If any entry of N is not a multiple of X.
    """
    Q = N // X
    remainder = N - Q * X
    bad = np.count_nonzero(remainder)
    if bad:
        raise InvariantViolationError(
            f"Quotient by X={X} is not exact ({bad} entries with nonzero remainder)")
    return Q


def max_abs(A):
    """Largest absolute entry as a Python int (0 for an empty matrix)."""
    return max((abs(int(v)) for v in A.flat), default=0)


def bareiss_determinant(A):
    """
    Exact determinant by fraction-free Gaussian elimination.

    Every intermediate division is exact, so entries stay bounded by the
    size of the minors instead of blowing up like rational elimination.
    """
    n, m = A.shape
    if n != m:
        raise DimensionMismatchError(f"Determinant needs a square matrix, got {A.shape}")
    if n == 0:
        return 1

    M = [[int(v) for v in row] for row in A]
    sign = 1
    prev = 1
    for i in range(n - 1):
        if M[i][i] == 0:
            pivot_row = None
            for r in range(i + 1, n):
                if M[r][i] != 0:
                    pivot_row = r
                    break
            if pivot_row is None:
                return 0
            M[i], M[pivot_row] = M[pivot_row], M[i]
            sign = -sign

        pivot = M[i][i]
        for r in range(i + 1, n):
            row_r = M[r]
            lead = row_r[i]
            for c in range(i + 1, n):
                row_r[c] = (pivot * row_r[c] - lead * M[i][c]) // prev
            row_r[i] = 0
        prev = pivot

    return sign * M[n - 1][n - 1]


def solution_bound(A, B, det=None):
    """
    Upper bound on |x_ij| for the solution of A x = B.

    Cramer: x_ij = det(A_j) / det(A), where A_j is A with column j replaced
    by column i of B. Row r of A_j has squared norm at most
    ||A_r||^2 + B_ri^2, so Hadamard bounds |det(A_j)|.

    Parameters
    ----------
    A : numpy.ndarray (object)
        Nonsingular n x n matrix.
    B : numpy.ndarray (object)
        n x m right-hand side.
    det : int, optional
        det(A) if already known.

    Returns
    -------
    int
        Bound b with |x_ij| <= b for every entry.
    """
    if det is None:
        det = bareiss_determinant(A)
    row_sq = [sum(int(v) * int(v) for v in row) for row in A]

    worst = 0
    for col in range(B.shape[1]):
        prod = 1
        for r, sq in enumerate(row_sq):
            b = int(B[r, col])
            prod *= sq + b * b
        worst = max(worst, prod)

    root = math.isqrt(worst)
    if root * root < worst:
        root += 1
    return root // abs(det) + 1
