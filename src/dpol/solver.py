"""
DPOL Solver: exact solution of A x = B over the integers.

Pipeline:
  1. det(A) by Bareiss; det = 0 -> SingularMatrixError
  2. X = least prime >= DEFAULT_MODULUS_START not dividing det(A)
  3. k = least level whose precision 2^(k+1) - 1 covers the Cramer bound
  4. build_expansion(A, X, k), reused and extended across right-hand sides
  5. encode B, apply, decode to the symmetric range, verify A x == B

Usage:
    import dpol
    x = dpol.solve(A, B)

    solver = dpol.ExactSolver(A)
    x1 = solver.solve(b1)
    x2 = solver.solve(b2)   # reuses the expansion

Author: Carmen Esteban
"""

import sys
import time

import numpy as np

from dpol.apply import apply_expansion
from dpol.errors import (
    DimensionMismatchError, InvalidModulusError, NonIntegralSolutionError,
    PrecisionInsufficientError, SingularMatrixError,
)
from dpol.levels import level_for_digits, precision_for_level
from dpol.lift import build_expansion, extend_expansion
from dpol.matrix import as_integer_matrix, bareiss_determinant, solution_bound
from dpol.modular import choose_modulus, is_probable_prime
from dpol.xadic import decode, encode

# First candidate for the default modulus: large enough for few digits,
# small enough that digit products stay in int64.
DEFAULT_MODULUS_START = (1 << 20) + 1


def digits_needed(bound, X):
    """Least d with X^d > 2 * bound (room for the sign)."""
    d = 1
    power = X
    while power <= 2 * bound:
        power *= X
        d += 1
    return d


def _check_modulus(X, det):
    """Default X when None, else reject one the GF(X) inverse cannot use."""
    if X is None:
        return choose_modulus(det, DEFAULT_MODULUS_START)
    if X < 2:
        raise InvalidModulusError(f"Modulus must be >= 2, got {X}")
    if not is_probable_prime(X):
        raise InvalidModulusError(f"Modulus must be prime, got {X}")
    if det % X == 0:
        raise InvalidModulusError(f"X={X} divides det(A) = {det}")
    return X


def _as_rhs(B, n):
    """Coerce B to an n x m object matrix; returns (B, was_vector)."""
    was_vector = np.ndim(B) == 1
    if was_vector:
        B = np.asarray(B, dtype=object).reshape(-1, 1)
    B = as_integer_matrix(B, name="B")
    if B.shape[0] != n:
        raise DimensionMismatchError(
            f"B has {B.shape[0]} rows, A is {n} x {n}")
    return B, was_vector


def _plan(A, B, det, X, k):
    n = A.shape[0]
    bound = solution_bound(A, B, det=det)
    digits = digits_needed(bound, X)

    if k is None:
        k = level_for_digits(digits)
    elif k < 0:
        raise ValueError(f"Lift level k must be >= 0, got {k}")
    elif precision_for_level(k) < digits:
        raise PrecisionInsufficientError(
            f"k={k} gives {precision_for_level(k)} base-{X} digits, "
            f"the solution bound {bound} needs {digits}")

    return {
        "shape": (n, n),
        "rhs_columns": B.shape[1],
        "det": det,
        "modulus": X,
        "bound": bound,
        "digits": digits,
        "k": k,
        "precision": precision_for_level(k),
    }


def plan_solve(A, B, X=None, k=None):
    """
    Choose modulus and lift level for A x = B.

    Parameters
    ----------
    A : array-like or scipy.sparse matrix
        n x n integer matrix.
    B : array-like
        n x m (or length-n) integer right-hand side.
    X : int, optional
        Prime modulus. Default: least prime >= DEFAULT_MODULUS_START not
        dividing det(A).
    k : int, optional
        Lift level. Default: the least level covering the solution bound.

    Returns
    -------
    dict
        shape, rhs_columns, det, modulus, bound, digits, k, precision.
    """
    A = as_integer_matrix(A)
    n, m = A.shape
    if n != m:
        raise DimensionMismatchError(f"A must be square, got {A.shape}")
    B, _ = _as_rhs(B, n)

    det = bareiss_determinant(A)
    if det == 0:
        raise SingularMatrixError("det(A) = 0")
    X = _check_modulus(X, det)
    return _plan(A, B, det, X, k)


class ExactSolver:
    """
    Exact integer solver that keeps its lift expansion between calls.

    The expansion only depends on A and X; a right-hand side needing more
    digits than the current level extends it in place of a rebuild.

    Parameters
    ----------
    A : array-like or scipy.sparse matrix
        Nonsingular n x n integer matrix.
    X : int, optional
        Prime modulus not dividing det(A).
    backend : str
        'auto', 'int64' or 'object' (see apply_expansion).
    verbose : bool
        Print plan and timing.

    Examples
    --------
    >>> solver = ExactSolver([[2, 1], [1, 1]], X=5)
    >>> solver.solve([[1], [0]])
    array([[1],
           [-1]], dtype=object)
    """

    def __init__(self, A, X=None, backend="auto", verbose=False):
        self.A = as_integer_matrix(A)
        n, m = self.A.shape
        if n != m:
            raise DimensionMismatchError(f"A must be square, got {self.A.shape}")
        self.n = n
        self.backend = backend
        self.verbose = verbose

        self.det = bareiss_determinant(self.A)
        if self.det == 0:
            raise SingularMatrixError("det(A) = 0")
        self.X = _check_modulus(X, self.det)
        self.expansion = None

    def _ensure_level(self, k):
        if self.expansion is None:
            self.expansion = build_expansion(self.A, self.X, k, verbose=self.verbose)
        elif self.expansion.k < k:
            self.expansion = extend_expansion(self.expansion, k, verbose=self.verbose)
        return self.expansion

    def plan(self, B, k=None):
        B, _ = _as_rhs(B, self.n)
        return _plan(self.A, B, self.det, self.X, k)

    def solve(self, B, k=None):
        """
        Solve A x = B exactly.

        Parameters
        ----------
        B : array-like
            n x m or length-n integer right-hand side.
        k : int, optional
            Lift level; validated against the solution bound.

        Returns
        -------
        numpy.ndarray (object)
            Integer solution, same dimensionality as B.

        Raises
        ------
        NonIntegralSolutionError
            If A^-1 B is not an integer matrix.
        """
        B, was_vector = _as_rhs(B, self.n)
        report = _plan(self.A, B, self.det, self.X, k)
        if self.verbose:
            print(f"  [DPOL] {self.n} x {self.n}, {report['rhs_columns']} rhs, "
                  f"X={self.X}, bound={report['bound']}, digits={report['digits']}, "
                  f"k={report['k']}")
            sys.stdout.flush()

        t0 = time.time()
        expansion = self._ensure_level(report["k"])
        # An extended expansion may exceed the planned level; use its precision.
        p = expansion.precision

        B_xadic = encode(B, self.X, p)
        x_xadic = apply_expansion(expansion, B_xadic, p,
                                  backend=self.backend, verbose=self.verbose)
        x = decode(x_xadic, self.X, p, signed=True)

        bad = np.count_nonzero(self.A @ x - B)
        if bad:
            raise NonIntegralSolutionError(
                f"A^-1 B is not integral ({bad} residual entries nonzero)")

        if self.verbose:
            print(f"  [DPOL] Solved, verified A x = B [{time.time() - t0:.2f}s]")
            sys.stdout.flush()

        if was_vector:
            return x[:, 0]
        return x


def solve(A, B, X=None, k=None, backend="auto", verbose=False):
    """
    Solve A x = B exactly over the integers.

    Parameters
    ----------
    A : array-like or scipy.sparse matrix
        Nonsingular n x n integer matrix.
    B : array-like
        n x m or length-n integer right-hand side with A^-1 B integral.
    X : int, optional
        Prime modulus not dividing det(A).
    k : int, optional
        Lift level.
    backend : str
        'auto', 'int64' or 'object'.
    verbose : bool
        Print plan and timing.

    Returns
    -------
    numpy.ndarray (object)
        Solution x with Python int entries.
    """
    return ExactSolver(A, X=X, backend=backend, verbose=verbose).solve(B, k=k)
