"""
DPOL Lift: Double Plus One Lifting of an integer matrix inverse.

Starting from A0 = A^-1 mod X the builder produces tables R[i], M[i] with

    A @ A0          = I - X R[0]
    Rbar            = R[i] @ R[i]
    M[i]            = A0 @ Rbar mod X
    X R[i+1]        = Rbar - A @ M[i]

and the nested product

    C(0)   = A0
    C(i+1) = C(i) (I + R[i] X^(2^(i+1)-1)) + M[i] X^(2^(i+2)-2)

satisfies A C(i) = I - X^(2^(i+1)-1) R[i], i.e. C(k) = A^-1 mod X^(2^(k+1)-1).
Precision doubles plus one per level while every stored table keeps
entries of the size of A itself: the sparse inverse expansion.

Author: Carmen Esteban
"""

import sys
import time
from dataclasses import dataclass

from dpol.apply import apply_expansion
from dpol.errors import DimensionMismatchError
from dpol.levels import precision_for_level
from dpol.matrix import as_integer_matrix, exact_quotient, identity
from dpol.modular import inverse_mod
from dpol.xadic import encode, decode


@dataclass(eq=False, frozen=True)
class SparseInverseExpansion:
    """A^-1 mod X^(2^(k+1)-1), stored as (A0, R[0..k-1], M[0..k-1]).

    Fields
    ------
    A : numpy.ndarray (object)
        The n x n matrix being inverted.
    X : int
        Prime modulus, the radix of the X-adic encoding.
    k : int
        Number of lift levels.
    A0 : numpy.ndarray (object)
        A^-1 mod X.
    R, M : tuple of numpy.ndarray (object)
        Lift tables, k entries each.
    residual : numpy.ndarray (object)
        R[k], the residual after the last level. Not needed to apply the
        expansion; it seeds extend_expansion.
    """
    A: object
    X: int
    k: int
    A0: object
    R: tuple
    M: tuple
    residual: object

    @property
    def n(self):
        return self.A.shape[0]

    @property
    def precision(self):
        return precision_for_level(self.k)

    def apply(self, B_xadic, p=None, **kwargs):
        """Shortcut for apply_expansion(self, B_xadic, p)."""
        if p is None:
            p = self.precision
        return apply_expansion(self, B_xadic, p, **kwargs)

    def extended(self, k, verbose=False):
        """Same expansion lifted to level k (see extend_expansion)."""
        return extend_expansion(self, k, verbose=verbose)

    def inverse(self):
        """Materialize A^-1 mod X^precision as an n x n matrix in [0, X^precision)."""
        p = self.precision
        return decode(self.apply(encode(identity(self.n), self.X, p), p), self.X, p)

    def __repr__(self):
        return (f"SparseInverseExpansion(n={self.n}, X={self.X}, k={self.k}, "
                f"precision=X^{self.precision})")


def _lift_level(A, A0, X, R_i):
    """One doubling step: returns (M[i], R[i+1])."""
    Rbar = R_i @ R_i
    M_i = (A0 @ Rbar) % X
    R_next = exact_quotient(Rbar - A @ M_i, X)
    return M_i, R_next


def build_expansion(A, X, k, verbose=False):
    """
    Build the sparse inverse expansion of A to level k.

    Parameters
    ----------
    A : array-like
        Square integer matrix with det(A) != 0 mod X.
    X : int
        Prime modulus.
    k : int
        Number of lift levels (k >= 0). Precision reached: 2^(k+1) - 1 digits.
    verbose : bool
        Print per-level timing.

    Returns
    -------
    SparseInverseExpansion

    Raises
    ------
    InvalidModulusError
        From the modular inverse (X not prime, A singular mod X).
    InvariantViolationError
        If a lift quotient is not exact.
    """
    if k < 0:
        raise ValueError(f"Lift level k must be >= 0, got {k}")
    A = as_integer_matrix(A)
    n, m = A.shape
    if n != m:
        raise DimensionMismatchError(f"A must be square, got {A.shape}")

    t0 = time.time()
    A0 = inverse_mod(A, X)
    R0 = exact_quotient(identity(n) - A @ A0, X)
    if verbose:
        print(f"  [DPOL] A0 = A^-1 mod {X} ({n} x {n}) [{time.time() - t0:.2f}s]")
        sys.stdout.flush()

    base = SparseInverseExpansion(A=A, X=X, k=0, A0=A0, R=(), M=(), residual=R0)
    return extend_expansion(base, k, verbose=verbose)


def extend_expansion(expansion, k, verbose=False):
    """
    Continue the lift of an existing expansion up to level k.

    Existing levels are reused as is; only levels expansion.k .. k-1 are
    computed, starting from the stored residual.

    Returns
    -------
    SparseInverseExpansion
        A new expansion (the input is left untouched). Returned unchanged
        if k <= expansion.k.
    """
    if k <= expansion.k:
        return expansion

    A, A0, X = expansion.A, expansion.A0, expansion.X
    R = list(expansion.R)
    M = list(expansion.M)
    R_i = expansion.residual

    for i in range(expansion.k, k):
        t_level = time.time()
        M_i, R_next = _lift_level(A, A0, X, R_i)
        R.append(R_i)
        M.append(M_i)
        R_i = R_next
        if verbose:
            print(f"  [DPOL] level {i}: precision X^{precision_for_level(i + 1)} "
                  f"[{time.time() - t_level:.2f}s]")
            sys.stdout.flush()

    return SparseInverseExpansion(
        A=A, X=X, k=k, A0=A0, R=tuple(R), M=tuple(M), residual=R_i,
    )
