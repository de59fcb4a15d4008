"""
DPOL Modular: inverse of an integer matrix over GF(X).

The lift starts from A0 = A^-1 mod X. X is required to be prime so the
inversion is plain Gauss-Jordan over a field; a composite X is rejected
even if it happens to be coprime with det(A).

Author: Carmen Esteban
"""

import numpy as np

from dpol.errors import DimensionMismatchError, InvalidModulusError
from dpol.matrix import identity


_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)

# Deterministic Miller-Rabin bases for n < 2^64
_MR_BASES = (2, 325, 9375, 28178, 450775, 9780504, 1795265022)


def is_probable_prime(n):
    """
    Miller-Rabin test, deterministic below 2^64.

    Larger n also run the fixed small-prime bases, which makes a false
    positive astronomically unlikely.
    """
    if n < 2:
        return False
    for q in _SMALL_PRIMES:
        if n == q:
            return True
        if n % q == 0:
            return False

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    bases = _MR_BASES if n < (1 << 64) else _MR_BASES + _SMALL_PRIMES
    for a in bases:
        a %= n
        if a == 0:
            continue
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def next_prime(start):
    """Smallest prime >= start."""
    n = max(int(start), 2)
    if n > 2 and n % 2 == 0:
        n += 1
    while not is_probable_prime(n):
        n += 1 if n == 2 else 2
    return n


def choose_modulus(det, start):
    """Smallest prime >= start that does not divide det."""
    if det == 0:
        raise InvalidModulusError("No modulus works for a singular matrix")
    X = next_prime(start)
    while det % X == 0:
        X = next_prime(X + 1)
    return X


def inverse_mod(A, X):
    """
    Compute A^-1 mod X by Gauss-Jordan elimination over GF(X).

    Parameters
    ----------
    A : numpy.ndarray (object)
        Square integer matrix.
    X : int
        Prime modulus.

    Returns
    -------
    numpy.ndarray (object)
        A0 with entries in [0, X) and A @ A0 = I (mod X).

    Raises
    ------
    InvalidModulusError
        If X is not prime or A is singular modulo X.
    """
    n, m = A.shape
    if n != m:
        raise DimensionMismatchError(f"Modular inverse needs a square matrix, got {A.shape}")
    if not is_probable_prime(X):
        raise InvalidModulusError(f"Modulus X={X} is not prime")

    AI = np.concatenate((A % X, identity(n)), axis=1)

    for i in range(n):
        pivot_row = None
        for r in range(i, n):
            if AI[r, i] % X != 0:
                pivot_row = r
                break
        if pivot_row is None:
            raise InvalidModulusError(
                f"Matrix is singular modulo X={X} (no pivot in column {i})")
        if pivot_row != i:
            AI[[i, pivot_row]] = AI[[pivot_row, i]]

        pivot_inv = pow(int(AI[i, i]), -1, X)
        AI[i, :] = (AI[i, :] * pivot_inv) % X

        for r in range(n):
            if r == i:
                continue
            factor = AI[r, i]
            if factor != 0:
                AI[r, :] = (AI[r, :] - factor * AI[i, :]) % X

    return AI[:, n:].copy()
