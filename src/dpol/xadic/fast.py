"""
X-adic Fast: Numba JIT-compiled kernels for the machine-word path.

Once every slice is normalized, digits are below X and products of digit
slices with small tables fit in int64. The carry sweep is then a tight
triple loop that Numba compiles to native code.

Author: Carmen Esteban
"""

import numpy as np
from numba import njit


@njit(cache=True)
def carry_sweep_int64(a, X, m, p):
    """Normalize an int64 X-adic matrix in place.

    Parameters
    ----------
    a : 2D numpy array of int64
        Shape (n, m * p). Overwritten with digits in [0, X).
    X : int64
        Radix.
    m : int
        Logical column count (width of one slice).
    p : int
        Number of slices.

    Returns
    -------
    bool
        True if a nonzero carry left the last slice (and was dropped).
    """
    n = a.shape[0]
    overflow = False
    for t in range(p):
        base = t * m
        for i in range(n):
            for j in range(m):
                v = a[i, base + j]
                q = v // X
                a[i, base + j] = v - q * X
                if t < p - 1:
                    a[i, base + m + j] += q
                elif q != 0:
                    overflow = True
    return overflow


def warmup():
    """Trigger JIT compilation with a tiny dummy call."""
    dummy = np.zeros((1, 2), dtype=np.int64)
    carry_sweep_int64(dummy, np.int64(2), 1, 2)
