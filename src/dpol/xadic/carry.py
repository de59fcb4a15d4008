"""
X-adic Carry: slice shifting and carry normalization.

  - shift(A, s, p): multiply by X^s by moving slice t to slice t+s,
    truncated to p slices (a fixed-width left shift).
  - normalize(A, X, p): one ascending sweep that brings every digit into
    [0, X) and pushes floor(v / X) into the next slice.

Both treat the encoding as arithmetic mod X^p: whatever would land past
slice p-1 is dropped. normalize(strict=True) turns a dropped carry into
PrecisionOverflowError for callers that need the exact integer.

Author: Carmen Esteban
"""

import numpy as np

from dpol.errors import PrecisionOverflowError
from dpol.xadic import fast as _fast
from dpol.xadic.codec import check_radix, slice_width

# Radices at or above this cannot be carried in int64
_INT64_RADIX_LIMIT = 1 << 31


def shift(A_xadic, swift, p):
    """
    Shift an X-adic matrix up by `swift` slices.

    Parameters
    ----------
    A_xadic : numpy.ndarray
        n x (m * p) matrix, int64 or object.
    swift : int
        Number of slices to shift (the power of X).
    p : int
        Number of slices.

    Returns
    -------
    numpy.ndarray
        New matrix of the same shape and dtype; slices below `swift` are 0.
    """
    if swift < 0:
        raise ValueError(f"Shift amount must be >= 0, got {swift}")
    m = slice_width(A_xadic, p)

    out = np.zeros_like(A_xadic)
    if swift < p:
        out[:, swift * m:] = A_xadic[:, :(p - swift) * m]
    return out


def normalize(A_xadic, X, p, strict=False):
    """
    Propagate carries so every digit lies in [0, X).

    Dirty digits may be negative or well above X; floor division carries
    both kinds correctly, and since the sweep is ascending each slice has
    already absorbed its incoming carry when it is processed. One pass
    suffices.

    Parameters
    ----------
    A_xadic : numpy.ndarray
        n x (m * p) integer matrix.
    X : int
        Radix.
    p : int
        Number of slices.
    strict : bool
        Raise PrecisionOverflowError instead of dropping a carry out of
        the last slice.

    Returns
    -------
    numpy.ndarray
        Clean copy of A_xadic. int64 is kept while X < 2^31; every other
        dtype (and int64 with a larger radix) comes back as object.
    """
    check_radix(X, p)
    m = slice_width(A_xadic, p)
    out = A_xadic.copy()
    # Other fixed widths would wrap while carrying
    if out.dtype != object and (out.dtype != np.int64 or X >= _INT64_RADIX_LIMIT):
        out = out.astype(object)

    if out.dtype == np.int64:
        overflow = _fast.carry_sweep_int64(out, np.int64(X), m, p)
    else:
        overflow = False
        for t in range(p):
            block = out[:, t * m:(t + 1) * m]
            q = block // X
            out[:, t * m:(t + 1) * m] = block - q * X
            if t < p - 1:
                out[:, (t + 1) * m:(t + 2) * m] += q
            elif np.count_nonzero(q):
                overflow = True

    if strict and overflow:
        raise PrecisionOverflowError(
            f"Carry out of slice {p - 1}: value does not fit in {p} base-{X} digits")
    return out
