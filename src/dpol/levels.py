"""
DPOL Levels: the relationship between lift level k and X-adic precision.

A level-k expansion is exact modulo X^p with p = 2^(k+1) - 1.

Author: Carmen Esteban
"""


def precision_for_level(k):
    """Number of X-adic digits reached by a level-k expansion."""
    return (1 << (k + 1)) - 1


def level_for_digits(digits):
    """Least k with 2^(k+1) - 1 >= digits."""
    k = 0
    while precision_for_level(k) < digits:
        k += 1
    return k
