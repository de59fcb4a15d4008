"""
DPOL X-adic: digit-sliced matrices over radix X.

An n x m big-integer matrix becomes an n x (m * p) matrix of small digits,
slice t holding the coefficient of X^t. Arithmetic on the encoding only
ever multiplies digits, so intermediates stay small no matter how large
the represented integers are.

Example:
    from dpol.xadic import encode, decode, shift, normalize

    E = encode([[7, 130]], X=5, p=4)       # 1 x 8 digit matrix
    E = normalize(E + E, X=5, p=4)          # 2 * A, carried
    decode(shift(E, 1, p=4), X=5, p=4)      # 10 * A mod 5^4

Author: Carmen Esteban
"""

from dpol.xadic import fast
from dpol.xadic.codec import encode, decode, digit_length
from dpol.xadic.carry import shift, normalize

__all__ = [
    "encode", "decode", "digit_length", "shift", "normalize", "fast",
]
