"""
DPOL Errors: exception hierarchy for exact X-adic solving.

Every failure is fatal for the current computation: the algorithm is
deterministic, so nothing here is retried.

Author: Carmen Esteban
"""


class DPOLError(ArithmeticError):
    """Base class for all DPOL engine errors."""


class InvalidModulusError(DPOLError):
    """The modulus is not prime, or A is singular modulo X."""


class InvariantViolationError(DPOLError):
    """A lift quotient left a nonzero remainder."""


class DimensionMismatchError(DPOLError, ValueError):
    """Matrix shapes or slice counts are inconsistent."""


class PrecisionInsufficientError(DPOLError):
    """Too few X-adic digits for the requested computation."""


class PrecisionOverflowError(DPOLError):
    """A carry left the last slice during a strict normalization."""


class SingularMatrixError(DPOLError):
    """det(A) = 0; the system has no unique solution."""


class NonIntegralSolutionError(DPOLError):
    """The X-adic candidate does not satisfy A @ x == B over the integers."""
