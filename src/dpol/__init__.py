"""
DPOL Engine - Double Plus One Lifting
=====================================

Exact solution of integer linear systems A x = B by X-adic lifting.
No floating point, no rational coefficient blow-up.

Quick start:
    import dpol

    # One-shot exact solve
    x = dpol.solve(A, B)

    # Many right-hand sides, one expansion
    solver = dpol.ExactSolver(A)
    x1 = solver.solve(b1)
    x2 = solver.solve(b2)

    # The pieces
    from dpol.xadic import encode, decode
    exp = dpol.build_expansion(A, X=1048583, k=5)   # A^-1 mod X^63
    x_xadic = dpol.apply_expansion(exp, encode(B, exp.X, 63), 63)
    x = decode(x_xadic, exp.X, 63, signed=True)

Author: Carmen Esteban
License: MIT
"""

__version__ = "0.1.0"
__author__ = "Carmen Esteban"

from dpol.errors import (
    DPOLError, InvalidModulusError, InvariantViolationError,
    DimensionMismatchError, PrecisionInsufficientError,
    PrecisionOverflowError, SingularMatrixError, NonIntegralSolutionError,
)
from dpol.lift import SparseInverseExpansion, build_expansion, extend_expansion
from dpol.apply import apply_expansion
from dpol.solver import ExactSolver, plan_solve, solve
from dpol import xadic

__all__ = [
    "solve", "plan_solve", "ExactSolver",
    "build_expansion", "extend_expansion", "apply_expansion",
    "SparseInverseExpansion", "xadic",
    "DPOLError", "InvalidModulusError", "InvariantViolationError",
    "DimensionMismatchError", "PrecisionInsufficientError",
    "PrecisionOverflowError", "SingularMatrixError", "NonIntegralSolutionError",
]
