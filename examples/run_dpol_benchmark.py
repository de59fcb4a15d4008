"""
DPOL benchmark — exact solve of random integer systems
========================================================

Builds random nonsingular integer systems of growing size, solves them
exactly with Double Plus One Lifting and checks A x = B.

Usage:
  pip install -e .
  python examples/run_dpol_benchmark.py [max_n]

Author: Carmen Esteban
"""

import json
import os
import sys
import time

import numpy as np

import dpol
from dpol.matrix import as_integer_matrix, bareiss_determinant
from dpol.xadic import fast

# ── Config ──
RESULTS_DIR = "results"
SIZES = [4, 8, 16, 32, 64]
ENTRY_SCALE = 100
RHS_COLUMNS = 2
SEED = 12345

max_n = int(sys.argv[1]) if len(sys.argv) > 1 else SIZES[-1]
os.makedirs(RESULTS_DIR, exist_ok=True)
np.random.seed(SEED)

# ── JIT warmup ──
t_jit = time.time()
fast.warmup()
print(f"Numba warmup: {time.time() - t_jit:.2f}s")

results = []
for n in [s for s in SIZES if s <= max_n]:
    while True:
        A = as_integer_matrix(np.random.randint(-ENTRY_SCALE, ENTRY_SCALE + 1, size=(n, n)))
        if bareiss_determinant(A) != 0:
            break
    x_true = as_integer_matrix(np.random.randint(-10**6, 10**6, size=(n, RHS_COLUMNS)))
    B = A @ x_true

    print(f"\n{'='*70}")
    print(f"  n = {n}, rhs = {RHS_COLUMNS}")
    print(f"{'='*70}")

    report = dpol.plan_solve(A, B)
    t0 = time.time()
    x = dpol.solve(A, B, X=report["modulus"], verbose=True)
    elapsed = time.time() - t0

    ok = bool(np.array_equal(x, x_true))
    results.append({
        "n": n,
        "modulus": report["modulus"],
        "k": report["k"],
        "precision": report["precision"],
        "det_digits": len(str(abs(report["det"]))),
        "time": elapsed,
        "correct": ok,
    })
    print(f"  k={report['k']}, p={report['precision']}, "
          f"time={elapsed:.2f}s, {'OK' if ok else 'MISMATCH'}")
    sys.stdout.flush()

# ── Save results ──
results_file = os.path.join(RESULTS_DIR, "dpol_benchmark.json")
with open(results_file, 'w') as f:
    json.dump(results, f, indent=2)
print(f"\nResults saved to {results_file}")
