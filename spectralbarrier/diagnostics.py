# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Diagnostic utilities for checking meshes and barrier derivatives."""

import math
from typing import Any, Dict, Optional

import torch

from spectralbarrier.barrier import Barrier
from spectralbarrier.mesh import Mesh


def _report(title, checks, results, verbose):
    if not verbose:
        return
    print("=" * 60)
    print(title)
    print("=" * 60)
    for label, key in checks:
        print(f"{label:<22}{'PASS' if results[key] else 'FAIL'}")
    if results["warnings"]:
        print("\nWarnings:")
        for w in results["warnings"]:
            print(f"  - {w}")
    if results["errors"]:
        print("\nErrors:")
        for e in results["errors"]:
            print(f"  - {e}")
    print("=" * 60)


def check_mesh(mesh: Mesh, *, verbose: bool = True) -> Dict[str, Any]:
    """Run consistency checks on a mesh.

    Checks:
    - weights are finite and non-negative
    - every level integrates constants exactly (weights sum to |domain|)
    - each level's nodes are a subset of the next level's nodes
    - basis sizes do not decrease with the level
    - the finest basis vanishes on the boundary in its ``u`` block

    Returns
    -------
    results : dict
        Diagnostic results.
    """
    results = {
        "weights_check": True,
        "nesting_check": True,
        "basis_check": True,
        "boundary_check": True,
        "warnings": [],
        "errors": [],
    }
    w = mesh.weights
    tol = 100 * torch.finfo(mesh.dtype).eps

    if not torch.isfinite(w).all() or (w < 0).any():
        results["errors"].append("weights must be finite and non-negative")
        results["weights_check"] = False
    area = 2.0 ** mesh.dim
    for level in range(mesh.n_levels):
        total = w[:, level].sum().item()
        if abs(total - area) > tol * area:
            results["errors"].append(
                f"level {level} weights sum to {total}, expected {area}")
            results["weights_check"] = False

    support = w != 0
    for level in range(mesh.n_levels - 1):
        if (support[:, level] & ~support[:, level + 1]).any():
            results["errors"].append(
                f"level {level} has nodes missing from level {level + 1}")
            results["nesting_check"] = False
        if support[:, level].sum() >= support[:, level + 1].sum():
            results["warnings"].append(
                f"level {level + 1} does not add nodes to level {level}")

    sizes = [R.shape[1] for R in mesh.bases]
    if any(a > b for a, b in zip(sizes, sizes[1:])):
        results["errors"].append(f"basis sizes decrease: {sizes}")
        results["basis_check"] = False

    p = mesh.n_nodes
    R = mesh.bases[-1]
    U = mesh.operators[0] @ R
    x = mesh.nodes
    on_boundary = (x.abs() == 1).any(dim=1)
    if U[on_boundary].abs().max().item() > tol * max(U.abs().max().item(), 1.0):
        results["errors"].append("finest basis does not vanish on the boundary")
        results["boundary_check"] = False
    if R.shape[0] != 2 * p:
        results["errors"].append(
            f"basis has {R.shape[0]} rows, expected {2 * p}")
        results["basis_check"] = False

    _report(
        "Mesh Diagnostics",
        [("Weights check:", "weights_check"),
         ("Nesting check:", "nesting_check"),
         ("Basis check:", "basis_check"),
         ("Boundary check:", "boundary_check")],
        results, verbose,
    )
    return results


def check_barrier(
    barrier: Barrier,
    c: torch.Tensor,
    z: torch.Tensor,
    *,
    level: int = -1,
    h: Optional[float] = None,
    rtol: float = 1e-5,
    verbose: bool = True,
) -> Dict[str, Any]:
    """Compare barrier derivatives against central finite differences.

    Parameters
    ----------
    barrier : Barrier
    c : Tensor
        Linear cost.
    z : Tensor
        A strictly feasible point.
    level : int
        Quadrature level.
    h : float, optional
        Difference step.  Default: ``eps ** (1/3)``.
    rtol : float
        Relative error above which a check fails.
    verbose : bool

    Returns
    -------
    results : dict
        Contains 'gradient_error', 'hessian_error', 'symmetry_error' and
        the PASS/FAIL flags.
    """
    results = {
        "feasible_check": True,
        "gradient_check": True,
        "hessian_check": True,
        "gradient_error": None,
        "hessian_error": None,
        "symmetry_error": None,
        "warnings": [],
        "errors": [],
    }
    if h is None:
        h = torch.finfo(z.dtype).eps ** (1 / 3)

    y0 = float(barrier.objective(level, c, z))
    if not math.isfinite(y0):
        results["errors"].append("objective is not finite at z")
        results["feasible_check"] = False
        results["gradient_check"] = False
        results["hessian_check"] = False
        _report("Barrier Diagnostics", [("Feasible check:", "feasible_check")],
                results, verbose)
        return results

    g = barrier.gradient(level, c, z)
    H = barrier.hessian(level, c, z)

    # Directional checks along a fixed, deterministic direction.
    v = torch.cos(torch.arange(z.shape[0], dtype=z.dtype, device=z.device))
    v = v / torch.linalg.norm(v)
    fp = float(barrier.objective(level, c, z + h * v))
    fm = float(barrier.objective(level, c, z - h * v))
    if not (math.isfinite(fp) and math.isfinite(fm)):
        results["warnings"].append("finite difference step leaves the domain; "
                                   "try a smaller h")
    fd = (fp - fm) / (2 * h)
    gv = torch.dot(g, v).item()
    grad_error = abs(fd - gv) / max(abs(gv), 1.0)
    results["gradient_error"] = grad_error
    if not grad_error <= rtol:
        results["gradient_check"] = False
        results["warnings"].append(
            f"Gradient finite difference error: {grad_error:.2e}")

    gp = barrier.gradient(level, c, z + h * v)
    gm = barrier.gradient(level, c, z - h * v)
    Hv_fd = (gp - gm) / (2 * h)
    Hv = H @ v
    hess_error = (torch.linalg.norm(Hv_fd - Hv)
                  / max(torch.linalg.norm(Hv).item(), 1.0)).item()
    results["hessian_error"] = hess_error
    if not hess_error <= rtol:
        results["hessian_check"] = False
        results["warnings"].append(
            f"Hessian finite difference error: {hess_error:.2e}")

    sym_error = (torch.linalg.norm(H - H.T)
                 / max(torch.linalg.norm(H).item(), 1.0)).item()
    results["symmetry_error"] = sym_error
    if sym_error > rtol:
        results["hessian_check"] = False
        results["warnings"].append(f"Hessian is not symmetric: {sym_error:.2e}")

    _report(
        "Barrier Diagnostics",
        [("Feasible check:", "feasible_check"),
         ("Gradient check:", "gradient_check"),
         ("Hessian check:", "hessian_check")],
        results, verbose,
    )
    return results
