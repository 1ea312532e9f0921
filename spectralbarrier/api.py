# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
High-level API for solving variational problems with the spectral barrier
method.

Builds the mesh, the barrier, the cost and the starting point from a
problem object and runs the continuation solver in one call.
"""

import time
from typing import Optional, Dict, Any

import torch

from spectralbarrier.barrier import Barrier
from spectralbarrier.continuation import barrier_solve
from spectralbarrier.mesh import spectral_mesh, spectral_mesh_2d, evaluate_at


def solve_pde(
    problem,
    *,
    n: int = 5,
    round_up: bool = False,
    dtype: torch.dtype = torch.float64,
    t: float = 0.01,
    tol: Optional[float] = None,
    kappa: float = 10.0,
    maxit: int = 10000,
    maxnewton: Optional[int] = None,
    max_recovery: int = 20,
    alpha: float = 0.1,
    beta: float = 0.25,
    n_test: int = 201,
    return_barrier: bool = False,
    verbose: bool = True,
) -> Dict[str, Any]:
    """Solve a problem with the spectral barrier method.

    Parameters
    ----------
    problem : object
        Problem instance with attribute ``dim`` (1 or 2) and methods
        - ``integrand(x, y)`` -> scalar Tensor
        - ``cost(mesh)`` -> Tensor, shape (n_dofs,)
        - ``initial_point(mesh)`` -> Tensor, shape (n_dofs,)
        - Optional: ``exact(x)`` together with ``has_exact``
    n : int
        Desired number of grid points per axis.
    round_up : bool
        Round ``n`` up to the size of the finest embedded rule.
    dtype : torch.dtype
        Working precision.
    t, tol, kappa, maxit, maxnewton, max_recovery, alpha, beta :
        Passed to :func:`barrier_solve`.
    n_test : int
        Number of points for error evaluation against ``exact``.
    return_barrier : bool
        If True, include the Barrier object in the return dict.
    verbose : bool
        Print progress information.

    Returns
    -------
    result : dict
        Contains:
        - `u_fn` : callable(x) -> u(x) interpolation of the solution
        - `mesh` : the Mesh
        - `solution` : the dict returned by :func:`barrier_solve`
        - `converged` : bool
        - `runtime` : float
        - `metrics` : dict with 'val_err' (if the problem has an exact solution)
        - `barrier` : Barrier (if return_barrier=True)
    """
    t0 = time.time()

    if problem.dim == 1:
        mesh = spectral_mesh(n, dtype, round_up=round_up)
    elif problem.dim == 2:
        mesh = spectral_mesh_2d(n, dtype, round_up=round_up)
    else:
        raise ValueError(f"problem.dim must be 1 or 2, got {problem.dim}")

    if verbose:
        print(f"Solving {getattr(problem, 'name', 'problem')} on {mesh}")

    barrier = Barrier(mesh, problem.integrand)
    c = problem.cost(mesh)
    x0 = problem.initial_point(mesh)

    solution = barrier_solve(
        barrier, c, x0,
        t=t, tol=tol, kappa=kappa, maxit=maxit, maxnewton=maxnewton,
        max_recovery=max_recovery, alpha=alpha, beta=beta, verbose=verbose,
    )

    runtime = time.time() - t0

    def u_fn(x):
        """Evaluate solution at points x."""
        return evaluate_at(mesh, solution["x"], x)

    result = {
        "u_fn": u_fn,
        "mesh": mesh,
        "solution": solution,
        "converged": solution["converged"],
        "runtime": runtime,
    }

    if return_barrier:
        result["barrier"] = barrier

    if getattr(problem, "has_exact", False):
        if mesh.dim == 1:
            x_test = torch.linspace(-1, 1, n_test, dtype=dtype,
                                    device=mesh.nodes.device)
        else:
            g = torch.linspace(-1, 1, n_test, dtype=dtype,
                               device=mesh.nodes.device)
            X, Y = torch.meshgrid(g, g, indexing="ij")
            x_test = torch.stack([X.reshape(-1), Y.reshape(-1)], dim=1)
        val_err = (u_fn(x_test) - problem.exact(x_test)).abs().max().item()
        result["metrics"] = {"val_err": val_err, "runtime": runtime}

    if verbose:
        print(f"Converged: {solution['converged']}, t-steps: "
              f"{solution['n_steps']}, runtime: {runtime:.2f}s")
        if "metrics" in result:
            print(f"Max error: {result['metrics']['val_err']:.2e}")

    return result
