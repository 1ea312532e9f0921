# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
Damped Newton iteration restricted to an affine search space.

Includes:
  - Newton steps in the coordinates of a search basis ``R``
  - Regularised reduced Hessian solves
  - Backtracking line search with Armijo condition, where a non-finite
    objective value marks a trial point as infeasible
"""

import math

import torch

from spectralbarrier.linalg import solve_regularized
from spectralbarrier.utils import check_finite, machine_eps


def damped_newton(f0, f1, f2, x, R, *, maxit=10000, alpha=0.1, beta=0.25,
                  tol=None, verbose=False):
    """Minimise ``f0`` over ``x + span(R)`` by damped Newton iteration.

    Parameters
    ----------
    f0, f1, f2 : callable(z)
        Objective, its gradient and its Hessian.  ``f0`` may return a
        non-finite value outside its domain.
    x : Tensor, shape (m,)
        Starting point; ``f0(x)`` must be finite.
    R : Tensor, shape (m, r)
        Columns span the search space.
    maxit : int
        Maximum Newton iterations.  Each line search backtracks until a
        step is accepted or the step no longer changes ``x``.
    alpha, beta : float
        Armijo slope fraction and backtracking factor.
    tol : float, optional
        Stop when the decrease of ``f0`` is at most
        ``tol * max(min(|old|, |new|), 1)``.  Default: ``eps ** (2/3)``.
    verbose : bool

    Returns
    -------
    result : dict
        ``x``, ``value``, ``iterations``, ``converged`` and the per-iteration
        traces ``step_sizes``, ``values`` (starting value first) and
        ``decrements`` (the predicted decrease ``g . n``).

    Raises
    ------
    PreconditionError
        If ``x``, ``f0(x)``, the reduced gradient or the Newton direction is
        not finite.
    """
    if tol is None:
        tol = machine_eps(x.dtype) ** (2 / 3)

    check_finite(x, "starting point")
    y = float(f0(x))
    check_finite(y, "objective at the starting point")

    step_sizes, values, decrements = [], [y], []
    converged = False
    k = 0
    while k < maxit:
        k += 1
        x_prev, y_prev = x, y

        g = R.T @ f1(x)
        check_finite(g, "reduced gradient")
        H = R.T @ f2(x) @ R
        n = solve_regularized(H, g)
        check_finite(n, "Newton direction")
        inc = float(torch.dot(g, n))
        if inc <= 0:
            converged = True
            break

        s = 1.0
        n = R @ n
        while True:
            x = x_prev - s * n
            if torch.equal(x, x_prev):
                break
            y = float(f0(x))
            if math.isfinite(y) and y < y_prev - s * alpha * inc:
                break
            s *= beta
            x, y = x_prev, y_prev

        step_sizes.append(s)
        values.append(y)
        decrements.append(inc)

        if verbose:
            print(f"  Newton {k:3d}: f={y:.12e}  g.n={inc:.2e}  s={s:.3e}")

        if y_prev - y <= tol * max(min(abs(y_prev), abs(y)), 1.0):
            converged = True
            break

    return {
        "x": x,
        "value": y,
        "iterations": k,
        "converged": converged,
        "step_sizes": step_sizes,
        "values": values,
        "decrements": decrements,
    }
