# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
The spectral barrier method.

We minimise the linear functional ``int c z`` (finest quadrature) subject to
``B(z) < inf`` by following the central path of

    t * int c z + B(z)

for increasing ``t``, warm-starting each Newton solve from the previous
point.  A preliminary feasibility phase sweeps the quadrature hierarchy
coarse-to-fine at the initial ``t``; when a step in ``t`` fails, the step is
shortened and retried through every search basis.
"""

import math
import time
from functools import partial

import numpy as np
import torch

from spectralbarrier.newton import damped_newton
from spectralbarrier.progress import NullProgress, TextProgress
from spectralbarrier.utils import check_finite, default_newton_budget, machine_eps


def _newton(barrier, level, c, x, R, maxit, alpha, beta):
    return damped_newton(
        partial(barrier.objective, level, c),
        partial(barrier.gradient, level, c),
        partial(barrier.hessian, level, c),
        x, R, maxit=maxit, alpha=alpha, beta=beta,
    )


# ======================================================================
# Phase 1
# ======================================================================

def feasibility_phase(barrier, c, x, *, maxit=10000, alpha=0.1, beta=0.25):
    """Solve at fixed cost ``c`` on each hierarchy level, coarse to fine.

    A level's solution replaces the current point only if the Newton solve
    converged and the finest-level objective (and gradient) there is finite
    and strictly below the best value seen so far.

    Returns
    -------
    result : dict
        ``x``, ``value`` (finest-level objective at ``x``) and
        ``iterations`` (Newton iterations per level).
    """
    mesh = barrier.mesh
    finest = mesh.n_levels - 1
    its = np.zeros(mesh.n_levels, dtype=int)

    best = float(barrier.objective(finest, c, x))
    check_finite(best, "objective at the starting point")

    for level, R in enumerate(mesh.bases):
        sol = _newton(barrier, level, c, x, R, maxit, alpha, beta)
        its[level] = sol["iterations"]
        if not sol["converged"]:
            continue
        y0 = float(barrier.objective(finest, c, sol["x"]))
        if not (math.isfinite(y0) and y0 < best):
            continue
        if not torch.isfinite(barrier.gradient(finest, c, sol["x"])).all():
            continue
        x, best = sol["x"], y0

    return {"x": x, "value": best, "iterations": its}


# ======================================================================
# Phase 2
# ======================================================================

def barrier_solve(barrier, c, x, *, t=0.01, tol=None, kappa=10.0,
                  maxit=10000, maxnewton=None, max_recovery=20,
                  max_newton_first=10000, alpha=0.1, beta=0.25,
                  verbose=True, progress=None):
    """Minimise ``int c z`` subject to ``barrier.objective(z) < inf``.

    Parameters
    ----------
    barrier : Barrier
    c : Tensor, shape (n_dofs,)
        Linear cost (one entry per stacked unknown).
    x : Tensor, shape (n_dofs,)
        Admissible starting point, i.e. with a finite barrier value.
    t : float
        Initial barrier parameter.
    tol : float, optional
        Stop once ``1/t < tol``.  Default: ``sqrt(eps)``.
    kappa : float
        Initial (and maximal) multiplicative ``t`` step.
    maxit : int
        Maximum number of ``t`` steps.
    maxnewton : int, optional
        Newton budget of a regular ``t`` step.  Default:
        ``ceil(log2(-log2(eps))) + 2``.
    max_recovery : int
        How many times a failed ``t`` step may be shortened before giving up.
    max_newton_first : int
        Newton budget of the feasibility phase, and of the recovery sweeps
        during the first ``t`` step.
    alpha, beta : float
        Line search parameters.
    verbose : bool
        Show a progress meter.
    progress : object, optional
        Custom sink with ``report(percent)`` and ``finish()``.

    Returns
    -------
    result : dict
        - ``x``: last accepted point
        - ``converged``: True if ``1/t < tol`` was reached
        - ``n_steps``: number of ``t`` steps taken (including a failed last one)
        - ``ts``, ``kappas``: barrier parameters and step sizes per step
        - ``newton_iterations``: int array, shape (n_levels + 1, n_steps + 1);
          row 0 counts finest-level steps, row ``i`` the recovery sweeps
          with basis ``i - 1``; column 0 is the feasibility phase
        - ``maxnewton``, ``tol``, ``runtime``
    """
    t_begin = time.time()
    eps = machine_eps(x.dtype)
    if tol is None:
        tol = math.sqrt(eps)
    if maxnewton is None:
        maxnewton = default_newton_budget(x.dtype)
    if progress is None:
        progress = TextProgress() if verbose else NullProgress()

    bases = barrier.mesh.bases
    n_levels = len(bases)
    finest = n_levels - 1

    its = np.zeros((n_levels + 1, maxit), dtype=int)
    kappas = np.zeros(maxit)
    ts = np.zeros(maxit)
    ts[0] = t
    kappas[0] = kappa
    t_init = t
    kappa_init = kappa

    phase1 = feasibility_phase(barrier, t * c, x, maxit=max_newton_first,
                               alpha=alpha, beta=beta)
    its[1:, 0] = phase1["iterations"]
    x = x_prev = phase1["x"]

    converged = False
    k = 0
    while k < maxit - 1:
        k += 1
        ts[k] = ts[k - 1] * kappa
        sol = _newton(barrier, finest, float(ts[k]) * c, x, bases[-1],
                      maxnewton, alpha, beta)
        its[0, k] += sol["iterations"]
        if sol["converged"]:
            x = sol["x"]
            if sol["iterations"] <= 0.5 * maxnewton:
                kappa = min(kappa_init, kappa ** 2)
        else:
            recovered = False
            budget = max_newton_first if k == 1 else maxnewton
            for _ in range(max_recovery):
                kappa = math.sqrt(kappa)
                if not kappa > 1:
                    break
                ts[k] = ts[k - 1] * kappa
                x = x_prev
                for level, R in enumerate(bases):
                    sol = _newton(barrier, finest, float(ts[k]) * c, x, R,
                                  budget, alpha, beta)
                    its[level + 1, k] += sol["iterations"]
                    if not sol["converged"]:
                        break
                    x = sol["x"]
                else:
                    recovered = True
                    break
            if not recovered:
                x = x_prev
                kappas[k] = kappa
                break

        kappas[k] = kappa
        x_prev = x
        progress.report(_percent(ts[k], t_init, tol))
        if 1 / ts[k] < tol:
            converged = True
            break

    progress.finish()

    n = k + 1
    ts = ts[:n]
    assert np.all(ts[1:] > ts[:-1]), "barrier parameters must increase"
    t_end = time.time()
    return {
        "x": x,
        "converged": converged,
        "n_steps": k,
        "ts": ts,
        "kappas": kappas[:n],
        "newton_iterations": its[:, :n],
        "phase1": phase1,
        "maxnewton": maxnewton,
        "tol": tol,
        "runtime": t_end - t_begin,
    }


def _percent(t, t_init, tol):
    span = math.log(1 / tol) - math.log(t_init)
    if span <= 0:
        return 100
    percent = 100 * (math.log(t) - math.log(t_init)) / span
    return int(math.floor(min(max(percent, 0.0), 100.0)))
