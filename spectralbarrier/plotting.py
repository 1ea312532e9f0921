# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Built-in plotting utilities for spectral barrier solutions and diagnostics."""

import numpy as np
import torch
import matplotlib.pyplot as plt
from typing import Optional, Tuple, Dict, Any

from spectralbarrier.mesh import Mesh, evaluate_at


# ======================================================================
# Solution plotting
# ======================================================================

def plot_solution_1d(
    mesh: Mesh,
    z: torch.Tensor,
    problem=None,
    *,
    x_min: float = -1.0,
    x_max: float = 1.0,
    n_points: int = 201,
    ax: Optional[plt.Axes] = None,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    **kwargs,
) -> plt.Axes:
    """Plot a 1D solution, optionally against the exact one.

    Parameters
    ----------
    mesh : Mesh
    z : Tensor
        Stacked coefficient vector returned by the solver.
    problem : object, optional
        If it has ``exact(x)`` and ``has_exact``, the exact solution is
        overlaid.
    x_min, x_max : float
        Plot range; points outside [-1, 1] are extrapolated.
    n_points : int
    ax : matplotlib.Axes, optional
    title : str, optional
    save_path : str, optional
    **kwargs
        Passed to plt.plot().

    Returns
    -------
    ax : matplotlib.Axes
    """
    x_plot = torch.linspace(x_min, x_max, n_points, dtype=mesh.dtype,
                            device=mesh.nodes.device)
    u_pred = evaluate_at(mesh, z, x_plot).cpu().numpy()

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))

    xs = x_plot.cpu().numpy()
    ax.plot(xs, u_pred, label="Spectral barrier", linewidth=2, **kwargs)
    if problem is not None and getattr(problem, "has_exact", False):
        u_exact = problem.exact(x_plot).cpu().numpy()
        ax.plot(xs, u_exact, "--", label="Exact", linewidth=2, alpha=0.7)

    ax.set_xlabel("x")
    ax.set_ylabel("u(x)")
    ax.legend()
    ax.grid(True, alpha=0.3)
    if title:
        ax.set_title(title)

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close()

    return ax


def plot_solution_2d(
    mesh: Mesh,
    z: torch.Tensor,
    *,
    n_points: int = 101,
    cmap: str = "jet",
    figsize: Tuple[int, int] = (8, 6),
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    **kwargs,
):
    """Plot a 2D solution as a surface over [-1, 1]^2.

    Parameters
    ----------
    mesh : Mesh
        A 2D mesh.
    z : Tensor
        Stacked coefficient vector returned by the solver.
    n_points : int
        Grid resolution (n_points x n_points).
    cmap : str
    figsize : tuple
    title : str, optional
    save_path : str, optional
    **kwargs
        Passed to ``plot_surface``.

    Returns
    -------
    fig : matplotlib.Figure
    ax : matplotlib 3D Axes
    """
    g = torch.linspace(-1.0, 1.0, n_points, dtype=mesh.dtype,
                       device=mesh.nodes.device)
    X, Y = torch.meshgrid(g, g, indexing="ij")
    pts = torch.stack([X.reshape(-1), Y.reshape(-1)], dim=1)
    U = evaluate_at(mesh, z, pts).reshape(n_points, n_points)

    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(projection="3d")
    ax.plot_surface(
        X.cpu().numpy(), Y.cpu().numpy(), U.cpu().numpy(),
        rcount=50, ccount=50, antialiased=False, edgecolor="black",
        linewidth=0.004, cmap=cmap, **kwargs,
    )
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_zlabel("u")
    if title:
        ax.set_title(title)

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close()

    return fig, ax


# ======================================================================
# Convergence plotting
# ======================================================================

def plot_convergence(
    solution: Dict[str, Any],
    *,
    problem_name: Optional[str] = None,
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None,
) -> Tuple[plt.Figure, Tuple[plt.Axes, plt.Axes]]:
    """Plot the barrier path and the Newton work per t-step.

    Parameters
    ----------
    solution : dict
        Result of :func:`barrier_solve` (keys 'ts', 'newton_iterations').
    problem_name : str, optional
        Title prefix.
    figsize : tuple
    save_path : str, optional

    Returns
    -------
    fig : matplotlib.Figure
    axes : tuple of matplotlib.Axes
    """
    ts = np.asarray(solution["ts"])
    its = np.asarray(solution["newton_iterations"])
    steps = np.arange(len(ts))
    prefix = f"{problem_name}: " if problem_name else ""

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    ax1.semilogy(steps, ts, "-o", markersize=4)
    ax1.set_xlabel("t-step")
    ax1.set_ylabel("t")
    ax1.set_title(f"{prefix}Barrier parameter")
    ax1.grid(True, alpha=0.3)

    ax2.bar(steps, its[0], label="finest level")
    ax2.bar(steps, its[1:].sum(axis=0), bottom=its[0], label="level sweeps")
    ax2.set_xlabel("t-step")
    ax2.set_ylabel("Newton iterations")
    ax2.set_title(f"{prefix}Newton work")
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close()

    return fig, (ax1, ax2)
