# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
spectralbarrier -- Solving convex variational problems with a spectral
discretisation and a log-barrier continuation method.

The problem  min int c z  subject to  B(z) < inf  is discretised on nested
Clenshaw-Curtis meshes of [-1, 1] or [-1, 1]^2 and solved by damped Newton
iterations along the barrier path.
"""

from spectralbarrier.mesh import (
    Mesh,
    spectral_mesh,
    spectral_mesh_2d,
    interp1d,
    interp2d,
    evaluate_at,
)
from spectralbarrier.barrier import Barrier
from spectralbarrier.newton import damped_newton
from spectralbarrier.continuation import barrier_solve, feasibility_phase
from spectralbarrier.linalg import solve_regularized
from spectralbarrier.api import solve_pde
from spectralbarrier.progress import TextProgress, NullProgress
from spectralbarrier.utils import PreconditionError
from spectralbarrier.plotting import (
    plot_solution_1d,
    plot_solution_2d,
    plot_convergence,
)
from spectralbarrier.diagnostics import check_mesh, check_barrier
from spectralbarrier.export import (
    to_numpy,
    to_dict,
    from_dict,
    save_checkpoint,
    load_checkpoint,
)

__version__ = "0.1.0"
__all__ = [
    # Meshes
    "Mesh",
    "spectral_mesh",
    "spectral_mesh_2d",
    "interp1d",
    "interp2d",
    "evaluate_at",
    # Barrier and solvers
    "Barrier",
    "damped_newton",
    "barrier_solve",
    "feasibility_phase",
    "solve_regularized",
    "PreconditionError",
    # High-level API
    "solve_pde",
    # Progress
    "TextProgress",
    "NullProgress",
    # Plotting
    "plot_solution_1d",
    "plot_solution_2d",
    "plot_convergence",
    # Diagnostics
    "check_mesh",
    "check_barrier",
    # Export
    "to_numpy",
    "to_dict",
    "from_dict",
    "save_checkpoint",
    "load_checkpoint",
]
