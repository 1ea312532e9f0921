#!/usr/bin/env python
# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
Basic tutorial: Solving a 1D p-Laplace problem in one line.

This demonstrates the high-level API for the spectral barrier method.
"""

import torch
from spectralbarrier import solve_pde, plot_solution_1d, plot_convergence
from spectralbarrier.problems import PLaplace1D

# Create problem: p = 1 is Poisson's equation, u'' = f/2 with u(+-1) = 0
problem = PLaplace1D(p=1.0, source=1.0)

# Solve in one line!
result = solve_pde(problem, n=5, verbose=True)

# Access results
u_fn = result["u_fn"]
metrics = result["metrics"]
print(f"\nSolution computed!")
print(f"Value error: {metrics['val_err']:.2e}")

# Evaluate at custom points
x_test = torch.tensor([0.0, 0.5], dtype=torch.float64)
u_pred = u_fn(x_test)
print(f"u(0) = {u_pred[0].item():.8f} (exact -0.25)")
print(f"u(0.5) = {u_pred[1].item():.8f} (exact -0.1875)")

# A degenerate p-Laplacian needs more points
problem = PLaplace1D(p=1.5, source=1.0)
result = solve_pde(problem, n=33, round_up=True, verbose=True)

plot_solution_1d(result["mesh"], result["solution"]["x"], problem,
                 title=problem.name, save_path="tutorial_plaplace_1d.png")
plot_convergence(result["solution"], problem_name=problem.name,
                 save_path="tutorial_plaplace_1d_convergence.png")
