# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Tests for barrier assembly."""

import math

import pytest
import torch

from spectralbarrier import (
    Barrier, PreconditionError, spectral_mesh, spectral_mesh_2d, check_barrier,
)
from spectralbarrier.problems import PLaplace1D, PLaplace2D


def test_objective_matches_quadrature():
    """The objective is the weighted sum of the integrand plus the linear cost."""
    mesh = spectral_mesh(5)
    barrier = Barrier(mesh, lambda x, y: y[0] ** 2 + x[0] * y[2])
    x = mesh.nodes_1d
    u, s = x ** 2 + 1, torch.cos(x)
    z = torch.cat([u, s])
    c = torch.cat([torch.full_like(x, 0.5), torch.ones_like(x)])
    w = mesh.weights[:, -1]
    expected = torch.dot(w, u ** 2 + x * s) + torch.dot(w, 0.5 * u + s)
    assert torch.allclose(barrier.objective(-1, c, z), expected, atol=1e-14)

    w0 = mesh.weights[:, 0]
    expected0 = torch.dot(w0, u ** 2 + x * s) + torch.dot(w0, 0.5 * u + s)
    assert torch.allclose(barrier.objective(0, c, z), expected0, atol=1e-14)


def test_zero_weight_nodes_skipped():
    """Nodes absent from a level are never evaluated."""
    mesh = spectral_mesh(5)
    barrier = Barrier(mesh, lambda x, y: -torch.log(y[0]))
    u = torch.tensor([1.0, -1.0, 2.0, -1.0, 1.0], dtype=torch.float64)
    z = torch.cat([u, torch.ones_like(u)])
    c = torch.zeros_like(z)

    coarse = barrier.objective(0, c, z)
    assert torch.isfinite(coarse)
    assert torch.allclose(coarse, -mesh.weights[2, 0] * math.log(2.0))
    assert not torch.isfinite(barrier.objective(1, c, z))

    g = barrier.gradient(0, c, z)
    assert torch.isfinite(g).all()
    assert torch.isfinite(barrier.hessian(0, c, z)).all()


def test_infeasible_point_is_not_finite():
    """Leaving the barrier domain yields a non-finite objective, not an error."""
    problem = PLaplace1D()
    mesh = spectral_mesh(5)
    barrier = Barrier(mesh, problem.integrand)
    c = problem.cost(mesh)
    z = problem.initial_point(mesh)
    assert torch.isfinite(barrier.objective(-1, c, z))
    z_bad = z.clone()
    z_bad[mesh.n_nodes:] = -1.0
    assert not torch.isfinite(barrier.objective(-1, c, z_bad))


def test_non_finite_input_raises():
    """Non-finite coefficient vectors violate a precondition."""
    mesh = spectral_mesh(5)
    barrier = Barrier(mesh, lambda x, y: y[0] ** 2)
    z = torch.zeros(mesh.n_dofs, dtype=torch.float64)
    z[3] = float("nan")
    c = torch.zeros_like(z)
    with pytest.raises(PreconditionError):
        barrier.objective(-1, c, z)
    with pytest.raises(PreconditionError):
        barrier.gradient(-1, c, z)
    with pytest.raises(PreconditionError):
        barrier.hessian(-1, c, z)


def test_derivatives_match_finite_differences():
    """Autodiff gradient and Hessian agree with finite differences."""
    problem = PLaplace1D(p=1.1)
    mesh = spectral_mesh(9)
    barrier = Barrier(mesh, problem.integrand)
    c = problem.cost(mesh)
    x = mesh.nodes_1d
    z = torch.cat([0.1 * (x ** 2 - 1), 2.0 + 0.1 * x])
    for level in range(mesh.n_levels):
        results = check_barrier(barrier, c, z, level=level, verbose=False)
        assert results["feasible_check"]
        assert results["gradient_check"], results["gradient_error"]
        assert results["hessian_check"], results["hessian_error"]


def test_derivatives_2d():
    """Assembly is consistent on the tensor-product mesh."""
    problem = PLaplace2D()
    mesh = spectral_mesh_2d(5)
    barrier = Barrier(mesh, problem.integrand)
    c = problem.cost(mesh)
    z = problem.initial_point(mesh)
    results = check_barrier(barrier, c, z, verbose=False)
    assert results["gradient_check"], results["gradient_error"]
    assert results["hessian_check"], results["hessian_error"]


def test_explicit_derivatives_match_autodiff():
    """User-supplied pointwise derivatives give the same assembly."""
    def f(x, y):
        return y[0] ** 2 * y[1] ** 2 + torch.exp(y[2]) + x[0] * y[1]

    def f1(x, y):
        return torch.stack([2 * y[0] * y[1] ** 2,
                            2 * y[0] ** 2 * y[1] + x[0],
                            torch.exp(y[2])])

    def f2(x, y):
        zero = torch.zeros_like(y[0])
        return torch.stack([
            torch.stack([2 * y[1] ** 2, 4 * y[0] * y[1], zero]),
            torch.stack([4 * y[0] * y[1], 2 * y[0] ** 2, zero]),
            torch.stack([zero, zero, torch.exp(y[2])]),
        ])

    mesh = spectral_mesh(9)
    auto = Barrier(mesh, f)
    manual = Barrier(mesh, f, grad_fn=f1, hess_fn=f2)
    x = mesh.nodes_1d
    z = torch.cat([torch.sin(x), 0.3 * x])
    c = torch.linspace(-1, 1, mesh.n_dofs, dtype=torch.float64)
    for level in (0, -1):
        assert torch.allclose(auto.gradient(level, c, z),
                              manual.gradient(level, c, z), atol=1e-12)
        assert torch.allclose(auto.hessian(level, c, z),
                              manual.hessian(level, c, z), atol=1e-12)


def test_hessian_symmetric_positive():
    """The barrier Hessian of a convex integrand is symmetric PSD."""
    problem = PLaplace1D()
    mesh = spectral_mesh(9)
    barrier = Barrier(mesh, problem.integrand)
    z = problem.initial_point(mesh)
    H = barrier.hessian(-1, problem.cost(mesh), z)
    assert torch.allclose(H, H.T, atol=1e-12)
    assert torch.linalg.eigvalsh(H).min() > -1e-10


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
