# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Tests for spectral meshes and interpolation."""

import numpy as np
import pytest
import torch

from spectralbarrier import (
    spectral_mesh, spectral_mesh_2d, interp1d, interp2d, evaluate_at,
    check_mesh,
)
from spectralbarrier.mesh import chebyshev_vandermonde, hierarchy_sizes
from spectralbarrier.quadrature import clenshaw_curtis


def test_hierarchy_sizes():
    """Sizes follow m <- 2m - 1 until the target is reached."""
    assert hierarchy_sizes(3) == [3]
    assert hierarchy_sizes(5) == [3, 5]
    assert hierarchy_sizes(6) == [3, 5, 9]
    assert hierarchy_sizes(17) == [3, 5, 9, 17]


def test_clenshaw_curtis_rule():
    """Nodes are symmetric and ascending, weights sum to 2."""
    x, w = clenshaw_curtis(9)
    assert np.all(np.diff(x) > 0)
    assert np.array_equal(x, -x[::-1])
    assert x[0] == -1.0 and x[-1] == 1.0 and x[4] == 0.0
    assert np.all(w >= 0)
    assert abs(w.sum() - 2.0) < 1e-14
    # Exact for polynomials of degree n - 1.
    assert abs(np.dot(w, x ** 8) - 2.0 / 9.0) < 1e-14


def test_mesh_shapes():
    """Weights, operators and bases have the documented shapes."""
    mesh = spectral_mesh(9)
    assert mesh.n_nodes == 9
    assert mesh.n_levels == 3
    assert mesh.resolution == 9
    assert mesh.nodes.shape == (9, 1)
    assert mesh.weights.shape == (9, 3)
    assert len(mesh.operators) == 3
    assert all(D.shape == (9, 18) for D in mesh.operators)
    assert [R.shape for R in mesh.bases] == [(18, 4), (18, 8), (18, 14)]


def test_quadrature_nesting():
    """Each level is a zero-padded copy of its own Clenshaw-Curtis rule."""
    mesh = spectral_mesh(17)
    w = mesh.weights
    assert torch.all(w >= 0)
    for level, m in enumerate(hierarchy_sizes(17)):
        support = w[:, level] != 0
        assert int(support.sum()) == m
        x_ref, w_ref = clenshaw_curtis(m)
        assert torch.allclose(mesh.nodes_1d[support],
                              torch.as_tensor(x_ref, dtype=mesh.dtype),
                              atol=1e-15)
        assert torch.equal(w[support, level],
                           torch.as_tensor(w_ref, dtype=mesh.dtype))
        if level + 1 < mesh.n_levels:
            finer = w[:, level + 1] != 0
            assert torch.all(finer[support])


def test_weights_integrate_constants():
    """Every level integrates 1 to the length of the interval."""
    mesh = spectral_mesh(9)
    sums = mesh.weights.sum(dim=0)
    assert torch.allclose(sums, torch.full_like(sums, 2.0), atol=1e-14)


def test_differentiation_exact():
    """The nodal derivative is exact for polynomials of degree < m1."""
    mesh = spectral_mesh(9)
    x = mesh.nodes_1d
    D = mesh.derivative
    y = x ** 5 - 2 * x ** 3 + x
    dy = 5 * x ** 4 - 6 * x ** 2 + 1
    assert torch.allclose(D @ y, dy, atol=1e-12)
    assert torch.allclose(D @ x ** 8, 8 * x ** 7, atol=1e-11)

    z = torch.cat([y, torch.zeros_like(y)])
    assert torch.allclose(mesh.operators[1] @ z, dy, atol=1e-12)


def test_round_up_false_truncates_basis():
    """Without rounding up the finest basis keeps resolution - 2 columns per field."""
    mesh = spectral_mesh(7, round_up=False)
    assert mesh.n_nodes == 9
    assert mesh.resolution == 7
    assert mesh.bases[-1].shape == (18, 10)

    # Dirichlet columns are T_2, ..., T_{n-1} with T_0 or T_1 subtracted,
    # so resolution n gives n - 2 columns per field: 3 here, 5 for n = 7.
    mesh = spectral_mesh(5, round_up=False)
    assert mesh.n_nodes == 5
    assert mesh.bases[-1].shape[1] == 2 * 3

    rounded = spectral_mesh(7)
    assert rounded.resolution == 9
    assert rounded.bases[-1].shape == (18, 14)


def test_basis_sizes_non_decreasing():
    """Search spaces grow with the level."""
    mesh = spectral_mesh(11, round_up=False)
    sizes = [R.shape[1] for R in mesh.bases]
    assert sizes == sorted(sizes)


def test_small_resolution_clamped():
    """Resolutions below the smallest rule are clamped up."""
    mesh = spectral_mesh(1)
    assert mesh.n_nodes == 3
    assert mesh.resolution == 3
    assert mesh.bases[-1].shape == (6, 2)


def test_idempotent_rebuild():
    """Building the same mesh twice gives identical tensors."""
    a = spectral_mesh_2d(5, round_up=False)
    b = spectral_mesh_2d(5, round_up=False)
    assert torch.equal(a.nodes, b.nodes)
    assert torch.equal(a.weights, b.weights)
    assert all(torch.equal(p, q) for p, q in zip(a.operators, b.operators))
    assert all(torch.equal(p, q) for p, q in zip(a.bases, b.bases))


def test_check_mesh_passes():
    """Mesh diagnostics pass in 1D and 2D."""
    for mesh in (spectral_mesh(9), spectral_mesh_2d(5)):
        results = check_mesh(mesh, verbose=False)
        assert results["weights_check"]
        assert results["nesting_check"]
        assert results["basis_check"]
        assert results["boundary_check"]
        assert not results["errors"]


def test_float32_mesh():
    """Meshes can be built in single precision."""
    mesh = spectral_mesh(5, torch.float32)
    assert mesh.dtype == torch.float32
    assert mesh.weights.dtype == torch.float32
    assert all(R.dtype == torch.float32 for R in mesh.bases)


def test_mesh_2d():
    """The 2D mesh is the tensor product of the 1D one."""
    mesh = spectral_mesh_2d(5)
    assert mesh.dim == 2
    assert mesh.nodes.shape == (25, 2)
    assert mesh.weights.shape == (25, 2)
    assert len(mesh.operators) == 4
    assert all(D.shape == (25, 50) for D in mesh.operators)
    assert mesh.bases[-1].shape == (50, 18)
    sums = mesh.weights.sum(dim=0)
    assert torch.allclose(sums, torch.full_like(sums, 4.0), atol=1e-13)

    X, Y = mesh.nodes[:, 0], mesh.nodes[:, 1]
    u = X ** 2 * Y + Y ** 3
    z = torch.cat([u, torch.zeros_like(u)])
    assert torch.allclose(mesh.operators[1] @ z, 2 * X * Y, atol=1e-12)
    assert torch.allclose(mesh.operators[2] @ z, X ** 2 + 3 * Y ** 2, atol=1e-12)
    s = torch.cat([torch.zeros_like(u), u])
    assert torch.allclose(mesh.operators[3] @ s, u)


def test_chebyshev_extension():
    """Chebyshev polynomials extend continuously outside [-1, 1]."""
    x = torch.tensor([-2.0, -1.0, 0.5, 1.0, 2.0], dtype=torch.float64)
    V = chebyshev_vandermonde(x, 4)
    T3 = 4 * x ** 3 - 3 * x
    T2 = 2 * x ** 2 - 1
    assert torch.allclose(V[:, 3], T3, atol=1e-12)
    assert torch.allclose(V[:, 2], T2, atol=1e-12)
    assert torch.allclose(V[:, 0], torch.ones_like(x))


def test_interp1d_polynomial():
    """Interpolation reproduces polynomials, including extrapolation."""
    mesh = spectral_mesh(9)
    x = mesh.nodes_1d
    y = x ** 3 - x
    xq = torch.tensor([-0.3, 0.0, 0.77, 1.5], dtype=torch.float64)
    assert torch.allclose(interp1d(mesh, y, xq), xq ** 3 - xq, atol=1e-12)

    Y = torch.stack([y, x ** 2], dim=1)
    out = interp1d(mesh, Y, xq)
    assert out.shape == (4, 2)
    assert torch.allclose(out[:, 1], xq ** 2, atol=1e-12)

    z = torch.cat([y, torch.ones_like(y)])
    assert torch.allclose(evaluate_at(mesh, z, xq), xq ** 3 - xq, atol=1e-12)
    assert torch.allclose(evaluate_at(mesh, z, xq, component=1),
                          3 * xq ** 2 - 1, atol=1e-11)
    assert torch.allclose(evaluate_at(mesh, z, xq, component=-1),
                          torch.ones_like(xq), atol=1e-12)


def test_interp2d_polynomial():
    """2D interpolation reproduces tensor-product polynomials."""
    mesh = spectral_mesh_2d(5)
    X, Y = mesh.nodes[:, 0], mesh.nodes[:, 1]
    u = X * Y ** 2 - X ** 3
    q = torch.tensor([[0.1, -0.4], [0.9, 0.3], [-0.5, -0.5]],
                     dtype=torch.float64)
    expected = q[:, 0] * q[:, 1] ** 2 - q[:, 0] ** 3
    assert torch.allclose(interp2d(mesh, u, q), expected, atol=1e-12)

    both = interp2d(mesh, torch.cat([u, 2 * u]), q)
    assert both.shape == (3, 2)
    assert torch.allclose(both[:, 1], 2 * expected, atol=1e-12)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
