# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
Spectral meshes on [-1, 1] and [-1, 1]^2.

A mesh holds the finest Clenshaw-Curtis nodes together with a hierarchy of
embedded quadrature rules (one weight column per level), the differential
operators acting on the stacked coefficient vector ``z = [u; s]`` and, for
each level, a matrix whose columns span the admissible Newton directions.

Since Clenshaw-Curtis nodes are nested, every node of a coarse rule is also a
node of the finest rule; coarse levels simply carry zero weight on the nodes
they do not own.
"""

import torch

from spectralbarrier.quadrature import clenshaw_curtis
from spectralbarrier.utils import device

MIN_RESOLUTION = 3


# ======================================================================
# Mesh container
# ======================================================================

class Mesh:
    """Spectral mesh with an embedded quadrature hierarchy.

    Attributes
    ----------
    nodes : Tensor, shape (p, dim)
        Quadrature nodes.  In 2-D, row ``i*m1 + j`` is ``(x_i, y_j)``.
    nodes_1d : Tensor, shape (m1,)
        The 1-D Clenshaw-Curtis nodes the mesh is built from.
    weights : Tensor, shape (p, n_levels)
        ``weights[:, -1]`` is the finest rule; column ``k`` is the rule of
        level ``k``, zero on nodes not present at that level.
    resolution : int
        Requested number of grid points along each axis.  With
        ``round_up=False`` this may be smaller than ``m1``.
    operators : list[Tensor], each shape (p, 2p)
        ``[u, u']`` then ``s`` in 1-D, ``[u, u_x, u_y, s]`` in 2-D.
    bases : list[Tensor]
        ``bases[k]`` has shape ``(2p, r_k)``; its columns span polynomials of
        bounded degree vanishing on the boundary (for ``u``) and free
        polynomials (for ``s``).
    derivative : Tensor, shape (m1, m1)
        Nodal 1-D differentiation matrix.

    Meshes are treated as immutable once built.
    """

    def __init__(self, *, nodes, nodes_1d, weights, resolution, operators,
                 bases, derivative, dim, round_up):
        self.nodes = nodes
        self.nodes_1d = nodes_1d
        self.weights = weights
        self.resolution = resolution
        self.operators = operators
        self.bases = bases
        self.derivative = derivative
        self.dim = dim
        self.round_up = round_up

    @property
    def dtype(self):
        return self.nodes.dtype

    @property
    def n_levels(self):
        """Number of embedded quadrature levels."""
        return self.weights.shape[1]

    @property
    def n_nodes(self):
        return self.nodes.shape[0]

    @property
    def n_dofs(self):
        """Length of the stacked coefficient vector ``[u; s]``."""
        return self.operators[0].shape[1]

    def __repr__(self):
        return (f"Mesh(dim={self.dim}, resolution={self.resolution}, "
                f"n_nodes={self.n_nodes}, n_levels={self.n_levels}, "
                f"dtype={self.dtype})")


# ======================================================================
# Chebyshev helpers
# ======================================================================

def hierarchy_sizes(n):
    """Node counts of the nested rules: 3, 5, 9, 17, ... up to the first >= n."""
    sizes = []
    m = 2
    while m < n:
        m = 2 * m - 1
        sizes.append(m)
    return sizes


def chebyshev_vandermonde(x, n):
    """Evaluate T_0, ..., T_{n-1} at the points ``x``.

    Outside [-1, 1] the polynomials are evaluated through
    ``T_k(x) = cosh(k acosh x)`` (with the parity sign for ``x < -1``), so the
    same expansion can be used for extrapolation.

    Returns
    -------
    V : Tensor, shape (len(x), n)
    """
    x = x.reshape(-1, 1)
    k = torch.arange(n, dtype=x.dtype, device=x.device)
    inside = torch.cos(k * torch.acos(x.clamp(-1.0, 1.0)))
    outside = torch.cosh(k * torch.acosh(x.abs().clamp(min=1.0)))
    odd = (k.remainder(2) == 1) & (x < -1)
    outside = torch.where(odd, -outside, outside)
    return torch.where(x.abs() <= 1, inside, outside)


def derivative_matrix(n, dtype=torch.float64, device=device):
    """Differentiation in Chebyshev coefficient space.

    If ``a`` are the coefficients of ``sum_k a_k T_k`` then ``D @ a`` are the
    coefficients of its derivative.
    """
    D = torch.zeros(n, n, dtype=dtype, device=device)
    for j in range(n - 1):
        for k in range(j + 1, n, 2):
            D[j, k] = 2 * k
    D[0, :] /= 2
    return D


# ======================================================================
# 1-D mesh
# ======================================================================

def spectral_mesh(n, dtype=torch.float64, *, round_up=True, device=device):
    """Build a 1-D spectral mesh on [-1, 1].

    Parameters
    ----------
    n : int
        Desired number of grid points.  Values below 3 are clamped to 3.
    dtype : torch.dtype
        Working precision.
    round_up : bool
        If True the resolution is rounded up to the finest hierarchy size
        ``m1`` (with ``m1 - 1`` a power of two).  If False the finest basis
        only represents polynomials of degree below ``n`` even though the
        mesh has ``m1 >= n`` nodes.
    device : torch.device

    Returns
    -------
    mesh : Mesh
    """
    n = max(int(n), MIN_RESOLUTION)
    sizes = hierarchy_sizes(n)
    m1 = sizes[-1]
    n_levels = len(sizes)

    w = torch.zeros(m1, n_levels, dtype=dtype, device=device)
    for level, m in enumerate(sizes):
        nodes, weights = clenshaw_curtis(m)
        stride = (m1 - 1) // (m - 1)
        w[::stride, level] = torch.as_tensor(weights, dtype=dtype, device=device)
    x = torch.as_tensor(nodes, dtype=dtype, device=device)

    if round_up:
        n = m1

    M = chebyshev_vandermonde(x, m1)
    D0 = derivative_matrix(m1, dtype=dtype, device=device)
    D = torch.linalg.solve(M, M @ D0, left=False)

    # Dirichlet basis: T_k - T_0 (k even) and T_k - T_1 (k odd) vanish at +-1.
    CI = M[:, 2:n].clone()
    CI[:, 0::2] -= M[:, 0:1]
    CI[:, 1::2] -= M[:, 1:2]
    L = M[:, :n - 1]

    E = torch.eye(m1, dtype=dtype, device=device)
    Z = torch.zeros(m1, m1, dtype=dtype, device=device)
    operators = [
        torch.cat([E, Z], dim=1),
        torch.cat([D, Z], dim=1),
        torch.cat([Z, E], dim=1),
    ]

    bases = []
    for m in sizes:
        k2 = min(m - 1, CI.shape[1])
        bases.append(torch.block_diag(CI[:, :k2], L[:, :k2]))

    return Mesh(
        nodes=x.reshape(-1, 1), nodes_1d=x, weights=w, resolution=n,
        operators=operators, bases=bases, derivative=D, dim=1,
        round_up=round_up,
    )


# ======================================================================
# 2-D mesh
# ======================================================================

def spectral_mesh_2d(n, dtype=torch.float64, *, round_up=True, device=device):
    """Build a tensor-product spectral mesh on [-1, 1]^2.

    See :func:`spectral_mesh`; every structure is the Kronecker product of
    its 1-D counterpart with itself.
    """
    mesh = spectral_mesh(n, dtype, round_up=round_up, device=device)
    x1 = mesh.nodes_1d
    m1 = x1.shape[0]

    X, Y = torch.meshgrid(x1, x1, indexing="ij")
    nodes = torch.stack([X.reshape(-1), Y.reshape(-1)], dim=1)

    D = mesh.derivative
    E = torch.eye(m1, dtype=dtype, device=device)
    EE = torch.kron(E, E)
    ZZ = torch.zeros_like(EE)
    operators = [
        torch.cat([EE, ZZ], dim=1),
        torch.cat([torch.kron(D, E), ZZ], dim=1),
        torch.cat([torch.kron(E, D), ZZ], dim=1),
        torch.cat([ZZ, EE], dim=1),
    ]

    bases = []
    for R in mesh.bases:
        k2 = R.shape[1] // 2
        U = R[:m1, :k2]
        S = R[m1:, k2:]
        bases.append(torch.block_diag(torch.kron(U, U), torch.kron(S, S)))

    w1 = mesh.weights
    w = torch.einsum("ik,jk->ijk", w1, w1).reshape(m1 * m1, mesh.n_levels)

    return Mesh(
        nodes=nodes, nodes_1d=x1, weights=w, resolution=mesh.resolution,
        operators=operators, bases=bases, derivative=D, dim=2,
        round_up=round_up,
    )


# ======================================================================
# Interpolation
# ======================================================================

def _as_points(mesh, x):
    return torch.as_tensor(x, dtype=mesh.dtype, device=mesh.nodes.device)


def interp1d(mesh, y, x):
    """Interpolate nodal values ``y`` of a 1-D mesh at the point(s) ``x``.

    Parameters
    ----------
    mesh : Mesh
    y : Tensor, shape (m1,) or (m1, k)
        Nodal values, e.g. ``mesh.operators[0] @ z``.
    x : Tensor or array_like
        Evaluation points; may lie outside [-1, 1].

    Returns
    -------
    values : Tensor, shape ``x.shape`` (or ``x.shape + (k,)``)
    """
    x = _as_points(mesh, x)
    m1 = mesh.nodes_1d.shape[0]
    M = chebyshev_vandermonde(mesh.nodes_1d, m1)
    y1 = y.reshape(m1, -1)
    coef = torch.linalg.solve(M, y1)
    values = chebyshev_vandermonde(x.reshape(-1), m1) @ coef
    if y.dim() == 1:
        return values.reshape(x.shape)
    return values.reshape(*x.shape, *y.shape[1:])


def interp2d(mesh, z, x):
    """Interpolate nodal values ``z`` of a 2-D mesh at the points ``x``.

    Parameters
    ----------
    mesh : Mesh
        A mesh built by :func:`spectral_mesh_2d`.
    z : Tensor, shape (m1*m1,) or (k*m1*m1,)
        Nodal values of one field, or of ``k`` stacked fields.
    x : Tensor, shape (q, 2)

    Returns
    -------
    values : Tensor, shape (q,) or (q, k)
    """
    x = _as_points(mesh, x).reshape(-1, 2)
    m1 = mesh.nodes_1d.shape[0]
    M = chebyshev_vandermonde(mesh.nodes_1d, m1)
    U = z.reshape(-1, m1, m1)
    # Coefficients C with U = M C M^T.
    C = torch.linalg.solve(M, torch.linalg.solve(M, U.transpose(1, 2)).transpose(1, 2))
    Tx = chebyshev_vandermonde(x[:, 0], m1)
    Ty = chebyshev_vandermonde(x[:, 1], m1)
    values = torch.einsum("qi,fij,qj->qf", Tx, C, Ty)
    if U.shape[0] == 1:
        return values[:, 0]
    return values


def evaluate_at(mesh, z, points, component=0):
    """Evaluate a solution at arbitrary points.

    Parameters
    ----------
    mesh : Mesh
    z : Tensor, shape (n_dofs,)
        Stacked coefficient vector ``[u; s]``.
    points : Tensor or array_like
        Shape (q,) in 1-D, (q, 2) in 2-D.
    component : int
        Index into ``mesh.operators``: 0 is ``u``, -1 is the slack ``s``,
        and the entries in between are partial derivatives of ``u``.
    """
    y = mesh.operators[component] @ z
    if mesh.dim == 1:
        return interp1d(mesh, y, points)
    return interp2d(mesh, y, points)
