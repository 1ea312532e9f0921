# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
p-Laplace problems posed as barrier problems.

We minimise  int |grad u|^(2p) + f u  over u with prescribed boundary
values.  The energy density is lifted into a slack variable ``s`` with
constraint ``s^(1/p) >= |grad u|^2``, so that the problem becomes

    minimise  int f u + s   subject to   s^(1/p) - |grad u|^2 > 0,  s > 0

with barrier  -log(s^(1/p) - |grad u|^2) - 2 log s.  ``p = 1`` is the
Dirichlet energy (Poisson's equation); ``p > 1`` is a degenerate
(2p)-Laplacian.

Each class provides:
    integrand(x, y)          -- pointwise barrier for the mesh operators
    cost(mesh)               -- linear cost [f; 1] on the stacked unknowns
    initial_point(mesh)      -- strictly feasible starting point
"""

import torch


class PLaplace1D:
    """p-Laplace on [-1, 1] with constant source ``f``.

    With zero boundary values the minimiser is

        u(x) = -(f / 2p)^q (1 - |x|^(q+1)) / (q + 1),   q = 1 / (2p - 1),

    which is the parabola ``f (x^2 - 1) / 4`` for ``p = 1``.
    """

    def __init__(self, p=1.0, source=1.0, boundary=None):
        self.name = f"p-Laplace 1D (p={p})"
        self.dim = 1
        self.p = p
        self.source = source
        self.boundary = boundary

    def integrand(self, x, y):
        ux, s = y[1], y[2]
        return -torch.log(s ** (1 / self.p) - ux ** 2) - 2 * torch.log(s)

    def cost(self, mesh):
        f = self.source * torch.ones(mesh.n_nodes, dtype=mesh.dtype,
                                     device=mesh.nodes.device)
        return torch.cat([f, torch.ones_like(f)])

    def initial_point(self, mesh):
        x = mesh.nodes[:, 0]
        if self.boundary is None:
            u0 = torch.zeros_like(x)
            slope2 = 0.0
        else:
            u0 = self.boundary(x)
            slope2 = float((mesh.derivative @ u0).abs().max()) ** 2
        s0 = torch.full_like(x, (slope2 + 1.0) ** self.p + 1.0)
        return torch.cat([u0, s0])

    @property
    def has_exact(self):
        return self.boundary is None and self.source >= 0

    def exact(self, x):
        q = 1 / (2 * self.p - 1)
        a = (self.source / (2 * self.p)) ** q
        return -a * (1 - x.abs() ** (q + 1)) / (q + 1)


class PLaplace2D:
    """p-Laplace on [-1, 1]^2 with boundary values ``g`` and source ``f``."""

    def __init__(self, p=1.0, source=0.5, boundary=None):
        self.name = f"p-Laplace 2D (p={p})"
        self.dim = 2
        self.p = p
        self.source = source
        self.boundary = boundary if boundary is not None else (
            lambda x, y: x ** 2 + y ** 2)

    def integrand(self, x, y):
        ux, uy, s = y[1], y[2], y[3]
        return (-torch.log(s ** (1 / self.p) - ux ** 2 - uy ** 2)
                - 2 * torch.log(s))

    def cost(self, mesh):
        X, Y = mesh.nodes[:, 0], mesh.nodes[:, 1]
        if callable(self.source):
            f = self.source(X, Y)
        else:
            f = self.source * torch.ones_like(X)
        return torch.cat([f, torch.ones_like(f)])

    def initial_point(self, mesh):
        X, Y = mesh.nodes[:, 0], mesh.nodes[:, 1]
        u0 = self.boundary(X, Y)
        ux = mesh.operators[1] @ torch.cat([u0, torch.zeros_like(u0)])
        uy = mesh.operators[2] @ torch.cat([u0, torch.zeros_like(u0)])
        slope2 = float((ux ** 2 + uy ** 2).max())
        s0 = torch.full_like(X, (slope2 + 1.0) ** self.p + 1.0)
        return torch.cat([u0, s0])

    @property
    def has_exact(self):
        return False
