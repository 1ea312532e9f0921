# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
Barrier objectives assembled by spectral quadrature.

Given a mesh and a pointwise integrand ``f(x, y)``, where ``x`` is a node
and ``y`` collects the values of every mesh operator at that node (for
instance ``(u, u', s)`` in 1-D), the barrier is

    F(z) = sum_i w_i f(x_i, (D z)_i) + sum_j (w c)_j z_j

for the quadrature weights ``w`` of a chosen level.  ``f`` is expected to
return ``inf`` or ``nan`` outside its domain (e.g. ``-log`` of a negative
number), which is how infeasibility is detected downstream.
"""

import threading

import torch
from torch.func import grad, hessian, vmap

from spectralbarrier.utils import check_finite


class Barrier:
    """Objective, gradient and Hessian of a barrier functional on a mesh.

    Parameters
    ----------
    mesh : Mesh
    f : callable(x, y) -> scalar Tensor
        Pointwise integrand; ``x`` has shape ``(dim,)`` and ``y`` has shape
        ``(len(mesh.operators),)``.  It must be written with torch
        operations so that it can be vectorised with ``torch.func.vmap``.
    grad_fn : callable(x, y) -> Tensor, optional
        Gradient of ``f`` with respect to ``y``.  Defaults to
        ``torch.func.grad``.
    hess_fn : callable(x, y) -> Tensor, optional
        Hessian of ``f`` with respect to ``y``.  Defaults to
        ``torch.func.hessian``.

    Notes
    -----
    The instance keeps scratch buffers for the operator values at the nodes
    and reuses them across calls.  Calls on one instance are serialised by
    an internal lock; use separate instances for concurrent work.
    """

    def __init__(self, mesh, f, grad_fn=None, hess_fn=None):
        if grad_fn is None:
            grad_fn = grad(f, argnums=1)
        if hess_fn is None:
            hess_fn = hessian(f, argnums=1)

        self.mesh = mesh
        self.f = f
        self._f = vmap(f)
        self._f1 = vmap(grad_fn)
        self._f2 = vmap(hess_fn)

        check_finite(mesh.weights, "mesh weights")
        check_finite(mesh.nodes, "mesh nodes")

        self._w = mesh.weights
        self._x = mesh.nodes
        self._D = torch.stack(mesh.operators)          # (n_ops, p, m)
        p = self._x.shape[0]
        m = self._D.shape[2]
        # Linear cost weights, one copy of w per stacked field.
        self._w2 = self._w.repeat(m // p, 1)
        self._Dz = torch.empty(p, len(mesh.operators), dtype=self._w.dtype,
                               device=self._w.device)
        self._lock = threading.Lock()

    @property
    def n_levels(self):
        return self.mesh.n_levels

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _params(self, level, z):
        """Fill the scratch buffer with operator values; return active nodes."""
        check_finite(z, "coefficient vector")
        self._Dz.copy_((self._D @ z).T)
        w = self._w[:, level]
        active = torch.nonzero(w).squeeze(1)
        return w[active], active

    # ------------------------------------------------------------------
    # Barrier functions
    # ------------------------------------------------------------------

    def objective(self, level, c, z):
        """Barrier value at level ``level`` for cost ``c``; ``inf``/``nan`` if infeasible."""
        with self._lock:
            w, active = self._params(level, z)
            y = self._f(self._x[active], self._Dz[active])
            return torch.dot(w, y) + torch.dot(self._w2[:, level] * c, z)

    def gradient(self, level, c, z):
        """Gradient of :meth:`objective` with respect to ``z``."""
        with self._lock:
            w, active = self._params(level, z)
            y = self._f1(self._x[active], self._Dz[active])    # (q, n_ops)
            D = self._D[:, active, :]                          # (n_ops, q, m)
            ret = self._w2[:, level] * c
            return ret + torch.einsum("kqa,qk->a", D, w.unsqueeze(1) * y)

    def hessian(self, level, c, z):
        """Hessian of :meth:`objective` with respect to ``z`` (dense)."""
        with self._lock:
            w, active = self._params(level, z)
            y = self._f2(self._x[active], self._Dz[active])    # (q, n_ops, n_ops)
            D = self._D[:, active, :]
            wy = w[:, None, None] * y
            # sum_{j,k} D_j' diag(w y_jk) D_k; y is symmetric, so the
            # off-diagonal pairs appear in both orders.
            return torch.einsum("jqa,qjk,kqb->ab", D, wy, D)
