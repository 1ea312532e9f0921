# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Linear algebra helpers for the Newton solver."""

import torch


def solve_regularized(H, g):
    """Solve  (H + eps ||H|| I) n = g.

    Parameters
    ----------
    H : Tensor, shape (N, N)
        Symmetric (reduced) Hessian.
    g : Tensor, shape (N,)
        Right-hand side.

    The shift ``eps ||H||_F`` (``eps`` the machine epsilon of ``H.dtype``)
    keeps the system solvable when ``H`` is singular, e.g. when the search
    basis has directions the objective does not see.  The shifted matrix is
    factorised by Cholesky; if that fails, falls back to
    ``torch.linalg.solve``.

    Returns
    -------
    n : Tensor, shape (N,)
    """
    eps = torch.finfo(H.dtype).eps
    A = H + torch.linalg.norm(H) * eps * torch.eye(
        H.shape[0], dtype=H.dtype, device=H.device)
    b = g.unsqueeze(1)
    try:
        L = torch.linalg.cholesky(A)
        return torch.cholesky_solve(b, L).squeeze(1)
    except torch.linalg.LinAlgError:
        return torch.linalg.solve(A, b).squeeze(1)
