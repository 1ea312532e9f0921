# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Clenshaw-Curtis quadrature rules on [-1, 1], backed by chaospy."""

import numpy as np
from chaospy.quadrature import clenshaw_curtis as _chaospy_clenshaw_curtis


def clenshaw_curtis(n_points):
    """Return the ``n_points``-node Clenshaw-Curtis rule on [-1, 1].

    Parameters
    ----------
    n_points : int
        Number of nodes (at least 2).

    Returns
    -------
    nodes : ndarray, shape (n_points,)
        Ascending; ``nodes[i] == -nodes[-1 - i]`` holds exactly.
    weights : ndarray, shape (n_points,)
        Non-negative, summing to 2.
    """
    abscissas, weights = _chaospy_clenshaw_curtis(n_points - 1, domain=(-1.0, 1.0))
    nodes = np.asarray(abscissas, dtype=np.float64).reshape(-1)
    weights = np.asarray(weights, dtype=np.float64).reshape(-1)

    order = np.argsort(nodes)
    nodes, weights = nodes[order], weights[order]

    # Nested rules share nodes; symmetrize so mirror images agree bit for bit.
    nodes = 0.5 * (nodes - nodes[::-1])
    weights = 0.5 * (weights + weights[::-1])
    return nodes, weights
