# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Variational problems for the spectral barrier method."""

from spectralbarrier.problems.plaplace import PLaplace1D, PLaplace2D

__all__ = [
    "PLaplace1D", "PLaplace2D",
]
