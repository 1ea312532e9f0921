# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Shared utilities: device configuration, precision helpers, finiteness checks."""

import math

import torch

# ---------------------------------------------------------------------------
# Device configuration
# ---------------------------------------------------------------------------

device = torch.device("cuda" if torch.cuda.is_available() else "cpu")


# ---------------------------------------------------------------------------
# Precision
# ---------------------------------------------------------------------------

def machine_eps(dtype):
    """Machine epsilon of a floating point torch dtype."""
    return torch.finfo(dtype).eps


def default_newton_budget(dtype):
    """Newton iterations needed for quadratic convergence to full precision, plus two."""
    return int(math.ceil(math.log2(-math.log2(machine_eps(dtype))))) + 2


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------

class PreconditionError(AssertionError):
    """A quantity that must be finite is not.

    Raised when a coefficient vector, a starting objective value or a Newton
    direction contains ``nan`` or ``inf``.  This signals misuse by the caller
    or by the integrand; infeasible trial points are reported as non-finite
    objective values instead.
    """


def check_finite(value, what):
    """Raise :class:`PreconditionError` unless every entry of ``value`` is finite."""
    if isinstance(value, torch.Tensor):
        ok = bool(torch.isfinite(value).all())
    else:
        ok = math.isfinite(value)
    if not ok:
        raise PreconditionError(f"{what} must be finite")
