# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Export utilities for spectral barrier solutions (NumPy, checkpoints)."""

import numpy as np
import torch
from typing import Optional, Union, Dict, Any

from spectralbarrier.mesh import Mesh, evaluate_at, spectral_mesh, spectral_mesh_2d
from spectralbarrier.utils import device as default_device


def to_numpy(
    mesh: Mesh,
    z: torch.Tensor,
    x: Union[torch.Tensor, np.ndarray],
    *,
    return_slack: bool = False,
) -> Union[np.ndarray, tuple]:
    """Evaluate a solution at points ``x`` and return NumPy arrays.

    Parameters
    ----------
    mesh : Mesh
    z : Tensor
        Stacked coefficient vector.
    x : Tensor or ndarray
        Shape (n,) in 1D, (n, 2) in 2D.
    return_slack : bool
        Also return the slack field.

    Returns
    -------
    u : ndarray
    s : ndarray, optional
    """
    u = evaluate_at(mesh, z, x).cpu().numpy()
    if return_slack:
        s = evaluate_at(mesh, z, x, component=-1).cpu().numpy()
        return u, s
    return u


def to_dict(
    mesh: Mesh,
    solution: Dict[str, Any],
    *,
    include_history: bool = True,
) -> Dict[str, Any]:
    """Export a mesh description and solution to a dictionary.

    The mesh is stored by its build arguments; rebuilding it is
    deterministic.

    Parameters
    ----------
    mesh : Mesh
    solution : dict
        Result of :func:`barrier_solve`.
    include_history : bool
        Include the t-path and Newton iteration counts.

    Returns
    -------
    state : dict
    """
    state = {
        "dim": mesh.dim,
        "resolution": mesh.resolution,
        "round_up": mesh.round_up,
        "dtype": str(mesh.dtype).replace("torch.", ""),
        "x": solution["x"].cpu().numpy(),
        "converged": bool(solution["converged"]),
    }
    if include_history:
        state["ts"] = np.asarray(solution["ts"])
        state["kappas"] = np.asarray(solution["kappas"])
        state["newton_iterations"] = np.asarray(solution["newton_iterations"])
    return state


def from_dict(
    state: Dict[str, Any],
    *,
    device: Optional[torch.device] = None,
) -> tuple:
    """Rebuild the mesh and solution from :func:`to_dict` output.

    Returns
    -------
    mesh : Mesh
    solution : dict
    """
    if device is None:
        device = default_device

    dtype = getattr(torch, state["dtype"])
    build = spectral_mesh if state["dim"] == 1 else spectral_mesh_2d
    mesh = build(state["resolution"], dtype, round_up=state["round_up"],
                 device=device)

    solution = {k: v for k, v in state.items()
                if k not in ("dim", "resolution", "round_up", "dtype")}
    solution["x"] = torch.as_tensor(state["x"], dtype=dtype, device=device)
    return mesh, solution


def save_checkpoint(
    mesh: Mesh,
    solution: Dict[str, Any],
    path: str,
    *,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """Save a solution checkpoint to file.

    Parameters
    ----------
    mesh : Mesh
    solution : dict
    path : str
        File path (.pt or .pth extension recommended).
    metadata : dict, optional
        Additional metadata to save.
    """
    state = to_dict(mesh, solution)
    if metadata:
        state["metadata"] = metadata
    torch.save(state, path)


def load_checkpoint(
    path: str,
    *,
    device: Optional[torch.device] = None,
) -> tuple:
    """Load a solution checkpoint from file.

    Returns
    -------
    mesh : Mesh
    solution : dict
    metadata : dict, optional
    """
    state = torch.load(path, map_location=device, weights_only=False)
    metadata = state.pop("metadata", None)
    mesh, solution = from_dict(state, device=device)
    return mesh, solution, metadata
