#!/usr/bin/env python
# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""
Benchmark suite for the spectral barrier method.

Sweeps the resolution and the p-Laplace exponent and saves errors, t-steps,
Newton work and runtimes to CSV for reproducibility.
"""

import time
from pathlib import Path

import numpy as np
import pandas as pd
import torch

from spectralbarrier import solve_pde
from spectralbarrier.problems import PLaplace1D, PLaplace2D

output_dir = Path("benchmarks/results")
output_dir.mkdir(parents=True, exist_ok=True)


def _row(problem, n, result, runtime):
    solution = result["solution"]
    its = solution["newton_iterations"]
    return {
        "problem": problem.name,
        "dim": problem.dim,
        "p": problem.p,
        "n": n,
        "n_nodes": result["mesh"].n_nodes,
        "converged": result["converged"],
        "val_err": result.get("metrics", {}).get("val_err", np.nan),
        "t_steps": solution["n_steps"],
        "newton_finest": int(its[0].sum()),
        "newton_sweeps": int(its[1:].sum()),
        "runtime": runtime,
    }


def run_1d_benchmarks():
    """Resolution sweep for the 1D p-Laplacian with known solutions."""
    results = []
    for p in (1.0, 1.1, 1.5, 2.0):
        for n in (5, 9, 17, 33):
            problem = PLaplace1D(p=p, source=1.0)
            print(f"Running: {problem.name}, n={n}")
            t0 = time.time()
            result = solve_pde(problem, n=n, round_up=True, verbose=False)
            runtime = time.time() - t0
            results.append(_row(problem, n, result, runtime))
            print(f"  converged={result['converged']}, "
                  f"error={results[-1]['val_err']:.2e}, {runtime:.2f}s")

    df = pd.DataFrame(results)
    df.to_csv(output_dir / "plaplace_1d.csv", index=False)
    print(f"\nSaved results to {output_dir / 'plaplace_1d.csv'}")
    return df


def run_2d_benchmarks():
    """Resolution sweep for the 2D p-Laplacian."""
    results = []
    for p in (1.0, 1.5):
        for n in (5, 9, 17):
            problem = PLaplace2D(p=p)
            print(f"Running: {problem.name}, n={n}")
            t0 = time.time()
            result = solve_pde(problem, n=n, round_up=True, verbose=False)
            runtime = time.time() - t0
            results.append(_row(problem, n, result, runtime))
            print(f"  converged={result['converged']}, "
                  f"t-steps={results[-1]['t_steps']}, {runtime:.2f}s")

    df = pd.DataFrame(results)
    df.to_csv(output_dir / "plaplace_2d.csv", index=False)
    print(f"\nSaved results to {output_dir / 'plaplace_2d.csv'}")
    return df


if __name__ == "__main__":
    torch.set_default_dtype(torch.float64)
    print("Spectral Barrier Benchmark Suite")
    print("=" * 60)

    df_1d = run_1d_benchmarks()
    df_2d = run_2d_benchmarks()

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    print(f"1D runs converged: {int(df_1d['converged'].sum())}/{len(df_1d)}")
    print(f"2D runs converged: {int(df_2d['converged'].sum())}/{len(df_2d)}")
    print(f"\nResults saved to: {output_dir}/")
