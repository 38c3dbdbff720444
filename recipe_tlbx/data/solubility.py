"""Synthetic, solubility-shaped descriptor table for examples and tests."""

import numpy as np
import pandas as pd


OUTCOME = "solubility"
WEIGHT = "weight"
SURFACE_AREA_PREFIX = "surf_area_"


def make_solubility_like(
    n_samples: int = 200,
    n_fingerprints: int = 20,
    random_state: int | None = 0,
) -> pd.DataFrame:
    """Generate a table resembling the aqueous-solubility QSAR data.

    The frame contains binary fingerprints ``FP001..``, a few count and
    continuous descriptors, three strongly correlated ``surf_area_*``
    descriptors, the outcome ``solubility`` and a ``weight`` column meant to be
    used as an auxiliary (performance) variable.

    Some columns are deliberately degenerate: the last fingerprint is constant,
    the two before it are almost always zero, and ``NumBonds`` is nearly a
    copy of ``NumAtoms``.

    Args:
        n_samples: Number of compounds (rows).
        n_fingerprints: Number of binary fingerprint columns (at least 3).
        random_state: Seed for :func:`numpy.random.default_rng`.

    Returns:
        DataFrame with a ``RangeIndex``.
    """
    if n_fingerprints < 3:
        raise ValueError("n_fingerprints must be at least 3.")
    if n_samples < 10:
        raise ValueError("n_samples must be at least 10.")

    rng = np.random.default_rng(random_state)
    data: dict[str, np.ndarray] = {}

    prevalence = rng.uniform(0.2, 0.6, size=n_fingerprints)
    for i in range(n_fingerprints):
        data[f"FP{i + 1:03d}"] = (rng.random(n_samples) < prevalence[i]).astype(int)

    # degenerate fingerprints: constant, then two rare ones
    data[f"FP{n_fingerprints:03d}"] = np.zeros(n_samples, dtype=int)
    for offset in (1, 2):
        rare = np.zeros(n_samples, dtype=int)
        rare[rng.choice(n_samples, size=offset, replace=False)] = 1
        data[f"FP{n_fingerprints - offset:03d}"] = rare

    num_atoms = rng.integers(5, 60, size=n_samples)
    data["MolWeight"] = num_atoms * 12.5 + rng.normal(0, 20, n_samples)
    data["NumAtoms"] = num_atoms.astype(float)
    data["NumBonds"] = num_atoms + rng.normal(0, 0.5, n_samples)
    data["NumCarbon"] = np.clip(num_atoms * 0.6 + rng.normal(0, 3, n_samples), 0, None)
    data["HydrophilicFactor"] = rng.normal(0, 1, n_samples)

    area = rng.gamma(4.0, 10.0, size=n_samples)
    for k in range(1, 4):
        data[f"{SURFACE_AREA_PREFIX}{k}"] = area * (1 + 0.1 * k) + rng.normal(0, 2.0, n_samples)

    fingerprint_effect = sum(data[f"FP{i + 1:03d}"] * rng.normal(0, 0.3) for i in range(n_fingerprints - 3))
    solubility = (
        -0.05 * data["MolWeight"] / 10
        + 0.8 * data["HydrophilicFactor"]
        + 0.02 * area
        + fingerprint_effect
        + rng.normal(0, 0.5, n_samples)
    )
    data[OUTCOME] = solubility
    data[WEIGHT] = np.where(solubility < np.quantile(solubility, 0.25), 2.0, 1.0)

    return pd.DataFrame(data)


__all__ = ["OUTCOME", "SURFACE_AREA_PREFIX", "WEIGHT", "make_solubility_like"]
