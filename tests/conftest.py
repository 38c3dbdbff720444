"""Test configuration for the recipe toolbox."""

from pathlib import Path
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    import matplotlib.pyplot as plt

    plt.close("all")


@pytest.fixture(scope="session")
def solubility_df() -> pd.DataFrame:
    """Solubility-shaped table shared across the session (do not mutate)."""
    from recipe_tlbx.data import make_solubility_like

    return make_solubility_like(n_samples=120, random_state=0)


@pytest.fixture
def small_df() -> pd.DataFrame:
    """Tiny numeric frame with an outcome, an auxiliary weight and a label column."""
    rng = np.random.default_rng(42)
    a = rng.normal(10, 2, 30)
    return pd.DataFrame(
        {
            "a": a,
            "b": rng.normal(0, 1, 30),
            "c": rng.uniform(1, 5, 30),
            "w": rng.choice([1.0, 2.0], 30),
            "label": rng.choice(["x", "y"], 30),
            "y": 2 * a + rng.normal(0, 0.5, 30),
        },
    )
