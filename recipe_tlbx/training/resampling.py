"""Resample generation (cross-validation, repeated CV, bootstrap)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, RepeatedKFold

from .control import TrainControl


@dataclass(frozen=True)
class Resample:
    """One analysis/assessment split, expressed as labels of the original index.

    Attributes:
        label: Resample label such as ``"Fold01.Rep1"`` or ``"Resample03"``.
        analysis: Index labels of the rows used for fitting.
        assessment: Index labels of the held-out rows.
    """

    label: str
    analysis: pd.Index
    assessment: pd.Index


def _pad(i: int, n: int) -> str:
    return f"{i:0{max(2, len(str(n)))}d}"


def make_resamples(index: pd.Index, control: TrainControl) -> list[Resample]:
    """Split ``index`` according to ``control``.

    For ``method="none"`` a single resample with the full index on both sides is returned.

    Raises:
        ValueError: If the index has duplicates or too few rows for the requested folds.
    """
    if not index.is_unique:
        raise ValueError("Resampling requires a unique row index.")
    n = len(index)
    positions = np.arange(n)

    if control.method == "none":
        return [Resample("Apparent", index, index)]

    if control.method == "boot":
        rng = np.random.default_rng(control.seed)
        resamples = []
        for i in range(1, control.number + 1):
            draw = rng.integers(0, n, size=n)
            oob = np.setdiff1d(positions, draw)
            if oob.size == 0:
                raise ValueError("Bootstrap resample has no out-of-bag rows; use more data.")
            resamples.append(Resample(f"Resample{_pad(i, control.number)}", index[draw], index[oob]))
        return resamples

    if control.number > n:
        raise ValueError(f"Cannot make {control.number} folds from {n} rows.")
    repeats = control.repeats if control.method == "repeatedcv" else 1
    if repeats == 1:
        splitter = KFold(n_splits=control.number, shuffle=True, random_state=control.seed)
    else:
        splitter = RepeatedKFold(n_splits=control.number, n_repeats=repeats, random_state=control.seed)

    resamples = []
    for k, (train_pos, test_pos) in enumerate(splitter.split(positions)):
        fold, rep = k % control.number + 1, k // control.number + 1
        label = f"Fold{_pad(fold, control.number)}.Rep{rep}" if repeats > 1 else f"Fold{_pad(fold, control.number)}"
        resamples.append(Resample(label, index[train_pos], index[test_pos]))
    return resamples


__all__ = ["Resample", "make_resamples"]
