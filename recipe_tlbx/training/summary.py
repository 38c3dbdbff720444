"""Evaluation inputs and built-in summary functions.

A summary function receives an :class:`EvaluationData` for one held-out
resample plus the fitted model and returns ``{metric_name: value}``. This is
the only place where auxiliary-role columns reach user code.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error

from recipe_tlbx.errors import UnknownColumnError


@dataclass(frozen=True)
class EvaluationData:
    """Hold-out predictions of one resample, keyed by original row index.

    Attributes:
        pred: Model predictions.
        obs: Observed outcome values.
        auxiliary: Auxiliary and case-weight columns of the same rows.
        fold: Label of the resample.
    """

    pred: pd.Series
    obs: pd.Series
    auxiliary: pd.DataFrame
    fold: str

    def __post_init__(self) -> None:
        if not (self.pred.index.equals(self.obs.index) and self.obs.index.equals(self.auxiliary.index)):
            raise ValueError(f"Evaluation inputs for '{self.fold}' are not row-aligned.")

    @property
    def frame(self) -> pd.DataFrame:
        """``pred``, ``obs`` and the auxiliary columns side by side."""
        return pd.concat([self.pred.rename("pred"), self.obs.rename("obs"), self.auxiliary], axis=1).assign(
            fold=self.fold,
        )

    def __len__(self) -> int:
        return len(self.pred)


def default_summary(data: EvaluationData, model: Any = None) -> dict[str, float]:
    """RMSE, squared correlation (``Rsquared``) and MAE of the hold-out predictions."""
    obs = data.obs.to_numpy(dtype=float)
    pred = data.pred.to_numpy(dtype=float)
    if obs.size > 1 and np.std(obs) > 0 and np.std(pred) > 0:
        rsq = float(np.corrcoef(obs, pred)[0, 1] ** 2)
    else:
        rsq = float("nan")
    return {
        "RMSE": float(np.sqrt(mean_squared_error(obs, pred))),
        "Rsquared": rsq,
        "MAE": float(mean_absolute_error(obs, pred)),
    }


def make_weighted_rmse(
    weight_col: str,
    name: str = "RMSE_wt",
    *,
    include_default: bool = True,
) -> Callable[[EvaluationData, Any], dict[str, float]]:
    """Build a summary function computing RMSE weighted by an auxiliary column.

    Args:
        weight_col: Auxiliary column holding the per-row weights.
        name: Metric name of the weighted RMSE.
        include_default: Also report the :func:`default_summary` metrics.

    Example:
        >>> control = TrainControl(summary=make_weighted_rmse("weight"), metric="RMSE_wt")
    """

    def weighted_rmse(data: EvaluationData, model: Any = None) -> dict[str, float]:
        if weight_col not in data.auxiliary.columns:
            raise UnknownColumnError(weight_col, list(data.auxiliary.columns))
        weights = data.auxiliary[weight_col].to_numpy(dtype=float)
        err = data.pred.to_numpy(dtype=float) - data.obs.to_numpy(dtype=float)
        out = default_summary(data, model) if include_default else {}
        out[name] = float(np.sqrt(np.sum(weights * err**2) / np.sum(weights)))
        return out

    return weighted_rmse


__all__ = ["EvaluationData", "default_summary", "make_weighted_rmse"]
