"""Column-wise numeric transformations: centering, scaling, imputation and power transforms."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar

import numpy as np
import pandas as pd
from scipy import special, stats
from sklearn.impute import SimpleImputer
from sklearn.preprocessing import StandardScaler

from recipe_tlbx.data.roles import Schema

from .base_step import FittedStep, Step


logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ center / scale
@dataclass(frozen=True)
class FittedShiftScale(FittedStep):
    """Per-column ``(x - shift) / scale`` with stored statistics."""

    shift: tuple[float, ...] = ()
    scale: tuple[float, ...] = ()
    statistic: str = "mean"

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        cols = list(self.columns)
        values = df[cols].astype(float)
        if self.shift:
            values = values - np.asarray(self.shift)
        if self.scale:
            values = values / np.asarray(self.scale)
        df[cols] = values
        return df

    def tidy(self) -> pd.DataFrame:
        value = self.shift or self.scale
        return pd.DataFrame(
            {"terms": list(self.columns), "statistic": self.statistic, "value": list(value), "id": self.step_id},
        )


def _finite_or_raise(stat: pd.Series, what: str) -> None:
    bad = stat.index[~np.isfinite(stat.to_numpy(dtype=float))].tolist()
    if bad:
        raise ValueError(f"Cannot compute {what} for column(s) {bad} (all values missing?).")


@dataclass(frozen=True)
class Center(Step):
    """Subtract the training mean from each selected column."""

    kind: ClassVar[str] = "center"

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedShiftScale:
        means = df[list(columns)].astype(float).mean()
        _finite_or_raise(means, "the mean")
        return FittedShiftScale(step_id=self.step_id, columns=columns, shift=tuple(means), statistic="mean")


@dataclass(frozen=True)
class Scale(Step):
    """Divide each selected column by its training standard deviation (``ddof=1``).

    Fitting fails for columns whose standard deviation is zero or undefined.
    """

    kind: ClassVar[str] = "scale"

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedShiftScale:
        sds = df[list(columns)].astype(float).std(ddof=1)
        _finite_or_raise(sds, "the standard deviation")
        constant = sds.index[sds == 0].tolist()
        if constant:
            raise ValueError(f"Cannot scale zero-variance column(s): {constant}")
        return FittedShiftScale(step_id=self.step_id, columns=columns, scale=tuple(sds), statistic="sd")


# ------------------------------------------------------------------ scikit-learn backed
@dataclass(frozen=True)
class FittedSklearnTransform(FittedStep):
    """Wraps a fitted scikit-learn transformer applied to the step's columns."""

    transformer: StandardScaler | SimpleImputer | None = field(default=None, compare=False)

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        cols = list(self.columns)
        df[cols] = self.transformer.transform(df[cols])
        return df

    def tidy(self) -> pd.DataFrame:
        if isinstance(self.transformer, StandardScaler):
            return pd.DataFrame(
                {
                    "terms": list(self.columns),
                    "mean": self.transformer.mean_,
                    "sd": self.transformer.scale_,
                    "id": self.step_id,
                },
            )
        return pd.DataFrame({"terms": list(self.columns), "value": self.transformer.statistics_, "id": self.step_id})


@dataclass(frozen=True)
class Normalize(Step):
    """Center and scale in one step with :class:`sklearn.preprocessing.StandardScaler`.

    Note that :class:`StandardScaler` uses the population standard deviation
    (``ddof=0``), unlike :class:`Scale`.
    """

    kind: ClassVar[str] = "normalize"

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedSklearnTransform:
        scaler = StandardScaler().fit(df[list(columns)].astype(float))
        return FittedSklearnTransform(step_id=self.step_id, columns=columns, transformer=scaler)


@dataclass(frozen=True)
class ImputeMedian(Step):
    """Replace missing values with the training median (:class:`sklearn.impute.SimpleImputer`)."""

    kind: ClassVar[str] = "impute_median"

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedSklearnTransform:
        imputer = SimpleImputer(strategy="median", keep_empty_features=True).fit(df[list(columns)].astype(float))
        return FittedSklearnTransform(step_id=self.step_id, columns=columns, transformer=imputer)


# ------------------------------------------------------------------ power transforms
@dataclass(frozen=True)
class FittedPowerTransform(FittedStep):
    """Per-column power transform with estimated lambdas.

    Attributes:
        lambdas: One lambda per entry of :attr:`transformed`.
        transformed: Columns actually transformed (a subset of ``columns`` for Box-Cox).
        method: ``"yeo_johnson"`` or ``"boxcox"``.
    """

    lambdas: tuple[float, ...] = ()
    transformed: tuple[str, ...] = ()
    method: str = "yeo_johnson"

    @property
    def required_columns(self) -> tuple[str, ...]:
        return self.transformed

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        for name, lmbda in zip(self.transformed, self.lambdas, strict=True):
            values = df[name].to_numpy(dtype=float)
            if self.method == "boxcox":
                df[name] = self._boxcox(name, values, lmbda)
            else:
                df[name] = _yeo_johnson(values, lmbda)
        return df

    def _boxcox(self, name: str, values: np.ndarray, lmbda: float) -> np.ndarray:
        """Box-Cox of the positive entries; non-positive entries become NaN."""
        out = np.full_like(values, np.nan)
        positive = values > 0
        n_bad = int((~positive & ~np.isnan(values)).sum())
        if n_bad:
            logger.warning(
                "Step '%s': %d non-positive value(s) in column '%s' set to NaN (Box-Cox needs positive values)",
                self.step_id,
                n_bad,
                name,
            )
        out[positive] = special.boxcox(values[positive], lmbda)
        return out

    def tidy(self) -> pd.DataFrame:
        return pd.DataFrame({"terms": list(self.transformed), "value": list(self.lambdas), "id": self.step_id})


def _yeo_johnson(values: np.ndarray, lmbda: float) -> np.ndarray:
    out = np.full_like(values, np.nan)
    mask = ~np.isnan(values)
    out[mask] = stats.yeojohnson(values[mask], lmbda=lmbda)
    return out


@dataclass(frozen=True)
class YeoJohnson(Step):
    """Yeo-Johnson transform with lambdas estimated by maximum likelihood (:func:`scipy.stats.yeojohnson_normmax`)."""

    kind: ClassVar[str] = "yeo_johnson"

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedPowerTransform:
        lambdas = []
        for name in columns:
            values = df[name].dropna().to_numpy(dtype=float)
            if np.unique(values).size < 2:
                raise ValueError(f"Cannot estimate a Yeo-Johnson lambda for constant column '{name}'.")
            lambdas.append(float(stats.yeojohnson_normmax(values)))
        return FittedPowerTransform(
            step_id=self.step_id,
            columns=columns,
            lambdas=tuple(lambdas),
            transformed=columns,
            method="yeo_johnson",
        )


@dataclass(frozen=True)
class BoxCox(Step):
    """Box-Cox transform for strictly positive columns.

    Columns with non-positive or constant values are left untouched and
    reported with a warning.
    """

    kind: ClassVar[str] = "boxcox"

    def _fit(self, df: pd.DataFrame, schema: Schema, columns: tuple[str, ...]) -> FittedPowerTransform:
        transformed, lambdas = [], []
        for name in columns:
            values = df[name].dropna().to_numpy(dtype=float)
            if values.size == 0 or (values <= 0).any() or np.unique(values).size < 2:
                logger.warning(
                    "Step '%s': skipping column '%s' (Box-Cox needs non-constant positive values)",
                    self.step_id,
                    name,
                )
                continue
            transformed.append(name)
            lambdas.append(float(stats.boxcox_normmax(values, method="mle")))
        return FittedPowerTransform(
            step_id=self.step_id,
            columns=columns,
            lambdas=tuple(lambdas),
            transformed=tuple(transformed),
            method="boxcox",
        )
