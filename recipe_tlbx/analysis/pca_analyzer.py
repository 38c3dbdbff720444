"""PCA analysis used by the projection step."""

from dataclasses import dataclass
from typing import Self

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from .base_analyser import BaseAnalyser


@dataclass(frozen=True)
class PCAResult:
    """PCA outputs packaged for steps, reporting and plotting.

    Attributes:
        model: The fitted scikit-learn PCA model (all components).
        loadings: DataFrame of feature loadings; index = original feature names,
            columns `PC1..PCk`. Each column is a unit-length eigenvector of the sample
            covariance matrix; the signs are arbitrary.
        explained_variance: DataFrame with columns `PC`, `variance`,
            `explained_ratio`, `cumulative_ratio` for each component.
    """

    model: PCA
    loadings: pd.DataFrame
    explained_variance: pd.DataFrame

    def n_components_for(self, threshold: float) -> int:
        """Smallest number of components whose cumulative explained ratio reaches ``threshold``."""
        if not 0 < threshold <= 1:
            raise ValueError("threshold must be in (0, 1].")
        cumulative = self.explained_variance["cumulative_ratio"].to_numpy()
        # float noise can leave the last cumulative ratio a hair under 1.0
        reached = np.flatnonzero(cumulative >= threshold - 1e-12)
        return int(reached[0]) + 1 if reached.size else len(cumulative)

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_explained_variance(self, **kwargs: object):
        """Plot explained variance using shared plotting helper."""
        from recipe_tlbx.plotting.recipe_plots import plot_explained_variance  # noqa: PLC0415

        return plot_explained_variance(self, **kwargs)


class PCAAnalyzer(BaseAnalyser):
    """Analyzer for Principal Component Analysis (PCA).

    Example:
        >>> res = PCAAnalyzer(df[["surf_area_1", "surf_area_2", "surf_area_3"]]).fit().result()
        >>> res.n_components_for(0.95)
        1
    """

    def __init__(self, df: pd.DataFrame):
        """Initialize the PCA analyzer with the columns to decompose."""
        self._df = df
        self._pca_model: PCA | None = None

    def fit(self, n_components: int | None = None) -> Self:
        r"""Fit a PCA model using :class:`sklearn.decomposition.PCA`.

        Principal Component Analysis projects the data matrix **X** onto a new orthonormal
        basis of maximal variance. The columns of this basis are eigenvectors of Cov(**X**, **X**),
        ordered by descending eigenvalue. scikit-learn centers **X** but does not scale it.
        """
        if self._df.empty:
            raise ValueError("No data to fit PCA on.")

        self._pca_model = PCA(n_components=n_components)
        self._pca_model.fit(self._df)
        return self

    @property
    def model(self) -> PCA:
        """Return the fitted scikit-learn PCA model."""
        if self._pca_model is None:
            raise ValueError("PCA model not fitted. Call fit() first.")
        return self._pca_model

    def get_explained_variance(self) -> pd.DataFrame:
        """Summarize component-wise variance contributions and cumulative totals."""
        model = self.model
        n_components = len(model.explained_variance_ratio_)

        return pd.DataFrame(
            {
                "PC": [f"PC{i + 1}" for i in range(n_components)],
                "variance": model.explained_variance_,
                "explained_ratio": model.explained_variance_ratio_,
                "cumulative_ratio": model.explained_variance_ratio_.cumsum(),
            },
        )

    def get_loading_vectors(self) -> pd.DataFrame:
        """Return PCA loading vectors linking original features to component axes."""
        model = self.model
        return pd.DataFrame(
            model.components_.T,
            index=list(self._df.columns),
            columns=[f"PC{i}" for i in range(1, model.n_components_ + 1)],
        )

    def result(self) -> PCAResult:
        """Collect the model, loadings and variance diagnostics for downstream use."""
        return PCAResult(
            model=self.model,
            loadings=self.get_loading_vectors(),
            explained_variance=self.get_explained_variance(),
        )
