"""Role-aware views over processed data."""

from dataclasses import dataclass

import pandas as pd

from .roles import Role, Schema


@dataclass(frozen=True)
class DatasetView:
    """Immutable snapshot of processed data split by column role.

    Attributes:
        df: Processed dataframe (index aligned with the input rows).
        schema: Schema describing the columns of ``df``.
    """

    df: pd.DataFrame
    """Processed dataframe (index aligned with the input rows)."""
    schema: Schema

    @property
    def predictor_cols(self) -> list[str]:
        return self._present(Role.PREDICTOR)

    @property
    def outcome_cols(self) -> list[str]:
        return self._present(Role.OUTCOME)

    @property
    def auxiliary_cols(self) -> list[str]:
        """Auxiliary and case-weight columns, i.e. everything handed to evaluation functions."""
        return self._present(Role.AUXILIARY, Role.CASE_WEIGHT)

    @property
    def case_weight_cols(self) -> list[str]:
        return self._present(Role.CASE_WEIGHT)

    @property
    def predictors(self) -> pd.DataFrame:
        """Return the model matrix: predictor columns only."""
        return self.df.loc[:, self.predictor_cols]

    @property
    def outcome(self) -> pd.Series:
        """Return the single outcome column.

        Raises:
            ValueError: If the view has no outcome or more than one.
        """
        cols = self.outcome_cols
        if len(cols) != 1:
            raise ValueError(f"Expected exactly one outcome column, found {cols}.")
        return self.df[cols[0]]

    @property
    def auxiliary(self) -> pd.DataFrame:
        return self.df.loc[:, self.auxiliary_cols]

    @property
    def case_weights(self) -> pd.Series | None:
        """Return the case-weight column, or ``None`` unless exactly one is present."""
        cols = self.case_weight_cols
        return self.df[cols[0]] if len(cols) == 1 else None

    def _present(self, *roles: str) -> list[str]:
        return [c for c in self.schema.with_role(*roles) if c in self.df.columns]
