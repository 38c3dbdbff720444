"""Column roles, declared types and the role registry."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from pandas.api.types import is_bool_dtype, is_numeric_dtype

from recipe_tlbx.errors import UnknownColumnError


if TYPE_CHECKING:
    import pandas as pd


class Role(StrEnum):
    """Standard semantic roles a column can hold.

    Any other string is accepted wherever a role is expected and acts as a
    custom role (e.g. ``"id"``); custom-role columns are carried through a
    recipe but never reach the model.
    """

    PREDICTOR = "predictor"
    OUTCOME = "outcome"
    AUXILIARY = "auxiliary"
    """Excluded from the model fit, exposed to evaluation functions."""
    CASE_WEIGHT = "case_weight"


class ColumnType(StrEnum):
    """Declared semantic type of a column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"

    @classmethod
    def infer(cls, series: pd.Series) -> ColumnType:
        """Infer the semantic type from a pandas dtype (booleans count as categorical)."""
        if is_numeric_dtype(series) and not is_bool_dtype(series):
            return cls.NUMERIC
        return cls.CATEGORICAL


@dataclass(frozen=True)
class ColumnInfo:
    """Metadata for a tracked column.

    Attributes:
        name: Column name as it appears in the DataFrame.
        role: Semantic role (a :class:`Role` member or a custom string).
        type: Declared semantic type.
        source: ``"original"`` for template columns, ``"derived"`` for columns created by a step.
    """

    name: str
    role: str
    type: ColumnType
    source: str = "original"


@dataclass(frozen=True)
class Schema:
    """Immutable, ordered snapshot of tracked columns."""

    columns: tuple[ColumnInfo, ...] = ()

    def __post_init__(self) -> None:
        names = [c.name for c in self.columns]
        if len(names) != len(set(names)):
            dupes = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate column names in schema: {dupes}")

    def __iter__(self) -> Iterator[ColumnInfo]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, name: object) -> bool:
        return any(c.name == name for c in self.columns)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    def get(self, name: str) -> ColumnInfo:
        """Return the column info for ``name``.

        Raises:
            UnknownColumnError: If the column is not tracked.
        """
        for info in self.columns:
            if info.name == name:
                return info
        raise UnknownColumnError(name, self.names)

    def with_role(self, *roles: str) -> list[str]:
        return [c.name for c in self.columns if c.role in roles]

    def with_type(self, *types: ColumnType) -> list[str]:
        return [c.name for c in self.columns if c.type in types]

    def drop(self, names: Iterable[str]) -> Schema:
        drop = set(names)
        return Schema(tuple(c for c in self.columns if c.name not in drop))

    def extend(self, infos: Iterable[ColumnInfo]) -> Schema:
        return Schema((*self.columns, *infos))

    def subset(self, names: Iterable[str]) -> Schema:
        """Keep only ``names`` (schema order is preserved, unknown names are ignored)."""
        keep = set(names)
        return Schema(tuple(c for c in self.columns if c.name in keep))


class RoleRegistry:
    """Mutable mapping from column name to role, built from a template frame.

    Example:
        >>> registry = RoleRegistry.from_frame(df, outcome="solubility")
        >>> registry.set_role("weight", Role.AUXILIARY)
        >>> registry.columns_with_role(Role.PREDICTOR)
    """

    def __init__(self, columns: Sequence[ColumnInfo]) -> None:
        self._columns: dict[str, ColumnInfo] = {}
        for info in columns:
            if info.name in self._columns:
                raise ValueError(f"Duplicate column '{info.name}' in role registry.")
            self._columns[info.name] = info

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        outcome: str | Sequence[str] | None = None,
        *,
        columns: Sequence[str] | None = None,
    ) -> RoleRegistry:
        """Build a registry where ``outcome`` columns are outcomes and the rest predictors.

        Args:
            df: Template frame used to read column names and infer types.
            outcome: One or more outcome column names.
            columns: Optional subset of ``df`` columns to track (defaults to all).

        Raises:
            TypeError: If ``df`` has non-string column labels.
            UnknownColumnError: If an outcome or tracked column is not in ``df``.
        """
        bad_labels = [c for c in df.columns if not isinstance(c, str)]
        if bad_labels:
            raise TypeError(f"Column labels must be strings; got {bad_labels!r}. Rename the columns first.")

        outcomes = [outcome] if isinstance(outcome, str) else list(outcome or [])
        tracked = list(columns) if columns is not None else list(df.columns)

        missing = [c for c in [*tracked, *outcomes] if c not in df.columns]
        if missing:
            raise UnknownColumnError(missing, list(df.columns))

        for name in outcomes:
            if name not in tracked:
                tracked.append(name)

        return cls(
            [
                ColumnInfo(
                    name=name,
                    role=str(Role.OUTCOME if name in outcomes else Role.PREDICTOR),
                    type=ColumnType.infer(df[name]),
                )
                for name in tracked
            ],
        )

    @classmethod
    def from_formula(cls, formula: str, df: pd.DataFrame) -> RoleRegistry:
        """Build a registry from a ``"outcome ~ predictors"`` declaration.

        ``y ~ .`` tracks every column, ``y ~ a + b`` tracks only ``y``, ``a`` and ``b``.
        Several outcomes are joined with ``+`` on the left-hand side.
        """
        if formula.count("~") != 1:
            raise ValueError(f"Formula must contain exactly one '~': {formula!r}")
        lhs, rhs = (side.strip() for side in formula.split("~"))
        outcomes = _split_terms(lhs)
        terms = _split_terms(rhs)
        if not terms:
            raise ValueError(f"Formula has no right-hand side terms: {formula!r}")

        if terms == ["."]:
            return cls.from_frame(df, outcome=outcomes)
        if "." in terms:
            raise ValueError("'.' cannot be combined with other terms in a formula.")
        return cls.from_frame(df, outcome=outcomes, columns=[t for t in terms if t not in outcomes])

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def __len__(self) -> int:
        return len(self._columns)

    @property
    def names(self) -> list[str]:
        return list(self._columns)

    def set_role(self, column: str, role: str) -> None:
        """Reassign the role of ``column``.

        Raises:
            UnknownColumnError: If the column is not part of the reference schema.
        """
        if column not in self._columns:
            raise UnknownColumnError(column, self.names)
        self._columns[column] = replace(self._columns[column], role=str(role))

    def role_of(self, column: str) -> str:
        if column not in self._columns:
            raise UnknownColumnError(column, self.names)
        return self._columns[column].role

    def type_of(self, column: str) -> ColumnType:
        if column not in self._columns:
            raise UnknownColumnError(column, self.names)
        return self._columns[column].type

    def columns_with_role(self, role: str) -> list[str]:
        """Column names holding ``role``, in schema order."""
        return [name for name, info in self._columns.items() if info.role == role]

    def snapshot(self) -> Schema:
        """Freeze the current assignments into a :class:`Schema`."""
        return Schema(tuple(self._columns.values()))

    def copy(self) -> RoleRegistry:
        return RoleRegistry(list(self._columns.values()))

    def __repr__(self) -> str:
        counts: dict[str, int] = {}
        for info in self._columns.values():
            counts[info.role] = counts.get(info.role, 0) + 1
        return f"RoleRegistry({counts})"


def _split_terms(side: str) -> list[str]:
    return [term.strip() for term in side.split("+") if term.strip()]


__all__ = ["ColumnInfo", "ColumnType", "Role", "RoleRegistry", "Schema"]
