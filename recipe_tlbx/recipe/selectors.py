"""Composable column selectors resolved lazily against a schema.

Selectors are small immutable predicates over ``(name, role, type)``. They are
declared when a step is added and only resolved when the recipe is fitted, so
role changes made before fitting are honoured by every step.

Example:
    >>> sel = all_predictors() - starts_with("surf_area_")
    >>> sel.resolve(schema)
    ['FP001', 'FP002', ..., 'MolWeight']

Set operations are evaluated left to right; the resolved names are always
reported in schema order.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from recipe_tlbx.data.roles import ColumnInfo, ColumnType, Role, Schema
from recipe_tlbx.errors import UnknownColumnError


class Selector(ABC):
    """Base class for all selectors."""

    def resolve(self, schema: Schema) -> list[str]:
        """Return the selected column names in schema order."""
        chosen = self._select(schema)
        return [name for name in schema.names if name in chosen]

    @abstractmethod
    def _select(self, schema: Schema) -> set[str]: ...

    def __or__(self, other: Selector) -> Selector:
        return union(self, other)

    def __sub__(self, other: Selector) -> Selector:
        return difference(self, other)

    def __and__(self, other: Selector) -> Selector:
        return intersection(self, other)


class _PredicateSelector(Selector):
    """Selector defined by a per-column predicate."""

    def _select(self, schema: Schema) -> set[str]:
        return {info.name for info in schema if self.matches(info)}

    @abstractmethod
    def matches(self, info: ColumnInfo) -> bool: ...


@dataclass(frozen=True)
class ByName(Selector):
    """Exact column names; every name must exist in the schema."""

    names: tuple[str, ...]

    def _select(self, schema: Schema) -> set[str]:
        missing = [n for n in self.names if n not in schema]
        if missing:
            raise UnknownColumnError(missing, schema.names)
        return set(self.names)

    def __repr__(self) -> str:
        return f"col({', '.join(map(repr, self.names))})"


@dataclass(frozen=True)
class ByPrefix(_PredicateSelector):
    prefix: str

    def matches(self, info: ColumnInfo) -> bool:
        return info.name.startswith(self.prefix)

    def __repr__(self) -> str:
        return f"starts_with({self.prefix!r})"


@dataclass(frozen=True)
class BySuffix(_PredicateSelector):
    suffix: str

    def matches(self, info: ColumnInfo) -> bool:
        return info.name.endswith(self.suffix)

    def __repr__(self) -> str:
        return f"ends_with({self.suffix!r})"


@dataclass(frozen=True)
class BySubstring(_PredicateSelector):
    substring: str

    def matches(self, info: ColumnInfo) -> bool:
        return self.substring in info.name

    def __repr__(self) -> str:
        return f"contains({self.substring!r})"


@dataclass(frozen=True)
class ByPattern(_PredicateSelector):
    """Regular expression searched anywhere in the column name."""

    pattern: str

    def __post_init__(self) -> None:
        re.compile(self.pattern)

    def matches(self, info: ColumnInfo) -> bool:
        return re.search(self.pattern, info.name) is not None

    def __repr__(self) -> str:
        return f"matches({self.pattern!r})"


@dataclass(frozen=True)
class ByRole(_PredicateSelector):
    roles: tuple[str, ...]

    def matches(self, info: ColumnInfo) -> bool:
        return info.role in self.roles

    def __repr__(self) -> str:
        return f"has_role({', '.join(repr(str(r)) for r in self.roles)})"


@dataclass(frozen=True)
class ByType(_PredicateSelector):
    types: tuple[ColumnType, ...]

    def matches(self, info: ColumnInfo) -> bool:
        return info.type in self.types

    def __repr__(self) -> str:
        return f"has_type({', '.join(repr(str(t)) for t in self.types)})"


@dataclass(frozen=True)
class Everything(_PredicateSelector):
    def matches(self, info: ColumnInfo) -> bool:
        return True

    def __repr__(self) -> str:
        return "everything()"


@dataclass(frozen=True)
class Union(Selector):
    left: Selector
    right: Selector

    def _select(self, schema: Schema) -> set[str]:
        return self.left._select(schema) | self.right._select(schema)

    def __repr__(self) -> str:
        return f"({self.left!r} | {self.right!r})"


@dataclass(frozen=True)
class Difference(Selector):
    left: Selector
    right: Selector

    def _select(self, schema: Schema) -> set[str]:
        return self.left._select(schema) - self.right._select(schema)

    def __repr__(self) -> str:
        return f"({self.left!r} - {self.right!r})"


@dataclass(frozen=True)
class Intersection(Selector):
    left: Selector
    right: Selector

    def _select(self, schema: Schema) -> set[str]:
        return self.left._select(schema) & self.right._select(schema)

    def __repr__(self) -> str:
        return f"({self.left!r} & {self.right!r})"


# ------------------------------------------------------------------ constructors
def col(*names: str) -> Selector:
    """Select columns by exact name."""
    if not names:
        raise ValueError("col() needs at least one column name.")
    return ByName(tuple(names))


def starts_with(prefix: str) -> Selector:
    return ByPrefix(prefix)


def ends_with(suffix: str) -> Selector:
    return BySuffix(suffix)


def contains(substring: str) -> Selector:
    return BySubstring(substring)


def matches(pattern: str) -> Selector:
    return ByPattern(pattern)


def has_role(*roles: str) -> Selector:
    if not roles:
        raise ValueError("has_role() needs at least one role.")
    return ByRole(tuple(str(r) for r in roles))


def has_type(*types: ColumnType | str) -> Selector:
    if not types:
        raise ValueError("has_type() needs at least one type.")
    return ByType(tuple(ColumnType(t) for t in types))


def everything() -> Selector:
    return Everything()


def all_predictors() -> Selector:
    return has_role(Role.PREDICTOR)


def all_outcomes() -> Selector:
    return has_role(Role.OUTCOME)


def all_numeric() -> Selector:
    return has_type(ColumnType.NUMERIC)


def all_nominal() -> Selector:
    return has_type(ColumnType.CATEGORICAL)


def all_numeric_predictors() -> Selector:
    return all_predictors() & all_numeric()


def all_nominal_predictors() -> Selector:
    return all_predictors() & all_nominal()


def union(left: Selector, right: Selector) -> Selector:
    return Union(_check(left), _check(right))


def difference(left: Selector, right: Selector) -> Selector:
    return Difference(_check(left), _check(right))


def intersection(left: Selector, right: Selector) -> Selector:
    return Intersection(_check(left), _check(right))


def _check(selector: object) -> Selector:
    if not isinstance(selector, Selector):
        raise TypeError(f"Expected a Selector, got {type(selector).__name__}")
    return selector


__all__ = [
    "ByName",
    "ByPattern",
    "ByPrefix",
    "ByRole",
    "BySubstring",
    "BySuffix",
    "ByType",
    "Difference",
    "Everything",
    "Intersection",
    "Selector",
    "Union",
    "all_nominal",
    "all_nominal_predictors",
    "all_numeric",
    "all_numeric_predictors",
    "all_outcomes",
    "all_predictors",
    "col",
    "contains",
    "difference",
    "ends_with",
    "everything",
    "has_role",
    "has_type",
    "intersection",
    "matches",
    "starts_with",
    "union",
]
