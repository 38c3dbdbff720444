"""Tests for roles, schemas, the role registry and dataset views."""

import pandas as pd
import pytest

from recipe_tlbx.data import ColumnInfo, ColumnType, DatasetView, Role, RoleRegistry, Schema
from recipe_tlbx.errors import UnknownColumnError


class TestColumnType:
    def test_infer(self) -> None:
        assert ColumnType.infer(pd.Series([1, 2, 3])) is ColumnType.NUMERIC
        assert ColumnType.infer(pd.Series([1.5, 2.5])) is ColumnType.NUMERIC
        assert ColumnType.infer(pd.Series(["a", "b"])) is ColumnType.CATEGORICAL
        assert ColumnType.infer(pd.Series([True, False])) is ColumnType.CATEGORICAL
        assert ColumnType.infer(pd.Series(["a", "b"], dtype="category")) is ColumnType.CATEGORICAL


class TestSchema:
    def test_duplicate_names_rejected(self) -> None:
        info = ColumnInfo("a", Role.PREDICTOR, ColumnType.NUMERIC)
        with pytest.raises(ValueError, match="Duplicate"):
            Schema((info, info))

    def test_queries(self) -> None:
        schema = Schema(
            (
                ColumnInfo("a", Role.PREDICTOR, ColumnType.NUMERIC),
                ColumnInfo("b", Role.PREDICTOR, ColumnType.CATEGORICAL),
                ColumnInfo("y", Role.OUTCOME, ColumnType.NUMERIC),
            ),
        )
        assert schema.names == ["a", "b", "y"]
        assert "b" in schema
        assert len(schema) == 3
        assert schema.with_role(Role.PREDICTOR) == ["a", "b"]
        assert schema.with_type(ColumnType.NUMERIC) == ["a", "y"]
        assert schema.drop(["a"]).names == ["b", "y"]
        assert schema.subset(["y", "a", "zzz"]).names == ["a", "y"]

    def test_get_unknown_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            Schema().get("missing")


class TestRoleRegistry:
    def test_from_frame_defaults(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_frame(small_df, outcome="y")

        assert registry.columns_with_role(Role.OUTCOME) == ["y"]
        assert registry.columns_with_role(Role.PREDICTOR) == ["a", "b", "c", "w", "label"]
        assert registry.type_of("label") is ColumnType.CATEGORICAL
        assert registry.type_of("a") is ColumnType.NUMERIC

    def test_from_frame_unknown_outcome(self, small_df: pd.DataFrame) -> None:
        with pytest.raises(UnknownColumnError):
            RoleRegistry.from_frame(small_df, outcome="nope")

    def test_from_frame_rejects_non_string_labels(self) -> None:
        df = pd.DataFrame({0: [1.0, 2.0], 1: [3.0, 4.0], "y": [0.5, 0.7]})
        with pytest.raises(TypeError, match="must be strings"):
            RoleRegistry.from_frame(df, outcome="y")
        with pytest.raises(TypeError):
            RoleRegistry.from_formula("y ~ .", df)

        registry = RoleRegistry.from_frame(df.rename(columns=str), outcome="y")
        assert registry.names == ["0", "1", "y"]

    def test_from_formula_dot(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_formula("y ~ .", small_df)
        assert registry.names == list(small_df.columns)
        assert registry.role_of("y") == Role.OUTCOME

    def test_from_formula_terms_track_only_named_columns(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_formula("y ~ a + b", small_df)
        assert registry.names == ["a", "b", "y"]
        assert "c" not in registry

    def test_from_formula_multiple_outcomes(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_formula("y + c ~ .", small_df)
        assert registry.columns_with_role(Role.OUTCOME) == ["c", "y"]

    @pytest.mark.parametrize("formula", ["y", "y ~ a ~ b", "y ~ ", "y ~ . + a"])
    def test_invalid_formulas(self, small_df: pd.DataFrame, formula: str) -> None:
        with pytest.raises(ValueError):
            RoleRegistry.from_formula(formula, small_df)

    def test_set_role_and_custom_role(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_frame(small_df, outcome="y")
        registry.set_role("w", Role.AUXILIARY)
        registry.set_role("label", "id")

        assert registry.role_of("w") == "auxiliary"
        assert registry.role_of("label") == "id"
        assert "w" not in registry.columns_with_role(Role.PREDICTOR)

    def test_set_role_unknown_column(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_frame(small_df, outcome="y")
        with pytest.raises(UnknownColumnError) as excinfo:
            registry.set_role("nope", Role.AUXILIARY)
        assert excinfo.value.columns == ["nope"]
        assert "a" in excinfo.value.available

    def test_snapshot_and_copy_are_independent(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_frame(small_df, outcome="y")
        snapshot = registry.snapshot()
        clone = registry.copy()

        registry.set_role("a", Role.AUXILIARY)

        assert snapshot.get("a").role == Role.PREDICTOR
        assert clone.role_of("a") == Role.PREDICTOR


class TestDatasetView:
    @pytest.fixture
    def view(self, small_df: pd.DataFrame) -> DatasetView:
        registry = RoleRegistry.from_frame(small_df, outcome="y")
        registry.set_role("w", Role.CASE_WEIGHT)
        registry.set_role("label", "id")
        return DatasetView(df=small_df, schema=registry.snapshot())

    def test_role_split(self, view: DatasetView) -> None:
        assert view.predictor_cols == ["a", "b", "c"]
        assert view.outcome_cols == ["y"]
        assert view.auxiliary_cols == ["w"]
        assert list(view.predictors.columns) == ["a", "b", "c"]
        assert view.outcome.name == "y"

    def test_case_weights(self, view: DatasetView) -> None:
        assert view.case_weight_cols == ["w"]
        assert view.case_weights is not None
        assert view.case_weights.name == "w"

    def test_outcome_requires_exactly_one(self, small_df: pd.DataFrame) -> None:
        registry = RoleRegistry.from_frame(small_df.drop(columns="y"))
        view = DatasetView(df=small_df.drop(columns="y"), schema=registry.snapshot())
        with pytest.raises(ValueError, match="exactly one outcome"):
            _ = view.outcome
