"""Tests for the recipe builder and the fit/apply lifecycle."""

import logging

import numpy as np
import pandas as pd
import pytest

from recipe_tlbx.data import Role
from recipe_tlbx.errors import (
    EmptySelectionError,
    FitError,
    NotFittedError,
    SchemaMismatchError,
    UnknownColumnError,
)
from recipe_tlbx.recipe import (
    Center,
    FittedRecipe,
    Recipe,
    RecipeState,
    all_numeric_predictors,
    all_predictors,
    col,
    starts_with,
)


@pytest.fixture
def base_recipe(small_df: pd.DataFrame) -> Recipe:
    return Recipe.from_formula("y ~ .", small_df).update_role("w", Role.AUXILIARY).update_role("label", "id")


@pytest.fixture
def solubility_recipe(solubility_df: pd.DataFrame) -> Recipe:
    return (
        Recipe.from_formula("solubility ~ .", solubility_df)
        .update_role("weight", Role.AUXILIARY)
        .step_nzv(all_predictors())
        .step_pca(starts_with("surf_area_"), num_comp=2, prefix="surf_area_PC")
        .step_corr(all_predictors() - starts_with("surf_area_"), threshold=0.9)
        .step_center(all_predictors())
        .step_scale(all_predictors())
    )


class TestRecipeBuilder:
    def test_builder_returns_new_recipes(self, base_recipe: Recipe) -> None:
        extended = base_recipe.step_center(all_numeric_predictors())

        assert len(base_recipe) == 0
        assert len(extended) == 1
        assert extended is not base_recipe

    def test_default_ids(self, base_recipe: Recipe) -> None:
        rec = base_recipe.step_center(all_numeric_predictors()).step_scale(all_numeric_predictors())
        assert [s.id for s in rec.steps] == ["center_1", "scale_2"]

    def test_duplicate_ids(self, base_recipe: Recipe) -> None:
        rec = base_recipe.step_center(all_numeric_predictors(), id="prep")
        with pytest.raises(ValueError, match="Duplicate step id"):
            rec.step_scale(all_numeric_predictors(), id="prep")

    def test_add_step_requires_step(self, base_recipe: Recipe) -> None:
        with pytest.raises(TypeError):
            base_recipe.add_step("center")  # type: ignore[arg-type]

    def test_add_step_with_declaration(self, base_recipe: Recipe) -> None:
        rec = base_recipe.add_step(Center(col("a")))
        assert rec.steps[0].id == "center_1"

    def test_string_selectors_and_unions(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_rm("b", starts_with("c")).fit(small_df)
        assert fitted.get_step(0).removed == ("b", "c")

    def test_update_role_unknown_column(self, base_recipe: Recipe) -> None:
        with pytest.raises(UnknownColumnError):
            base_recipe.update_role("nope", Role.AUXILIARY)

    def test_update_role_does_not_touch_original(self, base_recipe: Recipe) -> None:
        changed = base_recipe.update_role("a", Role.AUXILIARY)
        assert base_recipe.roles.role_of("a") == Role.PREDICTOR
        assert changed.roles.role_of("a") == Role.AUXILIARY

    def test_roles_property_is_a_copy(self, base_recipe: Recipe) -> None:
        base_recipe.roles.set_role("a", Role.OUTCOME)
        assert base_recipe.roles.role_of("a") == Role.PREDICTOR

    def test_summary_and_describe(self, solubility_recipe: Recipe) -> None:
        summary = solubility_recipe.summary()
        assert list(summary.columns) == ["variable", "type", "role", "source"]
        assert summary.set_index("variable").loc["weight", "role"] == "auxiliary"

        text = solubility_recipe.describe()
        assert "[nzv_1]" in text
        assert "[scale_5]" in text
        assert "starts_with('surf_area_')" in text


class TestFitApplyLifecycle:
    def test_states(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        assert base_recipe.state is RecipeState.UNFIT
        assert base_recipe.fit(small_df).state is RecipeState.FITTED

    def test_fitting_state_only_in_logs(
        self,
        base_recipe: Recipe,
        small_df: pd.DataFrame,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="recipe_tlbx"):
            fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df)

        assert "(fitting)" in caplog.text
        assert base_recipe.state is RecipeState.UNFIT
        assert fitted.state is RecipeState.FITTED

    def test_unfitted_apply_raises(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        with pytest.raises(NotFittedError):
            base_recipe.step_center(all_numeric_predictors()).apply(small_df)

    def test_fit_returns_fitted_recipe(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df)

        assert isinstance(fitted, FittedRecipe)
        assert fitted.predictors == ["a", "b", "c"]
        assert fitted.outcomes == ["y"]

    def test_apply_preserves_rows(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        out = solubility_recipe.fit(solubility_df).apply(solubility_df)
        assert len(out) == len(solubility_df)
        assert out.index.equals(solubility_df.index)

    def test_apply_is_deterministic_and_pure(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        before = solubility_df.copy()
        fitted = solubility_recipe.fit(solubility_df)

        first = fitted.apply(solubility_df)
        second = fitted.apply(solubility_df)

        pd.testing.assert_frame_equal(first, second)
        pd.testing.assert_frame_equal(first, fitted.training)
        pd.testing.assert_frame_equal(solubility_df, before)

    def test_fitting_twice_is_reproducible(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        a = solubility_recipe.fit(solubility_df).apply(solubility_df)
        b = solubility_recipe.fit(solubility_df).apply(solubility_df)
        pd.testing.assert_frame_equal(a, b)

    def test_fitted_state_is_reused_on_new_data(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(col("a")).fit(small_df.iloc[:20])
        new = small_df.iloc[20:]

        out = fitted.apply(new)
        expected = new["a"] - small_df["a"].iloc[:20].mean()
        assert np.allclose(out["a"], expected)

    def test_post_fit_changes_do_not_leak(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        rec = base_recipe.step_center(all_numeric_predictors())
        fitted = rec.fit(small_df)

        rec.update_role("a", Role.AUXILIARY).step_scale(all_numeric_predictors())

        assert fitted.input_schema.get("a").role == Role.PREDICTOR
        assert len(fitted.steps) == 1
        assert len(rec) == 1

    def test_selectors_resolve_at_fit_time(self, small_df: pd.DataFrame) -> None:
        rec = Recipe.from_frame(small_df.drop(columns="label"), outcome="y").step_center(all_predictors())
        rec = rec.update_role("w", Role.AUXILIARY)

        fitted = rec.fit(small_df)
        assert fitted.get_step("center_1").columns == ("a", "b", "c")

    def test_auxiliary_and_custom_roles_pass_through(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        out = base_recipe.step_center(all_numeric_predictors()).fit(small_df).apply(small_df)

        pd.testing.assert_series_equal(out["w"], small_df["w"])
        pd.testing.assert_series_equal(out["label"], small_df["label"])

    def test_training_not_retained(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df, retain=False)
        with pytest.raises(NotFittedError):
            _ = fitted.training

    def test_apply_with_column_selector(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df)
        out = fitted.apply(small_df, columns=all_predictors())
        assert list(out.columns) == ["a", "b", "c"]

    def test_view(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        view = base_recipe.step_center(all_numeric_predictors()).fit(small_df).view(small_df)
        assert view.predictor_cols == ["a", "b", "c"]
        assert view.auxiliary_cols == ["w"]
        assert view.outcome.name == "y"


class TestFitErrors:
    def test_fit_error_points_at_failing_step(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        df = small_df.assign(const=1.0)
        rec = Recipe.from_frame(df, outcome="y").update_role("label", "id")
        rec = rec.step_center(all_numeric_predictors()).step_scale(col("const"))

        with pytest.raises(FitError) as excinfo:
            rec.fit(df)

        err = excinfo.value
        assert err.step_index == 1
        assert err.step_id == "scale_2"
        assert isinstance(err.cause, ValueError)
        assert err.__cause__ is err.cause

    def test_empty_selection_is_a_fit_error(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        with pytest.raises(FitError) as excinfo:
            base_recipe.step_center(starts_with("zzz")).fit(small_df)
        assert isinstance(excinfo.value.cause, EmptySelectionError)

    def test_unknown_column_is_a_fit_error(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        with pytest.raises(FitError) as excinfo:
            base_recipe.step_center(col("nope")).fit(small_df)
        assert isinstance(excinfo.value.cause, UnknownColumnError)

    def test_removed_column_is_unknown_to_later_steps(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        rec = base_recipe.step_rm(col("a")).step_center(col("a"))
        with pytest.raises(FitError) as excinfo:
            rec.fit(small_df)
        assert excinfo.value.step_index == 1

    def test_fit_requires_tracked_columns(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        with pytest.raises(SchemaMismatchError) as excinfo:
            base_recipe.fit(small_df.drop(columns="c"))
        assert excinfo.value.missing == ["c"]
        assert excinfo.value.step_id is None


class TestApplySchemaHandling:
    def test_missing_column_needed_by_step(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df)
        with pytest.raises(SchemaMismatchError) as excinfo:
            fitted.apply(small_df.drop(columns="b"))
        assert excinfo.value.step_id == "center_1"
        assert excinfo.value.missing == ["b"]

    def test_missing_outcome_is_allowed(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df)
        out = fitted.apply(small_df.drop(columns="y"))
        assert "y" not in out.columns
        assert list(out.columns) == ["a", "b", "c", "w", "label"]

    def test_extra_columns_are_dropped(self, base_recipe: Recipe, small_df: pd.DataFrame) -> None:
        fitted = base_recipe.step_center(all_numeric_predictors()).fit(small_df)
        out = fitted.apply(small_df.assign(extra=1.0))
        assert "extra" not in out.columns


class TestSolubilityWorkflow:
    def test_pca_columns_survive_correlation_filter(
        self,
        solubility_recipe: Recipe,
        solubility_df: pd.DataFrame,
    ) -> None:
        fitted = solubility_recipe.fit(solubility_df)
        out = fitted.training

        assert {"surf_area_PC1", "surf_area_PC2"} <= set(out.columns)
        assert not {"surf_area_1", "surf_area_2", "surf_area_3"} & set(out.columns)
        assert not any(t.startswith("surf_area_") for t in fitted.tidy("corr_3")["terms"])

        others = [c for c in fitted.predictors if not c.startswith("surf_area_")]
        corr = out[others].corr().abs().fillna(0.0).to_numpy(copy=True)
        np.fill_diagonal(corr, 0.0)
        assert corr.max() <= 0.9

    def test_apply_ignores_column_order(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        fitted = solubility_recipe.fit(solubility_df)
        reversed_df = solubility_df[solubility_df.columns[::-1]]

        pd.testing.assert_frame_equal(fitted.apply(reversed_df), fitted.apply(solubility_df))

    def test_refit_on_permuted_columns(self, solubility_df: pd.DataFrame) -> None:
        rng = np.random.default_rng(11)
        permuted = solubility_df[list(rng.permutation(solubility_df.columns))]

        def build(df: pd.DataFrame) -> FittedRecipe:
            return (
                Recipe.from_formula("solubility ~ .", df)
                .update_role("weight", Role.AUXILIARY)
                .step_nzv(all_predictors())
                .step_pca(starts_with("surf_area_"), num_comp=2, prefix="surf_area_PC")
                .step_corr(all_predictors() - starts_with("surf_area_"), threshold=0.9)
                .step_center(all_predictors())
                .step_scale(all_predictors())
                .fit(df)
            )

        original, reordered = build(solubility_df), build(permuted)

        assert set(reordered.get_step("corr_3").removed) == set(original.get_step("corr_3").removed)
        assert set(reordered.get_step("nzv_1").removed) == set(original.get_step("nzv_1").removed)
        pd.testing.assert_frame_equal(reordered.training, original.training, check_like=True, atol=1e-8)

    def test_degenerate_fingerprints_removed(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        fitted = solubility_recipe.fit(solubility_df)
        assert set(fitted.get_step("nzv_1").removed) == {"FP018", "FP019", "FP020"}

    def test_roles_after_fit(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        fitted = solubility_recipe.fit(solubility_df)
        summary = fitted.summary().set_index("variable")

        assert summary.loc["surf_area_PC1", "source"] == "derived"
        assert summary.loc["surf_area_PC1", "role"] == "predictor"
        assert summary.loc["weight", "role"] == "auxiliary"
        assert "weight" not in fitted.predictors

    def test_predictors_are_centered_and_scaled(
        self,
        solubility_recipe: Recipe,
        solubility_df: pd.DataFrame,
    ) -> None:
        out = solubility_recipe.fit(solubility_df).training
        preds = out[[c for c in out.columns if c not in ("solubility", "weight")]]

        assert np.allclose(preds.mean(), 0.0, atol=1e-10)
        assert np.allclose(preds.std(ddof=1), 1.0)
        pd.testing.assert_series_equal(out["weight"], solubility_df["weight"])

    def test_tidy_and_history(self, solubility_recipe: Recipe, solubility_df: pd.DataFrame) -> None:
        fitted = solubility_recipe.fit(solubility_df)

        overview = fitted.tidy()
        assert overview["id"].tolist() == ["nzv_1", "pca_2", "corr_3", "center_4", "scale_5"]
        assert overview.loc[1, "n_added"] == 2
        assert overview.loc[1, "n_removed"] == 3

        assert fitted.tidy(3).equals(fitted.tidy("center_4"))
        assert fitted.history[0].n_columns_before == len(solubility_df.columns)

        with pytest.raises(KeyError):
            fitted.get_step("nope")
