from __future__ import annotations

import duckdb
import pytest

from eda_engine.analytics.recipes._base import (
    RecipeContext,
    param_bool,
    param_float,
    param_list,
    param_str,
)
from eda_engine.analytics.recipes.registry import get_recipe, load_all_meta, recipes_by_slug
from eda_engine.config import Settings
from eda_engine.engine.ingest import create_age_table, derive_sentinel_table
from eda_engine.errors import InvalidParameterError

EXPECTED_SLUGS = {
    "inspect-schema",
    "summary-statistics",
    "percentiles",
    "distribution-shape",
    "category-counts",
    "outcome-by-category",
    "iqr-outliers",
    "zero-readings",
    "convert-sentinels",
    "null-summary",
}


@pytest.fixture
def ctx(con: duckdb.DuckDBPyConnection, settings: Settings) -> RecipeContext:
    create_age_table(con, "diabetes", "diabetes_age")
    derive_sentinel_table(con, "diabetes", "diabetes_na", settings.zero_as_missing)
    return RecipeContext(con=con, settings=settings)


def test_registry_discovers_all_recipes() -> None:
    assert set(recipes_by_slug()) == EXPECTED_SLUGS


def test_registry_orders_by_walkthrough_position() -> None:
    orders = [m.order for m in load_all_meta()]
    assert orders == sorted(orders)
    assert load_all_meta()[0].slug == "inspect-schema"


def test_unknown_recipe() -> None:
    with pytest.raises(InvalidParameterError) as exc:
        get_recipe("regression")
    assert exc.value.hints


def test_param_helpers() -> None:
    assert param_list({"c": "a, b,,c"}, "c") == ["a", "b", "c"]
    assert param_list({"c": ["x", " y "]}, "c") == ["x", "y"]
    assert param_float({"k": "2.5"}, "k") == 2.5
    assert param_float({}, "k", 1.5) == 1.5
    assert param_bool({"cast": "false"}, "cast", True) is False
    assert param_str({}, "table", "diabetes") == "diabetes"
    with pytest.raises(InvalidParameterError):
        param_float({"k": "abc"}, "k")
    with pytest.raises(InvalidParameterError):
        param_str({}, "table")


def test_inspect_schema(ctx: RecipeContext) -> None:
    out = get_recipe("inspect-schema").run(ctx, {"limit": "2"})
    assert len(out["rows"]) == 9
    assert len(out["tables"]["sample rows"]) == 2
    assert "12 rows" in out["notes"][0]


def test_summary_statistics_recipe(ctx: RecipeContext) -> None:
    out = get_recipe("summary-statistics").run(ctx, {"columns": "Glucose,BMI"})
    assert [r["column"] for r in out["rows"]] == ["Glucose", "BMI"]
    assert out["rows"][0]["sum"] == 1441
    assert len(out["sql"]) == 2
    assert "sum / count" in out["notes"][0]


def test_percentiles_recipe(ctx: RecipeContext) -> None:
    out = get_recipe("percentiles").run(ctx, {"column": "Glucose", "percentiles": "0.5", "buckets": "4"})
    assert out["rows"][0]["approx"] == 116
    assert len(out["tables"]["NTILE(4) buckets"]) == 4


def test_percentiles_recipe_rejects_text(ctx: RecipeContext) -> None:
    with pytest.raises(InvalidParameterError):
        get_recipe("percentiles").run(ctx, {"percentiles": "half"})


def test_distribution_shape_recipe(ctx: RecipeContext) -> None:
    out = get_recipe("distribution-shape").run(ctx, {"column": "Glucose"})
    stats = {r["statistic"]: r["value"] for r in out["rows"]}
    assert stats["n"] == 12
    assert stats["max"] == 197


def test_category_recipes(ctx: RecipeContext) -> None:
    counts = get_recipe("category-counts").run(ctx, {})
    assert sum(r["count"] for r in counts["rows"]) == 12
    rates = get_recipe("outcome-by-category").run(ctx, {"outcome": "outcome"})
    assert {r["value"] for r in rates["rows"]} == {"<=30", "31-40", "41-50", "51-60"}


def test_iqr_outliers_from_quartile_literals(ctx: RecipeContext) -> None:
    out = get_recipe("iqr-outliers").run(ctx, {"column": "Glucose", "q1": "100", "q3": "144"})
    row = out["rows"][0]
    assert (row["lower"], row["upper"]) == (34.0, 210.0)
    assert row["outliers"] == 1
    assert "IQR=44" in out["notes"][0]


def test_iqr_outliers_fixed_and_dynamic(ctx: RecipeContext) -> None:
    fixed = get_recipe("iqr-outliers").run(ctx, {"lower": 80, "upper": 190})
    assert fixed["rows"][0]["below"] == 2
    assert fixed["rows"][0]["above"] == 1
    dynamic = get_recipe("iqr-outliers").run(ctx, {})
    assert dynamic["rows"][0]["lower"] == -9.5


@pytest.mark.parametrize(
    "params",
    [{"lower": "50"}, {"upper": 190}, {"q1": 100}, {"q3": "144"}],
)
def test_iqr_outliers_rejects_half_a_pair(ctx: RecipeContext, params: dict) -> None:
    with pytest.raises(InvalidParameterError) as exc:
        get_recipe("iqr-outliers").run(ctx, {"column": "Glucose", **params})
    assert "must be given together" in exc.value.message


def test_zero_readings_recipe(ctx: RecipeContext) -> None:
    out = get_recipe("zero-readings").run(ctx, {})
    zeros = {r["column"]: r["zeros"] for r in out["rows"]}
    assert zeros["Insulin"] == 8
    assert len(out["sql"]) == len(out["rows"])


def test_missing_value_recipes(ctx: RecipeContext) -> None:
    before = get_recipe("null-summary").run(ctx, {})
    assert before["notes"] == ["No column has missing values.", "0.0% of all cells are NULL."]

    converted = get_recipe("convert-sentinels").run(ctx, {})
    by_col = {r["column"]: r for r in converted["rows"]}
    assert by_col["SkinThickness"]["markers_before"] == 6
    assert by_col["SkinThickness"]["converted"] == 6
    assert len(converted["sql"]) == 5
    assert all(stmt.startswith('UPDATE "diabetes_na"') for stmt in converted["sql"])

    after = get_recipe("null-summary").run(ctx, {})
    nulls = {r["column"]: r["null_count"] for r in after["rows"]}
    assert nulls["Insulin"] == 8
    assert "Insulin" in after["notes"][0]
    assert after["notes"][1] == "15.7% of all cells are NULL."
