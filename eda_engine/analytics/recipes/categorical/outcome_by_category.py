from __future__ import annotations

from typing import Any, Dict

from eda_engine.engine.duckdb_engine import resolve_column
from eda_engine.stats.categorical import outcome_rate_by_category, outcome_rate_sql
from eda_engine.stats.descriptive import require_numeric

from .._base import RecipeContext, RecipeMeta, param_str

META = RecipeMeta(
    slug="outcome-by-category",
    title="Outcome ratio per category",
    section="Categories",
    order=45,
    description="Share of rows with a positive outcome flag within each category.",
    params={
        "table": "table to query (default: age-categorized table)",
        "column": "category column (default: age_group)",
        "outcome": "binary outcome column (default: EDA_OUTCOME_COLUMN)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.age_table)
    column = resolve_column(ctx.con, table, param_str(params, "column", "age_group"))
    outcome = require_numeric(ctx.con, table, param_str(params, "outcome", ctx.settings.outcome_column))

    rates = outcome_rate_by_category(ctx.con, table, column, outcome)

    return {
        "sql": [outcome_rate_sql(table, column, outcome)],
        "rows": [r.model_dump() for r in rates],
        "notes": [],
    }
