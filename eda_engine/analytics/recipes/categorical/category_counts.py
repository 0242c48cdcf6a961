from __future__ import annotations

from typing import Any, Dict

from eda_engine.engine.duckdb_engine import resolve_column
from eda_engine.stats.categorical import category_counts, category_counts_sql

from .._base import RecipeContext, RecipeMeta, param_str

META = RecipeMeta(
    slug="category-counts",
    title="Category counts and ratios",
    section="Categories",
    order=40,
    description=(
        "GROUP BY tallies how many rows fall into each category; dividing by the "
        "window total turns the counts into ratios."
    ),
    params={
        "table": "table to query (default: age-categorized table)",
        "column": "category column (default: age_group)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.age_table)
    column = resolve_column(ctx.con, table, param_str(params, "column", "age_group"))

    counts = category_counts(ctx.con, table, column)
    total = sum(c.count for c in counts)

    return {
        "sql": [category_counts_sql(table, column)],
        "rows": [c.model_dump() for c in counts],
        "notes": [f"{len(counts)} categories over {total} rows."],
    }
