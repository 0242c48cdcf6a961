from __future__ import annotations

from typing import Any, Dict

from eda_engine.engine.profiling import describe_table
from eda_engine.stats.missing import missing_rate, null_summary, null_summary_sql

from .._base import RecipeContext, RecipeMeta, param_str

META = RecipeMeta(
    slug="null-summary",
    title="Null counts and frequencies",
    section="Missing values",
    order=70,
    description=(
        "COUNT(column) skips NULLs, so rows minus COUNT(column) is the number of missing "
        "values; dividing by the row count gives the missing frequency."
    ),
    params={"table": "table to query (default: sentinel table)"},
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.sentinel_table)
    summary = null_summary(ctx.con, table)
    with_nulls = [s.column for s in summary if s.null_count]

    return {
        "sql": [null_summary_sql(table, [c.name for c in describe_table(ctx.con, table)])],
        "rows": [s.model_dump() for s in summary],
        "notes": [
            f"Columns with missing values: {', '.join(with_nulls)}."
            if with_nulls
            else "No column has missing values.",
            f"{missing_rate(ctx.con, table):.1%} of all cells are NULL.",
        ],
    }
