from __future__ import annotations

from typing import Any, Dict

from eda_engine.stats.descriptive import summary_sql, summary_statistics

from .._base import RecipeContext, RecipeMeta, param_list, param_str

META = RecipeMeta(
    slug="summary-statistics",
    title="Summary statistics",
    section="Describing the distribution",
    order=20,
    description=(
        "Aggregate functions give a first numeric picture of each column: "
        "count, sum, mean, minimum, maximum, standard deviation and variance."
    ),
    params={
        "table": "table to summarize (default: base table)",
        "columns": "comma-separated column list (default: every numeric column)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.base_table)
    summaries = summary_statistics(ctx.con, table, param_list(params, "columns") or None)

    notes = []
    mismatched = [s.column for s in summaries if not s.mean_matches_sum()]
    if mismatched:
        notes.append(f"mean differs from sum / count for: {', '.join(mismatched)}")
    else:
        notes.append("For every column the mean equals sum / count.")

    return {
        "sql": [summary_sql(table, s.column) for s in summaries],
        "rows": [s.model_dump() for s in summaries],
        "notes": notes,
    }
