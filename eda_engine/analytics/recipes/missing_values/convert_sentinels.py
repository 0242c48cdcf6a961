from __future__ import annotations

from typing import Any, Dict

from eda_engine.stats.missing import convert_sentinels_to_null, sentinel_counts, update_sql

from .._base import RecipeContext, RecipeMeta, param_bool, param_list, param_str

META = RecipeMeta(
    slug="convert-sentinels",
    title="Convert NA markers to NULL",
    section="Missing values",
    order=60,
    description=(
        "The sentinel table stores missing measurements as the text 'NA'. Aggregates "
        "would treat that text as data, so each column is updated to hold a real NULL "
        "instead. This recipe modifies the table."
    ),
    params={
        "table": "table to update (default: sentinel table)",
        "columns": "comma-separated columns (default: every text column)",
        "marker": "missing-value marker (default: EDA_MISSING_MARKER)",
        "cast": "alter fully numeric columns to DOUBLE afterwards (default: true)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.sentinel_table)
    marker = param_str(params, "marker", ctx.settings.missing_marker)
    columns = param_list(params, "columns") or None

    before = sentinel_counts(ctx.con, table, marker)
    results = convert_sentinels_to_null(
        ctx.con,
        table,
        columns=columns,
        marker=marker,
        cast_numeric=param_bool(params, "cast", True),
    )
    converted = [r for r in results if r.converted]

    return {
        "sql": [update_sql(table, r.column, marker) for r in converted],
        "rows": [
            {"column": r.column, "markers_before": before.get(r.column, 0), "converted": r.converted, "dtype": r.dtype}
            for r in results
        ],
        "notes": [f"{sum(r.converted for r in results)} cells set to NULL across {len(converted)} columns."],
    }
