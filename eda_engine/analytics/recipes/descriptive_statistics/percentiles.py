from __future__ import annotations

from typing import Any, Dict

from eda_engine.errors import InvalidParameterError
from eda_engine.stats.descriptive import require_numeric
from eda_engine.stats.percentiles import ntile_buckets, ntile_sql, percentile_table

from .._base import RecipeContext, RecipeMeta, param_int, param_list, param_str

META = RecipeMeta(
    slug="percentiles",
    title="Percentiles by bucket ranking",
    section="Describing the distribution",
    order=30,
    description=(
        "NTILE splits the sorted values into equal-sized buckets; the largest value "
        "in a bucket approximates the matching percentile. NTILE(4) gives the quartiles."
    ),
    params={
        "table": "table to query (default: base table)",
        "column": "numeric column (default: Glucose)",
        "percentiles": "comma-separated fractions (default: 0.25,0.5,0.75)",
        "buckets": "bucket count for the approximation (default: 100)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.base_table)
    column = require_numeric(ctx.con, table, param_str(params, "column", "Glucose"))
    buckets = param_int(params, "buckets", 100)
    raw = param_list(params, "percentiles") or ["0.25", "0.5", "0.75"]
    try:
        ps = [float(p) for p in raw]
    except ValueError:
        raise InvalidParameterError(f"percentiles must be numbers (got {raw})")

    values = percentile_table(ctx.con, table, column, ps, buckets)
    quartile_buckets = ntile_buckets(ctx.con, table, column, 4)

    return {
        "sql": [ntile_sql(table, column, buckets), ntile_sql(table, column, 4)],
        "rows": [v.model_dump() for v in values],
        "tables": {"NTILE(4) buckets": [b.model_dump() for b in quartile_buckets]},
        "notes": ["`exact` is DuckDB's interpolated quantile_cont, shown for comparison."],
    }
