from __future__ import annotations

from typing import Any, Dict

from eda_engine.engine.duckdb_engine import qident
from eda_engine.stats.descriptive import frame_descriptives, require_numeric

from .._base import RecipeContext, RecipeMeta, param_str

META = RecipeMeta(
    slug="distribution-shape",
    title="Distribution shape cross-check",
    section="Describing the distribution",
    order=35,
    description=(
        "Pull one column into memory and recompute its centre, spread and shape "
        "(skewness, kurtosis) to cross-check the SQL aggregates."
    ),
    params={
        "table": "table to query (default: base table)",
        "column": "numeric column (default: Glucose)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.base_table)
    column = require_numeric(ctx.con, table, param_str(params, "column", "Glucose"))

    sql = f"SELECT CAST({qident(column)} AS DOUBLE) AS v FROM {qident(table)}"
    values = ctx.con.execute(sql).fetchdf()["v"].to_numpy(dtype=float)
    stats = frame_descriptives(values)

    return {
        "sql": [sql],
        "rows": [{"statistic": k, "value": v} for k, v in stats.items()],
        "notes": [f"Computed in memory over {stats['n']} non-null values of `{column}`."],
    }
