from __future__ import annotations

from typing import Any, Dict

from eda_engine.engine.duckdb_engine import qident
from eda_engine.engine.profiling import row_count
from eda_engine.stats.missing import zero_counts

from .._base import RecipeContext, RecipeMeta, param_list, param_str

META = RecipeMeta(
    slug="zero-readings",
    title="Zeros standing in for missing readings",
    section="Missing values",
    order=55,
    description=(
        "A glucose level, blood pressure or BMI of zero is not a real measurement. "
        "Counting zeros shows how much data is silently missing before any NA marker appears."
    ),
    params={
        "table": "table to query (default: base table)",
        "columns": "comma-separated columns (default: EDA_ZERO_AS_MISSING)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.base_table)
    columns = param_list(params, "columns") or list(ctx.settings.zero_as_missing)

    counts = zero_counts(ctx.con, table, columns)
    total = row_count(ctx.con, table)

    return {
        "sql": [
            f"SELECT COUNT(*) FROM {qident(table)} WHERE {qident(c)} = 0" for c in counts
        ],
        "rows": [
            {"column": c, "zeros": n, "share": (n / total) if total else 0.0}
            for c, n in counts.items()
        ],
        "notes": [],
    }
