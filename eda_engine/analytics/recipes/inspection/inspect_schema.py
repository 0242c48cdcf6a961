from __future__ import annotations

from typing import Any, Dict

from eda_engine.engine.duckdb_engine import qident
from eda_engine.engine.profiling import build_profile

from .._base import RecipeContext, RecipeMeta, param_int, param_str

META = RecipeMeta(
    slug="inspect-schema",
    title="Inspect schema and sample rows",
    section="Getting to know the table",
    order=10,
    description=(
        "Start by looking at what the table holds: column names, declared types, "
        "how many rows there are, and the first few observations."
    ),
    params={
        "table": "table to inspect (default: base table)",
        "limit": "number of sample rows (default: EDA_SAMPLE_ROWS)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.base_table)
    limit = param_int(params, "limit", ctx.settings.sample_rows)

    profile = build_profile(ctx.con, table, sample_limit=limit)

    return {
        "sql": [
            f"DESCRIBE {qident(table)}",
            f"SELECT COUNT(*) FROM {qident(table)}",
            f"SELECT * FROM {qident(table)} LIMIT {limit}",
        ],
        "rows": [c.model_dump() for c in profile.columns],
        "tables": {"sample rows": profile.sample_rows},
        "notes": [f"`{table}` has {profile.n_rows} rows and {profile.n_cols} columns."],
    }
