from __future__ import annotations

from typing import Any, Dict, List

from eda_engine.errors import InvalidParameterError
from eda_engine.stats.descriptive import require_numeric
from eda_engine.stats.outliers import count_outliers, detect_outliers, iqr_bounds, outlier_count_sql
from eda_engine.stats.percentiles import quartiles

from .._base import RecipeContext, RecipeMeta, param_float, param_int, param_str

META = RecipeMeta(
    slug="iqr-outliers",
    title="Outliers by the IQR rule",
    section="Outliers",
    order=50,
    description=(
        "Values below Q1 - 1.5*IQR or above Q3 + 1.5*IQR are flagged as outliers. "
        "The bounds are worked out from the quartiles first and then written into "
        "the query as fixed numbers."
    ),
    params={
        "table": "table to query (default: base table)",
        "column": "numeric column (default: Glucose)",
        "lower": "fixed lower bound",
        "upper": "fixed upper bound",
        "q1": "first quartile to derive bounds from",
        "q3": "third quartile to derive bounds from",
        "k": "fence multiplier (default: 1.5)",
        "sample": "how many outlying values to list (default: 10)",
    },
)


def run(ctx: RecipeContext, params: Dict[str, Any]) -> Dict[str, Any]:
    table = param_str(params, "table", ctx.settings.base_table)
    column = require_numeric(ctx.con, table, param_str(params, "column", "Glucose"))
    k = param_float(params, "k", 1.5)
    sample = param_int(params, "sample", 10)

    lower = param_float(params, "lower")
    upper = param_float(params, "upper")
    q1 = param_float(params, "q1")
    q3 = param_float(params, "q3")
    notes: List[str] = []

    for (first, a), (second, b) in ((("lower", lower), ("upper", upper)), (("q1", q1), ("q3", q3))):
        if (a is None) != (b is None):
            raise InvalidParameterError(
                f"'{first}' and '{second}' must be given together",
                hints=[f"Pass both {first}= and {second}=, or neither to derive bounds from NTILE quartiles"],
                context={"given": first if a is not None else second},
            )

    if lower is not None and upper is not None:
        report = count_outliers(ctx.con, table, column, lower, upper, sample)
        notes.append(f"Using the fixed bounds [{lower:g}, {upper:g}].")
    elif q1 is not None and q3 is not None:
        lower, upper = iqr_bounds(q1, q3, k)
        report = count_outliers(ctx.con, table, column, lower, upper, sample)
        notes.append(
            f"Q1={q1:g}, Q3={q3:g} give IQR={q3 - q1:g}, so the bounds are [{lower:g}, {upper:g}]."
        )
    else:
        q = quartiles(ctx.con, table, column)
        report = detect_outliers(ctx.con, table, column, k, sample)
        notes.append(
            f"NTILE quartiles Q1={q.q1:g}, Q3={q.q3:g} give IQR={q.iqr:g}, "
            f"so the bounds are [{report.lower:g}, {report.upper:g}]."
        )

    notes.append(
        f"{report.outliers} of {report.total} values ({report.share:.1%}) fall outside the bounds."
    )

    row = report.model_dump()
    row["outliers"] = report.outliers
    row["share"] = report.share
    return {
        "sql": [outlier_count_sql(table, column, report.lower, report.upper)],
        "rows": [row],
        "notes": notes,
    }
