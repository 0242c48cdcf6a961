"""Column-wise summary statistics computed with SQL aggregates."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import duckdb
import numpy as np
from scipy import stats

from eda_engine.engine.duckdb_engine import qident, resolve_column
from eda_engine.engine.profiling import describe_table
from eda_engine.errors import InvalidParameterError
from eda_engine.models.results import ColumnSummary

# (output key, SQL aggregate)
AGGREGATES = [
    ("count", "COUNT"),
    ("sum", "SUM"),
    ("mean", "AVG"),
    ("min", "MIN"),
    ("max", "MAX"),
    ("stddev", "STDDEV_SAMP"),
    ("variance", "VAR_SAMP"),
    ("stddev_pop", "STDDEV_POP"),
    ("variance_pop", "VAR_POP"),
]


def _float(v: Any) -> Optional[float]:
    return float(v) if v is not None else None


def numeric_columns(con: duckdb.DuckDBPyConnection, table: str) -> List[str]:
    return [c.name for c in describe_table(con, table) if c.role == "numeric"]


def require_numeric(con: duckdb.DuckDBPyConnection, table: str, column: str) -> str:
    """Resolve ``column`` and make sure it holds numbers."""
    name = resolve_column(con, table, column)
    dtype = {c.name: c for c in describe_table(con, table)}[name]
    if dtype.role != "numeric":
        raise InvalidParameterError(
            f"Column '{name}' in '{table}' is {dtype.dtype}, not numeric",
            hints=["Convert sentinel markers to NULL (convert-sentinels) before summarizing text columns."],
            context={"table": table, "column": name, "dtype": dtype.dtype},
        )
    return name


def summary_sql(table: str, column: str) -> str:
    col = qident(column)
    parts = ", ".join(f"{fn}({col}) AS {key}" for key, fn in AGGREGATES)
    return f"SELECT {parts} FROM {qident(table)}"


def column_summary(con: duckdb.DuckDBPyConnection, table: str, column: str) -> ColumnSummary:
    name = require_numeric(con, table, column)
    row = con.execute(summary_sql(table, name)).fetchone()
    values = dict(zip([key for key, _ in AGGREGATES], row))
    return ColumnSummary(
        column=name,
        count=int(values.pop("count") or 0),
        **{k: _float(v) for k, v in values.items()},
    )


def summary_statistics(
    con: duckdb.DuckDBPyConnection,
    table: str,
    columns: Optional[Sequence[str]] = None,
) -> List[ColumnSummary]:
    """Count, sum, mean, min, max, standard deviation and variance per column.

    Defaults to every numeric column. Nulls are ignored by the aggregates, so
    ``count`` is the number of non-null values.
    """
    targets = list(columns) if columns else numeric_columns(con, table)
    return [column_summary(con, table, c) for c in targets]


def frame_descriptives(data: np.ndarray) -> Dict[str, Any]:
    """In-memory descriptive statistics for one numeric array (NaN = missing)."""
    data = np.asarray(data, dtype=float)
    clean = data[~np.isnan(data)]
    n = len(clean)

    if n == 0:
        return {"n": 0, "n_missing": int(len(data))}

    q1, median, q3 = (float(v) for v in np.percentile(clean, [25, 50, 75]))

    return {
        "n": n,
        "n_missing": int(np.sum(np.isnan(data))),
        "mean": float(np.mean(clean)),
        "median": median,
        "std": float(np.std(clean, ddof=1)) if n > 1 else 0.0,
        "variance": float(np.var(clean, ddof=1)) if n > 1 else 0.0,
        "min": float(np.min(clean)),
        "max": float(np.max(clean)),
        "q1": q1,
        "q3": q3,
        "iqr": q3 - q1,
        "skewness": float(stats.skew(clean)) if n > 2 else None,
        "kurtosis": float(stats.kurtosis(clean)) if n > 3 else None,
    }
