"""Approximate percentiles via NTILE bucket ranking.

Sorted non-null values are split into ``buckets`` equal-sized groups with
``NTILE``; the largest value in bucket ``ceil(p * buckets)`` approximates the
``p``-th quantile. DuckDB's ``quantile_cont`` is available for comparison.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import duckdb

from eda_engine.engine.duckdb_engine import qident
from eda_engine.errors import InvalidParameterError
from eda_engine.models.results import Bucket, PercentileValue, Quartiles
from eda_engine.stats.descriptive import require_numeric


def _check_buckets(buckets: int) -> int:
    if int(buckets) < 1:
        raise InvalidParameterError(f"buckets must be >= 1 (got {buckets})")
    return int(buckets)


def _check_percentile(p: float) -> float:
    p = float(p)
    if not (0.0 < p <= 1.0):
        raise InvalidParameterError(f"percentile must be in (0, 1] (got {p})")
    return p


def ntile_sql(table: str, column: str, buckets: int) -> str:
    col = qident(column)
    return (
        "SELECT bucket, COUNT(*) AS n, MIN(v) AS min, MAX(v) AS max "
        f"FROM (SELECT {col} AS v, NTILE({int(buckets)}) OVER (ORDER BY {col}) AS bucket "
        f"FROM {qident(table)} WHERE {col} IS NOT NULL) "
        "GROUP BY bucket ORDER BY bucket"
    )


def ntile_buckets(con: duckdb.DuckDBPyConnection, table: str, column: str, buckets: int = 4) -> List[Bucket]:
    name = require_numeric(con, table, column)
    rows = con.execute(ntile_sql(table, name, _check_buckets(buckets))).fetchall()
    return [Bucket(bucket=int(b), n=int(n), min=float(lo), max=float(hi)) for b, n, lo, hi in rows]


def bucket_index(p: float, buckets: int) -> int:
    # round() guards against 0.07 * 100 == 7.000000000000001
    return max(1, math.ceil(round(p * buckets, 9)))


def approx_percentile(
    con: duckdb.DuckDBPyConnection,
    table: str,
    column: str,
    p: float,
    buckets: int = 100,
) -> Optional[float]:
    """Upper edge of the bucket holding the ``p``-th quantile.

    When the column has fewer non-null values than ``buckets``, the bucket
    count shrinks to the value count so every bucket holds one value.
    """
    p = _check_percentile(p)
    name = require_numeric(con, table, column)
    n = int(con.execute(f"SELECT COUNT({qident(name)}) FROM {qident(table)}").fetchone()[0])
    if n == 0:
        return None

    effective = min(_check_buckets(buckets), n)
    by_index = {b.bucket: b for b in ntile_buckets(con, table, name, effective)}
    hit = by_index.get(bucket_index(p, effective))
    return hit.max if hit else None


def quartiles(con: duckdb.DuckDBPyConnection, table: str, column: str) -> Quartiles:
    """Q1, median and Q3 from ``NTILE(4)`` bucket maxima."""
    name = require_numeric(con, table, column)
    by_index = {b.bucket: b.max for b in ntile_buckets(con, table, name, 4)}
    return Quartiles(
        column=name,
        q1=by_index.get(1),
        median=by_index.get(2),
        q3=by_index.get(3),
    )


def exact_percentiles(
    con: duckdb.DuckDBPyConnection,
    table: str,
    column: str,
    ps: Sequence[float],
) -> List[Optional[float]]:
    name = require_numeric(con, table, column)
    checked = [_check_percentile(p) for p in ps]
    if not checked:
        return []
    col = qident(name)
    parts = ", ".join(f"quantile_cont({col}, {p!r})" for p in checked)
    row = con.execute(f"SELECT {parts} FROM {qident(table)}").fetchone()
    return [float(v) if v is not None else None for v in row]


def percentile_table(
    con: duckdb.DuckDBPyConnection,
    table: str,
    column: str,
    ps: Sequence[float] = (0.25, 0.5, 0.75),
    buckets: int = 100,
) -> List[PercentileValue]:
    """Bucket approximations side by side with interpolated exact values."""
    exact = exact_percentiles(con, table, column, ps)
    return [
        PercentileValue(
            percentile=float(p),
            approx=approx_percentile(con, table, column, p, buckets),
            exact=e,
        )
        for p, e in zip(ps, exact)
    ]
