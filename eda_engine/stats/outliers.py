"""Outlier detection with the interquartile-range rule."""

from __future__ import annotations

import logging
from typing import Tuple

import duckdb

from eda_engine.engine.duckdb_engine import qident
from eda_engine.errors import InvalidParameterError
from eda_engine.models.results import OutlierReport
from eda_engine.stats.descriptive import require_numeric
from eda_engine.stats.percentiles import quartiles

logger = logging.getLogger(__name__)


def iqr_bounds(q1: float, q3: float, k: float = 1.5) -> Tuple[float, float]:
    """Tukey fences: (q1 - k*IQR, q3 + k*IQR).

    >>> iqr_bounds(100, 144)
    (34.0, 210.0)
    """
    if q3 < q1:
        raise InvalidParameterError(f"q3 ({q3}) must not be below q1 ({q1})")
    if k < 0:
        raise InvalidParameterError(f"k must be non-negative (got {k})")
    iqr = float(q3) - float(q1)
    return float(q1) - k * iqr, float(q3) + k * iqr


def outlier_count_sql(table: str, column: str, lower: float, upper: float) -> str:
    col = qident(column)
    return (
        f"SELECT COUNT({col}) AS total, "
        f"COUNT(*) FILTER (WHERE {col} < {lower!r}) AS below, "
        f"COUNT(*) FILTER (WHERE {col} > {upper!r}) AS above "
        f"FROM {qident(table)}"
    )


def outlier_values_sql(table: str, column: str, lower: float, upper: float, limit: int) -> str:
    col = qident(column)
    return (
        f"SELECT {col} FROM {qident(table)} "
        f"WHERE {col} < {lower!r} OR {col} > {upper!r} "
        f"ORDER BY {col} LIMIT {int(limit)}"
    )


def count_outliers(
    con: duckdb.DuckDBPyConnection,
    table: str,
    column: str,
    lower: float,
    upper: float,
    sample_limit: int = 10,
) -> OutlierReport:
    """Count values outside the fixed ``[lower, upper]`` bounds.

    The bounds are literals read off an earlier quartile query; nothing is
    recomputed here.
    """
    lower, upper = float(lower), float(upper)
    if lower > upper:
        raise InvalidParameterError(f"lower bound ({lower}) exceeds upper bound ({upper})")
    name = require_numeric(con, table, column)

    total, below, above = con.execute(outlier_count_sql(table, name, lower, upper)).fetchone()
    sample = [
        float(r[0])
        for r in con.execute(outlier_values_sql(table, name, lower, upper, sample_limit)).fetchall()
    ]

    report = OutlierReport(
        column=name,
        lower=lower,
        upper=upper,
        total=int(total),
        below=int(below),
        above=int(above),
        sample=sample,
    )
    logger.info("%s.%s: %d outliers outside [%s, %s]", table, name, report.outliers, lower, upper)
    return report


def detect_outliers(
    con: duckdb.DuckDBPyConnection,
    table: str,
    column: str,
    k: float = 1.5,
    sample_limit: int = 10,
) -> OutlierReport:
    """Same as ``count_outliers`` with bounds taken from NTILE quartiles."""
    q = quartiles(con, table, column)
    if q.q1 is None or q.q3 is None:
        raise InvalidParameterError(
            f"Not enough non-null values in '{column}' to compute quartiles",
            context={"table": table, "column": column},
        )
    lower, upper = iqr_bounds(q.q1, q.q3, k)
    return count_outliers(con, table, q.column, lower, upper, sample_limit)
