"""Category counts and ratios."""

from __future__ import annotations

from typing import List

import duckdb

from eda_engine.engine.duckdb_engine import qident, resolve_column
from eda_engine.models.results import CategoryCount, OutcomeRate
from eda_engine.stats.descriptive import require_numeric


def category_counts_sql(table: str, column: str) -> str:
    col = qident(column)
    return (
        f"SELECT {col} AS value, COUNT(*) AS count, "
        "(COUNT(*)::DOUBLE / SUM(COUNT(*)) OVER ()) AS ratio "
        f"FROM {qident(table)} GROUP BY {col} ORDER BY {col} NULLS LAST"
    )


def category_counts(con: duckdb.DuckDBPyConnection, table: str, column: str) -> List[CategoryCount]:
    """Rows per distinct value and their share of the table. NULL is its own category."""
    name = resolve_column(con, table, column)
    rows = con.execute(category_counts_sql(table, name)).fetchall()
    return [CategoryCount(value=v, count=int(n), ratio=float(r)) for v, n, r in rows]


def outcome_rate_sql(table: str, column: str, outcome: str) -> str:
    col = qident(column)
    out = qident(outcome)
    return (
        f"SELECT {col} AS value, COUNT(*) AS count, "
        f"SUM(CASE WHEN {out} = 1 THEN 1 ELSE 0 END) AS positives, "
        f"AVG(CASE WHEN {out} = 1 THEN 1.0 ELSE 0.0 END) AS ratio "
        f"FROM {qident(table)} GROUP BY {col} ORDER BY {col} NULLS LAST"
    )


def outcome_rate_by_category(
    con: duckdb.DuckDBPyConnection,
    table: str,
    column: str,
    outcome: str = "Outcome",
) -> List[OutcomeRate]:
    """Share of positive outcomes within each category."""
    name = resolve_column(con, table, column)
    out = require_numeric(con, table, outcome)
    rows = con.execute(outcome_rate_sql(table, name, out)).fetchall()
    return [
        OutcomeRate(value=v, count=int(n), positives=int(pos or 0), ratio=float(r))
        for v, n, pos, r in rows
    ]
