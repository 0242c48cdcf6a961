"""Missing-value diagnosis.

Raw exports often mark an absent measurement with literal text such as
``NA``. Aggregates treat that text as a value, so markers are rewritten to
real NULLs column by column before null counts and frequencies are tallied.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import duckdb

from eda_engine.engine.duckdb_engine import qident, qliteral, resolve_column
from eda_engine.engine.profiling import describe_table, row_count
from eda_engine.models.results import NullCount, SentinelConversion
from eda_engine.stats.descriptive import require_numeric

logger = logging.getLogger(__name__)

TEXT_TYPES = ("VARCHAR", "TEXT", "STRING")


def _is_text(dtype: str) -> bool:
    return dtype.upper().startswith(TEXT_TYPES)


def text_columns(con: duckdb.DuckDBPyConnection, table: str) -> List[str]:
    return [c.name for c in describe_table(con, table) if _is_text(c.dtype)]


def _marker_predicate(column: str, marker: str) -> str:
    return f"TRIM({qident(column)}) = {qliteral(marker)}"


def sentinel_counts(con: duckdb.DuckDBPyConnection, table: str, marker: str = "NA") -> Dict[str, int]:
    """How many cells of each text column hold ``marker``."""
    cols = text_columns(con, table)
    if not cols:
        return {}
    parts = ", ".join(f"COUNT(*) FILTER (WHERE {_marker_predicate(c, marker)})" for c in cols)
    row = con.execute(f"SELECT {parts} FROM {qident(table)}").fetchone()
    return {c: int(n) for c, n in zip(cols, row)}


def update_sql(table: str, column: str, marker: str) -> str:
    return f"UPDATE {qident(table)} SET {qident(column)} = NULL WHERE {_marker_predicate(column, marker)}"


def _all_numeric(con: duckdb.DuckDBPyConnection, table: str, column: str) -> bool:
    col = qident(column)
    bad = con.execute(
        f"SELECT COUNT(*) FROM {qident(table)} "
        f"WHERE {col} IS NOT NULL AND TRY_CAST({col} AS DOUBLE) IS NULL"
    ).fetchone()[0]
    return int(bad) == 0


def convert_sentinels_to_null(
    con: duckdb.DuckDBPyConnection,
    table: str,
    columns: Optional[Sequence[str]] = None,
    marker: str = "NA",
    cast_numeric: bool = True,
) -> List[SentinelConversion]:
    """Rewrite ``marker`` cells to NULL with one UPDATE per column.

    Only text columns can hold the marker; anything else is skipped. With
    ``cast_numeric`` a converted column whose remaining values all parse as
    numbers is altered to DOUBLE so it can be summarized afterwards.
    """
    describe = {c.name: c.dtype for c in describe_table(con, table)}
    targets = [resolve_column(con, table, c) for c in columns] if columns else list(describe)

    results: List[SentinelConversion] = []
    for name in targets:
        dtype = describe[name]
        if not _is_text(dtype):
            logger.debug("Skipping %s.%s (%s cannot hold %r)", table, name, dtype, marker)
            continue

        n = int(
            con.execute(
                f"SELECT COUNT(*) FROM {qident(table)} WHERE {_marker_predicate(name, marker)}"
            ).fetchone()[0]
        )
        if n:
            con.execute(update_sql(table, name, marker))
            logger.info("%s.%s: set %d %r cells to NULL", table, name, n, marker)

        if cast_numeric and _all_numeric(con, table, name):
            con.execute(f"ALTER TABLE {qident(table)} ALTER {qident(name)} TYPE DOUBLE")
            dtype = "DOUBLE"

        results.append(SentinelConversion(column=name, converted=n, dtype=dtype))

    return results


def null_summary_sql(table: str, columns: Sequence[str]) -> str:
    parts = ", ".join(f"COUNT({qident(c)})" for c in columns)
    return f"SELECT COUNT(*), {parts} FROM {qident(table)}"


def null_summary(con: duckdb.DuckDBPyConnection, table: str) -> List[NullCount]:
    """Null count and frequency (null_count / rows) for every column."""
    cols = [c.name for c in describe_table(con, table)]
    if not cols:
        return []
    row = con.execute(null_summary_sql(table, cols)).fetchone()
    total = int(row[0])
    out: List[NullCount] = []
    for name, non_null in zip(cols, row[1:]):
        nulls = total - int(non_null)
        out.append(
            NullCount(
                column=name,
                total=total,
                null_count=nulls,
                frequency=(nulls / total) if total else 0.0,
            )
        )
    return out


def zero_counts(con: duckdb.DuckDBPyConnection, table: str, columns: Sequence[str]) -> Dict[str, int]:
    """Zeros per numeric column; zero often stands in for a missing reading."""
    names = [require_numeric(con, table, c) for c in columns]
    if not names:
        return {}
    parts = ", ".join(f"COUNT(*) FILTER (WHERE {qident(c)} = 0)" for c in names)
    row = con.execute(f"SELECT {parts} FROM {qident(table)}").fetchone()
    return {c: int(n) for c, n in zip(names, row)}


def missing_rate(con: duckdb.DuckDBPyConnection, table: str) -> float:
    """Share of all cells that are NULL."""
    summary = null_summary(con, table)
    cells = row_count(con, table) * len(summary)
    return sum(s.null_count for s in summary) / cells if cells else 0.0
