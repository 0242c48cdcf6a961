"""
Table Profiling Module

Inspects a table's schema and sample rows and measures how complete each
column is.

Adaptive Sampling Strategy (missing-value percentages only):
- Tables ≤ 100K rows: 100% scan (perfect accuracy)
- Tables 100K-1M rows: 5% sample with 10K minimum
- Tables > 1M rows: 50K sample cap
"""

from __future__ import annotations

from typing import Any, Dict, List

import duckdb

from eda_engine.engine.duckdb_engine import qident, require_table
from eda_engine.models.results import ColumnInfo, TableProfile


def infer_role(dtype: str) -> str:
    """
    Infer the semantic role of a column based on its data type.

    Args:
        dtype: Data type string (e.g., 'INTEGER', 'VARCHAR', 'DATE')

    Returns:
        Role classification: 'numeric', 'datetime', or 'categorical'

    Examples:
        'BIGINT' → 'numeric'
        'DOUBLE' → 'numeric'
        'VARCHAR' → 'categorical'
        'DATE' → 'datetime'
    """
    dtype_lower = dtype.lower()

    if any(keyword in dtype_lower for keyword in ["int", "float", "double", "decimal", "numeric", "real"]):
        return "numeric"

    if any(keyword in dtype_lower for keyword in ["date", "time", "timestamp"]):
        return "datetime"

    # Strings, booleans, etc.
    return "categorical"


def _determine_sample_strategy(n_rows: int) -> tuple[int, bool]:
    """
    Determine sampling strategy based on table size.

    Returns:
        Tuple of (sample_size, use_sampling)

    Examples:
        768 rows → (768, False) - scan all
        500,000 rows → (25000, True) - 5% sample
        5,000,000 rows → (50000, True) - capped
    """
    if n_rows <= 100_000:
        return n_rows, False
    elif n_rows <= 1_000_000:
        return max(10_000, int(n_rows * 0.05)), True
    else:
        return 50_000, True


def describe_table(con: duckdb.DuckDBPyConnection, table: str) -> List[ColumnInfo]:
    """Column names, declared types and roles, in table order."""
    require_table(con, table)
    rows = con.execute(f"DESCRIBE {qident(table)}").fetchall()
    return [
        ColumnInfo(
            name=name,
            dtype=str(dtype),
            role=infer_role(str(dtype)),
            nullable=(str(null).upper() != "NO"),
        )
        for name, dtype, null, *_ in rows
    ]


def fetch_records(con: duckdb.DuckDBPyConnection, sql: str, params: List[Any] | None = None) -> List[Dict[str, Any]]:
    rel = con.execute(sql, params or [])
    cols = [c[0] for c in rel.description]
    return [dict(zip(cols, row)) for row in rel.fetchall()]


def sample_rows(con: duckdb.DuckDBPyConnection, table: str, limit: int = 5) -> List[Dict[str, Any]]:
    """First ``limit`` rows of ``table`` as records."""
    require_table(con, table)
    return fetch_records(con, f"SELECT * FROM {qident(table)} LIMIT {int(limit)}")


def row_count(con: duckdb.DuckDBPyConnection, table: str) -> int:
    require_table(con, table)
    return int(con.execute(f"SELECT COUNT(*) FROM {qident(table)}").fetchone()[0])


def build_profile(con: duckdb.DuckDBPyConnection, table: str, sample_limit: int = 5) -> TableProfile:
    """
    Build a profile of a table.

    Analyzes:
    - Schema (column names, types, roles)
    - Completeness (missing value percentage per column)
    - Dimensions (row/column counts)
    - Sample data (first rows)

    Args:
        con: DuckDB connection object
        table: Name of the table to profile
        sample_limit: Number of rows to include in the preview

    Returns:
        TableProfile, e.g.
        {
            "table": "diabetes",
            "n_rows": 768,
            "n_cols": 9,
            "columns": [
                {"name": "Glucose", "dtype": "BIGINT", "role": "numeric", "missing_pct": 0.0},
                ...
            ],
            "sample_rows": [{"Pregnancies": 6, "Glucose": 148, ...}, ...]
        }
    """
    # =========================================================================
    # STEP 1: Discover Schema
    # =========================================================================
    columns = describe_table(con, table)

    # =========================================================================
    # STEP 2: Count Rows
    # =========================================================================
    n_rows = row_count(con, table)

    # =========================================================================
    # STEP 3: Missing Value Percentages (sampled for large tables)
    # =========================================================================
    sample_size, use_sampling = _determine_sample_strategy(n_rows)
    source = (
        f"(SELECT * FROM {qident(table)} USING SAMPLE {sample_size} ROWS)"
        if use_sampling
        else qident(table)
    )

    if n_rows > 0 and columns:
        # AVG of 1/0 gives the proportion of missing values
        parts = ", ".join(
            f"AVG(CASE WHEN {qident(c.name)} IS NULL THEN 1 ELSE 0 END)::DOUBLE" for c in columns
        )
        rates = con.execute(f"SELECT {parts} FROM {source}").fetchone()
        for col_info, rate in zip(columns, rates):
            col_info.missing_pct = round(float(rate or 0.0), 4)

    # =========================================================================
    # STEP 4: Preview Rows
    # =========================================================================
    return TableProfile(
        table=table,
        n_rows=n_rows,
        n_cols=len(columns),
        columns=columns,
        sample_rows=sample_rows(con, table, sample_limit),
        sampled=use_sampling,
    )
