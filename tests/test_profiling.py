from __future__ import annotations

import duckdb

from eda_engine.engine.profiling import (
    _determine_sample_strategy,
    build_profile,
    describe_table,
    infer_role,
    sample_rows,
)


def test_infer_role() -> None:
    assert infer_role("BIGINT") == "numeric"
    assert infer_role("DOUBLE") == "numeric"
    assert infer_role("VARCHAR") == "categorical"
    assert infer_role("TIMESTAMP") == "datetime"


def test_sample_strategy() -> None:
    assert _determine_sample_strategy(768) == (768, False)
    assert _determine_sample_strategy(500_000) == (25_000, True)
    assert _determine_sample_strategy(5_000_000) == (50_000, True)


def test_describe_table(con: duckdb.DuckDBPyConnection) -> None:
    cols = describe_table(con, "diabetes")
    assert len(cols) == 9
    assert all(c.role == "numeric" for c in cols)


def test_sample_rows_limit(con: duckdb.DuckDBPyConnection) -> None:
    rows = sample_rows(con, "diabetes", limit=3)
    assert len(rows) == 3
    assert rows[0]["Glucose"] == 148


def test_build_profile_reports_missing(con: duckdb.DuckDBPyConnection) -> None:
    con.execute("UPDATE diabetes SET Insulin = NULL WHERE Insulin = 0")
    profile = build_profile(con, "diabetes", sample_limit=2)
    assert profile.n_rows == 12
    assert profile.n_cols == 9
    assert len(profile.sample_rows) == 2
    assert profile.sampled is False
    by_name = {c.name: c for c in profile.columns}
    assert by_name["Insulin"].missing_pct == round(8 / 12, 4)
    assert by_name["Glucose"].missing_pct == 0.0
