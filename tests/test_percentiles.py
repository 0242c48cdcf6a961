from __future__ import annotations

import duckdb
import pytest

from eda_engine.errors import InvalidParameterError
from eda_engine.stats.percentiles import (
    approx_percentile,
    bucket_index,
    exact_percentiles,
    ntile_buckets,
    percentile_table,
    quartiles,
)


@pytest.fixture
def seq() -> duckdb.DuckDBPyConnection:
    con = duckdb.connect(":memory:")
    con.execute("CREATE TABLE seq AS SELECT range::BIGINT AS v FROM range(1, 9)")
    return con


def test_quartiles_over_one_to_eight(seq: duckdb.DuckDBPyConnection) -> None:
    q = quartiles(seq, "seq", "v")
    assert (q.q1, q.median, q.q3) == (2, 4, 6)
    assert q.iqr == 4


def test_ntile_buckets(seq: duckdb.DuckDBPyConnection) -> None:
    buckets = ntile_buckets(seq, "seq", "v", 4)
    assert [b.n for b in buckets] == [2, 2, 2, 2]
    assert [(b.min, b.max) for b in buckets] == [(1, 2), (3, 4), (5, 6), (7, 8)]


def test_approx_percentile_shrinks_buckets(seq: duckdb.DuckDBPyConnection) -> None:
    # 8 values, 100 requested buckets -> 8 buckets of one value each
    assert approx_percentile(seq, "seq", "v", 0.5) == 4
    assert approx_percentile(seq, "seq", "v", 1.0) == 8


def test_bucket_index_rounding() -> None:
    assert bucket_index(0.07, 100) == 7
    assert bucket_index(0.25, 4) == 1
    assert bucket_index(0.001, 4) == 1


def test_exact_percentiles(seq: duckdb.DuckDBPyConnection) -> None:
    assert exact_percentiles(seq, "seq", "v", [0.5]) == [pytest.approx(4.5)]


def test_glucose_quartiles(con: duckdb.DuckDBPyConnection) -> None:
    q = quartiles(con, "diabetes", "Glucose")
    assert (q.q1, q.median, q.q3) == (85, 116, 148)


def test_percentile_table(con: duckdb.DuckDBPyConnection) -> None:
    rows = percentile_table(con, "diabetes", "Glucose", [0.5], buckets=4)
    assert rows[0].approx == 116
    assert rows[0].exact is not None


def test_nulls_are_ignored(seq: duckdb.DuckDBPyConnection) -> None:
    seq.execute("INSERT INTO seq VALUES (NULL), (NULL)")
    assert quartiles(seq, "seq", "v").median == 4


def test_empty_column_returns_none(seq: duckdb.DuckDBPyConnection) -> None:
    seq.execute("DELETE FROM seq")
    assert approx_percentile(seq, "seq", "v", 0.5) is None
    assert quartiles(seq, "seq", "v").q1 is None


@pytest.mark.parametrize("p", [0, -0.1, 1.5])
def test_invalid_percentile(seq: duckdb.DuckDBPyConnection, p: float) -> None:
    with pytest.raises(InvalidParameterError):
        approx_percentile(seq, "seq", "v", p)


def test_invalid_bucket_count(seq: duckdb.DuckDBPyConnection) -> None:
    with pytest.raises(InvalidParameterError):
        ntile_buckets(seq, "seq", "v", 0)
