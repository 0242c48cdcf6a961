from __future__ import annotations

import csv
import hashlib
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import duckdb
import pyarrow as pa
import pyarrow.csv as pacsv
import pyarrow.parquet as pq

from eda_engine.config import REQUIRED_COLUMNS
from eda_engine.engine.duckdb_engine import qident, qliteral, require_table, resolve_column
from eda_engine.errors import DatasetLoadError

logger = logging.getLogger(__name__)

# (inclusive upper bound, label); ages above the last bound fall into ">60"
AGE_BUCKETS: List[Tuple[int, str]] = [
    (30, "<=30"),
    (40, "31-40"),
    (50, "41-50"),
    (60, "51-60"),
]
AGE_OVERFLOW_LABEL = ">60"


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        while True:
            b = f.read(chunk_size)
            if not b:
                break
            h.update(b)
    return h.hexdigest()


def _read_header(csv_path: Path) -> List[str]:
    # utf-8-sig drops a byte-order mark that would otherwise stick to the first name
    with csv_path.open("r", encoding="utf-8-sig", newline="") as f:
        row = next(csv.reader(f), None)
    if not row:
        raise DatasetLoadError(f"CSV file '{csv_path}' is empty")
    return row


def csv_to_parquet_streaming(csv_path: Path, parquet_path: Path, keep_sentinels: bool = False) -> tuple[int, int]:
    """Stream CSV -> Parquet without loading entire file into memory.

    With ``keep_sentinels`` every column is read as text and only empty cells
    become null, so markers such as ``NA`` survive as literal strings.
    """
    if not csv_path.exists():
        raise DatasetLoadError(f"CSV file not found: {csv_path}", context={"path": str(csv_path)})

    parquet_path.parent.mkdir(parents=True, exist_ok=True)

    read_options = pacsv.ReadOptions(autogenerate_column_names=False)
    parse_options = pacsv.ParseOptions(delimiter=",")
    if keep_sentinels:
        header = _read_header(csv_path)
        convert_options = pacsv.ConvertOptions(
            column_types={name: pa.string() for name in header},
            null_values=[""],
            strings_can_be_null=True,
        )
    else:
        convert_options = pacsv.ConvertOptions(strings_can_be_null=True)

    try:
        reader = pacsv.open_csv(
            csv_path.as_posix(),
            read_options=read_options,
            parse_options=parse_options,
            convert_options=convert_options,
        )
    except pa.ArrowInvalid as e:
        raise DatasetLoadError(f"Could not parse CSV '{csv_path}': {e}") from e

    # Batches go to a sibling file; the cache path only ever holds a complete conversion
    part_path = parquet_path.with_name(parquet_path.name + ".part")
    writer = None
    total_rows = 0
    n_cols = 0

    try:
        for batch in reader:
            table = pa.Table.from_batches([batch])
            # Stray whitespace in headers is common in exported health data
            table = table.rename_columns([c.strip() for c in table.column_names])
            if writer is None:
                n_cols = table.num_columns
                writer = pq.ParquetWriter(part_path.as_posix(), table.schema, compression="zstd")
            writer.write_table(table)
            total_rows += table.num_rows
    except pa.ArrowInvalid as e:
        if writer:
            writer.close()
            writer = None
        part_path.unlink(missing_ok=True)
        raise DatasetLoadError(f"Could not parse CSV '{csv_path}': {e}") from e
    finally:
        if writer:
            writer.close()

    if not part_path.exists():
        raise DatasetLoadError(f"CSV file '{csv_path}' has no rows", context={"path": str(csv_path)})
    part_path.replace(parquet_path)

    logger.info("Converted %s -> %s (%d rows, %d cols)", csv_path.name, parquet_path.name, total_rows, n_cols)
    return total_rows, n_cols


def parquet_cache_path(data_dir: Path, csv_path: Path, suffix: str = "") -> Path:
    digest = sha256_file(csv_path)[:12]
    return data_dir / "parquet" / f"{csv_path.stem}{suffix}-{digest}.parquet"


def check_required_columns(columns: Iterable[str], required: Sequence[str] = REQUIRED_COLUMNS) -> None:
    present = set(columns)
    missing = [c for c in required if c not in present]
    if missing:
        raise DatasetLoadError(
            f"Dataset is missing required columns: {', '.join(missing)}",
            hints=["Expected the diabetes health-indicators layout: " + ", ".join(required)],
            context={"missing": missing},
        )


def _table_from_parquet(con: duckdb.DuckDBPyConnection, table: str, parquet_path: Path) -> int:
    con.execute(
        f"CREATE OR REPLACE TABLE {qident(table)} AS "
        f"SELECT * FROM read_parquet({qliteral(parquet_path.as_posix())})"
    )
    return int(con.execute(f"SELECT COUNT(*) FROM {qident(table)}").fetchone()[0])


def load_base_table(con: duckdb.DuckDBPyConnection, csv_path: Path, table: str, data_dir: Path) -> int:
    """Create ``table`` from a CSV of observations; returns the row count."""
    parquet_path = parquet_cache_path(data_dir, csv_path)
    if not parquet_path.exists():
        csv_to_parquet_streaming(csv_path, parquet_path)

    check_required_columns(pq.read_schema(parquet_path.as_posix()).names)
    n_rows = _table_from_parquet(con, table, parquet_path)
    logger.info("Created table %s with %d rows", table, n_rows)
    return n_rows


def load_sentinel_table(con: duckdb.DuckDBPyConnection, csv_path: Path, table: str, data_dir: Path) -> int:
    """Create ``table`` from a raw CSV where missing values are text markers."""
    parquet_path = parquet_cache_path(data_dir, csv_path, suffix="-text")
    if not parquet_path.exists():
        csv_to_parquet_streaming(csv_path, parquet_path, keep_sentinels=True)

    check_required_columns(pq.read_schema(parquet_path.as_posix()).names)
    n_rows = _table_from_parquet(con, table, parquet_path)
    logger.info("Created sentinel table %s with %d rows", table, n_rows)
    return n_rows


def age_group_sql(age_col: str) -> str:
    col = qident(age_col)
    whens = " ".join(f"WHEN {col} <= {upper} THEN {qliteral(label)}" for upper, label in AGE_BUCKETS)
    last_upper = AGE_BUCKETS[-1][0]
    return f"CASE {whens} WHEN {col} > {last_upper} THEN {qliteral(AGE_OVERFLOW_LABEL)} END"


def create_age_table(con: duckdb.DuckDBPyConnection, source: str, target: str, age_column: str = "Age") -> int:
    """Copy ``source`` into ``target`` with an extra ``age_group`` text column."""
    require_table(con, source)
    age_col = resolve_column(con, source, age_column)
    con.execute(
        f"CREATE OR REPLACE TABLE {qident(target)} AS "
        f"SELECT *, {age_group_sql(age_col)} AS age_group FROM {qident(source)}"
    )
    n_rows = int(con.execute(f"SELECT COUNT(*) FROM {qident(target)}").fetchone()[0])
    logger.info("Created age-categorized table %s from %s", target, source)
    return n_rows


def derive_sentinel_table(
    con: duckdb.DuckDBPyConnection,
    source: str,
    target: str,
    columns: Sequence[str],
    marker: str = "NA",
) -> int:
    """Write ``source`` as all-text ``target``, encoding zero/null readings as ``marker``."""
    require_table(con, source)
    resolved = {resolve_column(con, source, c) for c in columns}

    select_parts: List[str] = []
    for name, _ in con.execute(f"DESCRIBE {qident(source)}").fetchall():
        col = qident(name)
        if name in resolved:
            select_parts.append(
                f"CASE WHEN {col} IS NULL OR {col} = 0 THEN {qliteral(marker)} "
                f"ELSE CAST({col} AS VARCHAR) END AS {col}"
            )
        else:
            select_parts.append(f"CAST({col} AS VARCHAR) AS {col}")

    con.execute(
        f"CREATE OR REPLACE TABLE {qident(target)} AS "
        f"SELECT {', '.join(select_parts)} FROM {qident(source)}"
    )
    n_rows = int(con.execute(f"SELECT COUNT(*) FROM {qident(target)}").fetchone()[0])
    logger.info("Derived sentinel table %s from %s (marker=%r, columns=%s)", target, source, marker, sorted(resolved))
    return n_rows
