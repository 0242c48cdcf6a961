from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import duckdb

from eda_engine.config import Settings, settings as default_settings
from eda_engine.errors import ColumnNotFoundError, TableNotFoundError

logger = logging.getLogger(__name__)


def qident(name: str) -> str:
    """Safely quote identifiers for DuckDB SQL."""
    return '"' + name.replace('"', '""') + '"'


def qliteral(value: str) -> str:
    """Quote a string literal for DuckDB SQL."""
    return "'" + str(value).replace("'", "''") + "'"


class DuckDBEngine:
    """One DuckDB database (file or in-memory) per settings object."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.database = self.settings.database
        if self.database != ":memory:":
            Path(self.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> duckdb.DuckDBPyConnection:
        con = duckdb.connect(database=self.database, read_only=False)
        con.execute(f"SET threads={int(self.settings.threads)}")
        con.execute(f"SET memory_limit={qliteral(self.settings.memory_limit)}")
        logger.debug("Opened DuckDB connection to %s", self.database)
        return con

    @contextmanager
    def session(self) -> Iterator[duckdb.DuckDBPyConnection]:
        con = self.connect()
        try:
            yield con
        finally:
            con.close()


def list_tables(con: duckdb.DuckDBPyConnection) -> List[str]:
    rows = con.execute(
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = 'main' ORDER BY table_name"
    ).fetchall()
    return [r[0] for r in rows]


def require_table(con: duckdb.DuckDBPyConnection, table: str) -> None:
    tables = list_tables(con)
    if table not in tables:
        raise TableNotFoundError(table, available=tables)


def table_columns(con: duckdb.DuckDBPyConnection, table: str) -> List[Tuple[str, str]]:
    """(name, dtype) pairs in table order."""
    require_table(con, table)
    rows = con.execute(f"DESCRIBE {qident(table)}").fetchall()
    return [(r[0], str(r[1])) for r in rows]


def resolve_column(con: duckdb.DuckDBPyConnection, table: str, column: str) -> str:
    """Return the stored column name, matching case-insensitively."""
    names = [name for name, _ in table_columns(con, table)]
    if column in names:
        return column
    lowered = {n.lower(): n for n in names}
    if column.lower() in lowered:
        return lowered[column.lower()]
    raise ColumnNotFoundError(table, column, available=names)
