"""
EDA Session - owns one DuckDB connection and runs recipes against it.

Every recipe is an independent query: the session only supplies the
connection and settings, never the output of an earlier recipe.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import duckdb

from eda_engine.analytics.recipes._base import RecipeContext
from eda_engine.analytics.recipes.registry import get_recipe
from eda_engine.config import Settings, settings as default_settings
from eda_engine.engine.duckdb_engine import DuckDBEngine
from eda_engine.engine.ingest import (
    create_age_table,
    derive_sentinel_table,
    load_base_table,
    load_sentinel_table,
)
from eda_engine.models.results import RecipeResult

logger = logging.getLogger(__name__)


def walkthrough_steps(settings: Settings) -> List[Tuple[str, Dict[str, Any]]]:
    """The ordered recipe invocations that make up the standard report."""
    base = settings.base_table
    age = settings.age_table
    sentinel = settings.sentinel_table
    outcome = settings.outcome_column
    return [
        ("inspect-schema", {"table": base}),
        ("summary-statistics", {"table": base}),
        ("percentiles", {"table": base, "column": "Glucose"}),
        ("distribution-shape", {"table": base, "column": "Glucose"}),
        ("category-counts", {"table": base, "column": outcome}),
        ("category-counts", {"table": age, "column": "age_group"}),
        ("outcome-by-category", {"table": age, "column": "age_group", "outcome": outcome}),
        # Bounds read off an earlier quartile query and typed in as literals
        ("iqr-outliers", {"table": base, "column": "Glucose", "q1": 100, "q3": 144}),
        ("zero-readings", {"table": base}),
        ("inspect-schema", {"table": sentinel}),
        ("null-summary", {"table": sentinel}),
        ("convert-sentinels", {"table": sentinel}),
        ("null-summary", {"table": sentinel}),
        ("summary-statistics", {"table": sentinel}),
    ]


class EDASession:
    """
    One connection, many independent recipes.

    Usage:
        with EDASession() as session:
            session.load(Path("diabetes.csv"))
            result = session.run("summary-statistics")
    """

    def __init__(self, settings: Optional[Settings] = None, con: Optional[duckdb.DuckDBPyConnection] = None):
        self.settings = settings or default_settings
        self._owns_connection = con is None
        self.con = con if con is not None else DuckDBEngine(self.settings).connect()

    def __enter__(self) -> "EDASession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_connection:
            self.con.close()

    @property
    def context(self) -> RecipeContext:
        return RecipeContext(con=self.con, settings=self.settings)

    def load(self, csv_path: Path, sentinel_csv: Optional[Path] = None) -> Dict[str, int]:
        """
        Create the base, age-categorized and sentinel tables.

        Without ``sentinel_csv`` the sentinel table is derived from the base
        table by marking zero readings in the zero-as-missing columns.
        """
        s = self.settings
        data_dir = Path(s.data_dir)

        counts = {s.base_table: load_base_table(self.con, Path(csv_path), s.base_table, data_dir)}
        counts[s.age_table] = create_age_table(self.con, s.base_table, s.age_table)

        if sentinel_csv is not None:
            counts[s.sentinel_table] = load_sentinel_table(self.con, Path(sentinel_csv), s.sentinel_table, data_dir)
        else:
            counts[s.sentinel_table] = derive_sentinel_table(
                self.con,
                s.base_table,
                s.sentinel_table,
                columns=s.zero_as_missing,
                marker=s.missing_marker,
            )

        logger.info("Loaded dataset: %s", counts)
        return counts

    def run(self, slug: str, params: Optional[Dict[str, Any]] = None) -> RecipeResult:
        recipe = get_recipe(slug)
        params = dict(params or {})
        logger.info("Running recipe %s %s", slug, params)

        out = recipe.run(self.context, params)

        meta = recipe.META
        return RecipeResult(
            slug=meta.slug,
            title=meta.title,
            section=meta.section,
            description=meta.description,
            params=params,
            sql=out.get("sql", []),
            rows=out.get("rows", []),
            tables=out.get("tables", {}),
            notes=out.get("notes", []),
        )

    def walkthrough(self) -> List[RecipeResult]:
        return [self.run(slug, params) for slug, params in walkthrough_steps(self.settings)]
