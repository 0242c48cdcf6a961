"""Shared fixtures: a small hand-checked slice of the diabetes table."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import duckdb
import pandas as pd
import pytest

from eda_engine.config import Settings

COLUMNS = [
    "Pregnancies",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "Insulin",
    "BMI",
    "DiabetesPedigreeFunction",
    "Age",
    "Outcome",
]

ROWS = [
    (6, 148, 72, 35, 0, 33.6, 0.627, 50, 1),
    (1, 85, 66, 29, 0, 26.6, 0.351, 31, 0),
    (8, 183, 64, 0, 0, 23.3, 0.672, 32, 1),
    (1, 89, 66, 23, 94, 28.1, 0.167, 21, 0),
    (0, 137, 40, 35, 168, 43.1, 2.288, 33, 1),
    (5, 116, 74, 0, 0, 25.6, 0.201, 30, 0),
    (3, 78, 50, 32, 88, 31.0, 0.248, 26, 1),
    (10, 115, 0, 0, 0, 35.3, 0.134, 29, 0),
    (2, 197, 70, 45, 543, 30.5, 0.158, 53, 1),
    (8, 125, 96, 0, 0, 0.0, 0.232, 54, 1),
    (4, 0, 92, 0, 0, 37.6, 0.191, 30, 0),
    (10, 168, 74, 0, 0, 38.0, 0.537, 34, 1),
]

SENTINEL_CSV = """\
Pregnancies,Glucose,BloodPressure,SkinThickness,Insulin,BMI,DiabetesPedigreeFunction,Age,Outcome
6,148,72,35,NA,33.6,0.627,50,1
1,NA,66,29,NA,26.6,0.351,31,0
8,183,NA,NA,NA,23.3,0.672,32,1
"""


@pytest.fixture
def frame() -> pd.DataFrame:
    return pd.DataFrame(ROWS, columns=COLUMNS)


@pytest.fixture
def con(frame: pd.DataFrame) -> Iterator[duckdb.DuckDBPyConnection]:
    connection = duckdb.connect(":memory:")
    connection.register("frame_view", frame)
    connection.execute("CREATE TABLE diabetes AS SELECT * FROM frame_view")
    connection.unregister("frame_view")
    yield connection
    connection.close()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(database=":memory:", data_dir=str(tmp_path / "data"))


@pytest.fixture
def csv_path(tmp_path: Path, frame: pd.DataFrame) -> Path:
    path = tmp_path / "diabetes.csv"
    frame.to_csv(path, index=False)
    return path


@pytest.fixture
def sentinel_csv_path(tmp_path: Path) -> Path:
    path = tmp_path / "diabetes_na.csv"
    path.write_text(SENTINEL_CSV, encoding="utf-8")
    return path
