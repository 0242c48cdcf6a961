from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """
    Central config loaded from environment variables and optionally .env (local).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # -------------------------
    # DuckDB connection
    # ":memory:" keeps everything in-process (tests, one-off reports)
    # -------------------------
    database: str = Field("eda.duckdb", alias="EDA_DATABASE")
    threads: int = Field(4, alias="EDA_THREADS")
    memory_limit: str = Field("1GB", alias="EDA_MEMORY_LIMIT")

    # -------------------------
    # Local persistence (parquet cache of loaded CSVs)
    # -------------------------
    data_dir: str = Field("./data", alias="EDA_DATA_DIR")

    # -------------------------
    # Tables
    # -------------------------
    base_table: str = Field("diabetes", alias="EDA_BASE_TABLE")
    age_table: str = Field("diabetes_age", alias="EDA_AGE_TABLE")
    sentinel_table: str = Field("diabetes_na", alias="EDA_SENTINEL_TABLE")

    # -------------------------
    # Dataset semantics
    # -------------------------
    missing_marker: str = Field("NA", alias="EDA_MISSING_MARKER")
    outcome_column: str = Field("Outcome", alias="EDA_OUTCOME_COLUMN")
    # Zero is not a plausible reading for these measurements
    zero_as_missing: List[str] = Field(
        default_factory=lambda: ["Glucose", "BloodPressure", "SkinThickness", "Insulin", "BMI"],
        alias="EDA_ZERO_AS_MISSING",
    )

    # -------------------------
    # Output
    # -------------------------
    sample_rows: int = Field(5, alias="EDA_SAMPLE_ROWS")
    log_level: str = Field("INFO", alias="EDA_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)} (got {v!r})")
        return level

    def model_post_init(self, __context) -> None:
        """
        Normalize the marker: surrounding whitespace would never match a cell.
        """
        self.missing_marker = self.missing_marker.strip() or "NA"


settings = Settings()


REQUIRED_COLUMNS = [
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
