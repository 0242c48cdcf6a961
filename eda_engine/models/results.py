from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ColumnInfo(BaseModel):
    name: str
    dtype: str
    role: str
    nullable: bool = True
    missing_pct: float = 0.0


class TableProfile(BaseModel):
    table: str
    n_rows: int
    n_cols: int
    columns: List[ColumnInfo] = Field(default_factory=list)
    sample_rows: List[Dict[str, Any]] = Field(default_factory=list)
    sampled: bool = False


class ColumnSummary(BaseModel):
    column: str
    count: int
    sum: Optional[float] = None
    mean: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    stddev: Optional[float] = None
    variance: Optional[float] = None
    stddev_pop: Optional[float] = None
    variance_pop: Optional[float] = None

    def mean_matches_sum(self, tol: float = 1e-9) -> bool:
        """True when mean == sum / count (vacuously true for an empty column)."""
        if self.count == 0:
            return self.mean is None
        if self.mean is None or self.sum is None:
            return False
        expected = self.sum / self.count
        return abs(self.mean - expected) <= tol * max(1.0, abs(expected))


class Bucket(BaseModel):
    bucket: int
    n: int
    min: float
    max: float


class Quartiles(BaseModel):
    column: str
    q1: Optional[float] = None
    median: Optional[float] = None
    q3: Optional[float] = None

    @property
    def iqr(self) -> Optional[float]:
        if self.q1 is None or self.q3 is None:
            return None
        return self.q3 - self.q1


class PercentileValue(BaseModel):
    percentile: float
    approx: Optional[float] = None
    exact: Optional[float] = None


class CategoryCount(BaseModel):
    value: Optional[Any] = None
    count: int
    ratio: float


class OutcomeRate(BaseModel):
    value: Optional[Any] = None
    count: int
    positives: int
    ratio: float


class OutlierReport(BaseModel):
    column: str
    lower: float
    upper: float
    total: int
    below: int
    above: int
    sample: List[float] = Field(default_factory=list)

    @property
    def outliers(self) -> int:
        return self.below + self.above

    @property
    def share(self) -> float:
        return self.outliers / self.total if self.total else 0.0


class NullCount(BaseModel):
    column: str
    total: int
    null_count: int
    frequency: float


class RecipeResult(BaseModel):
    slug: str
    title: str
    section: str
    description: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)
    sql: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    # Secondary result sets, rendered after the main rows
    tables: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    notes: List[str] = Field(default_factory=list)


class SentinelConversion(BaseModel):
    column: str
    converted: int
    dtype: str
