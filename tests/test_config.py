from __future__ import annotations

import pytest
from pydantic import ValidationError

from eda_engine.config import Settings


def test_defaults() -> None:
    s = Settings()
    assert s.base_table == "diabetes"
    assert s.missing_marker == "NA"
    assert "Insulin" in s.zero_as_missing


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("EDA_DATABASE", ":memory:")
    monkeypatch.setenv("EDA_MISSING_MARKER", "  N/A ")
    monkeypatch.setenv("EDA_ZERO_AS_MISSING", '["Glucose"]')
    s = Settings()
    assert s.database == ":memory:"
    assert s.missing_marker == "N/A"
    assert s.zero_as_missing == ["Glucose"]


def test_log_level_is_normalized(monkeypatch) -> None:
    monkeypatch.setenv("EDA_LOG_LEVEL", " debug ")
    assert Settings().log_level == "DEBUG"


def test_unknown_log_level_rejected(monkeypatch) -> None:
    monkeypatch.setenv("EDA_LOG_LEVEL", "foo")
    with pytest.raises(ValidationError):
        Settings()
