from __future__ import annotations

import json
from pathlib import Path

import pytest

from eda_engine.cli import main


def _globals(tmp_path: Path) -> list:
    return ["--database", str(tmp_path / "eda.duckdb"), "--data-dir", str(tmp_path / "data"), "--log-level", "WARNING"]


def test_load_then_run(tmp_path: Path, csv_path: Path, capsys) -> None:
    assert main(_globals(tmp_path) + ["load", str(csv_path)]) == 0
    assert "diabetes: 12 rows" in capsys.readouterr().out

    code = main(_globals(tmp_path) + ["run", "category-counts", "-p", "table=diabetes", "-p", "column=Outcome", "--json"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload[0]["slug"] == "category-counts"
    assert [r["count"] for r in payload[0]["rows"]] == [5, 7]


def test_report_writes_file(tmp_path: Path, csv_path: Path) -> None:
    out = tmp_path / "reports" / "eda.md"
    assert main(_globals(tmp_path) + ["report", "--csv", str(csv_path), "--output", str(out)]) == 0
    text = out.read_text(encoding="utf-8")
    assert "### Outliers by the IQR rule" in text


def test_recipes_lists_slugs(tmp_path: Path, capsys) -> None:
    assert main(_globals(tmp_path) + ["recipes"]) == 0
    assert "convert-sentinels" in capsys.readouterr().out


def test_errors_exit_nonzero(tmp_path: Path, capsys) -> None:
    assert main(_globals(tmp_path) + ["run", "summary-statistics"]) == 1
    err = capsys.readouterr().err
    assert "Table 'diabetes' not found" in err
    assert "hint:" in err


def test_bad_param_syntax(tmp_path: Path, capsys) -> None:
    assert main(_globals(tmp_path) + ["run", "null-summary", "-p", "table"]) == 1
    assert "key=value" in capsys.readouterr().err


def test_log_level_choices(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--log-level", "foo", "recipes"])
    assert exc.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
    # lowercase names are accepted
    assert main(["--database", str(tmp_path / "eda.duckdb"), "--log-level", "warning", "recipes"]) == 0
