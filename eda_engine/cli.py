from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .analytics.recipes.registry import load_all_meta
from .config import LOG_LEVELS, Settings, settings as default_settings
from .errors import EDAError, InvalidParameterError
from .logging_config import configure_logging
from .reporting import render_json, render_markdown
from .services.eda_session import EDASession

logger = logging.getLogger(__name__)


def _parse_params(pairs: Optional[List[str]]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise InvalidParameterError(f"--param expects key=value (got {pair!r})")
        params[key.strip()] = value.strip()
    return params


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, Any] = {}
    if args.database:
        overrides["database"] = args.database
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.log_level:
        overrides["log_level"] = args.log_level
    return default_settings.model_copy(update=overrides) if overrides else default_settings


def _command_load(args: argparse.Namespace, settings: Settings) -> int:
    with EDASession(settings) as session:
        counts = session.load(
            Path(args.csv),
            sentinel_csv=Path(args.sentinel_csv) if args.sentinel_csv else None,
        )
    for table, n in counts.items():
        print(f"{table}: {n} rows")
    return 0


def _command_recipes(args: argparse.Namespace, settings: Settings) -> int:
    for meta in load_all_meta():
        print(f"{meta.slug:<22} {meta.title}")
        for name, help_text in meta.params.items():
            print(f"    {name:<12} {help_text}")
    return 0


def _command_run(args: argparse.Namespace, settings: Settings) -> int:
    params = _parse_params(args.param)
    with EDASession(settings) as session:
        result = session.run(args.slug, params)

    if args.json:
        sys.stdout.write(render_json([result]))
    else:
        sys.stdout.write(render_markdown([result], title=result.title))
    return 0


def _command_report(args: argparse.Namespace, settings: Settings) -> int:
    with EDASession(settings) as session:
        if args.csv:
            session.load(Path(args.csv), sentinel_csv=Path(args.sentinel_csv) if args.sentinel_csv else None)
        results = session.walkthrough()

    body = render_json(results) if args.format == "json" else render_markdown(results)

    if args.output:
        output_path = Path(args.output).expanduser()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(body, encoding="utf-8")
        print(f"Wrote report to {output_path} ({args.format})")
    else:
        sys.stdout.write(body)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eda-engine",
        description="Exploratory data analysis of the diabetes health-indicators table with DuckDB SQL",
    )
    parser.add_argument("--database", help="DuckDB file (or :memory:); overrides EDA_DATABASE")
    parser.add_argument("--data-dir", help="Parquet cache directory; overrides EDA_DATA_DIR")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level; overrides EDA_LOG_LEVEL",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    load = sub.add_parser("load", help="Create the base, age-categorized and sentinel tables from a CSV")
    load.add_argument("csv", help="CSV of observations")
    load.add_argument("--sentinel-csv", help="Raw CSV with NA markers for the sentinel table")
    load.set_defaults(func=_command_load)

    recipes = sub.add_parser("recipes", help="List available recipes")
    recipes.set_defaults(func=_command_recipes)

    run = sub.add_parser("run", help="Run one recipe")
    run.add_argument("slug", help="Recipe slug (see `recipes`)")
    run.add_argument("--param", "-p", action="append", metavar="KEY=VALUE", help="Recipe parameter (repeatable)")
    run.add_argument("--json", action="store_true", help="Emit JSON instead of Markdown")
    run.set_defaults(func=_command_run)

    report = sub.add_parser("report", help="Run the full walkthrough and render a report")
    report.add_argument("--csv", help="Load this CSV first (otherwise use existing tables)")
    report.add_argument("--sentinel-csv", help="Raw CSV with NA markers for the sentinel table")
    report.add_argument("--output", "-o", help="Write the report here instead of stdout")
    report.add_argument("--format", choices=["markdown", "json"], default="markdown")
    report.set_defaults(func=_command_report)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _settings_from_args(args)
    configure_logging(settings.log_level)

    try:
        return args.func(args, settings)
    except EDAError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        for hint in exc.hints:
            print(f"  hint: {hint}", file=sys.stderr)
        logger.debug("Error detail: %s", json.dumps(exc.to_dict(), default=str))
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
