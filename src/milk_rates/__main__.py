from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

import uvicorn

from milk_rates.api import create_app
from milk_rates.config import AppConfig, default_config, load_app_config
from milk_rates.errors import LoadError
from milk_rates.loader import load
from milk_rates.queries import list_axis_values


def _config_from(path: str | None) -> AppConfig:
    if path:
        return load_app_config(Path(path))
    if Path("config.toml").exists():
        return load_app_config(Path("config.toml"))
    return default_config()


def _serve(args: argparse.Namespace) -> int:
    config = _config_from(args.config)
    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(config)
    uvicorn.run(
        app,
        host=args.host or config.api.host,
        port=args.port or config.api.port,
        log_level=config.logging.level.lower(),
    )
    return 0


def _check(args: argparse.Namespace) -> int:
    try:
        table = load(Path(args.path), sheet_name=args.sheet)
    except LoadError as e:
        sys.stderr.write(f"Invalid rate chart: {e}\n")
        return 1

    values = list_axis_values(table)
    print(f"Rate chart: {args.path}")
    print(f"  {table.row_count} FAT rows x {table.column_count} SNF columns")
    print(f"  FAT: {', '.join(values.fat)}")
    print(f"  SNF: {', '.join(values.snf)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="milk_rates", description="FAT/SNF milk rate engine.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--config", default=None, help="Path to config.toml.")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_serve)

    check = sub.add_parser("check", help="Validate a rate chart file and print its axes.")
    check.add_argument("path")
    check.add_argument("--sheet", default=None, help="Worksheet name (first sheet by default).")
    check.set_defaults(func=_check)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
