from __future__ import annotations

import argparse
import asyncio
import json
import logging
import pathlib
import sys
from dataclasses import replace
from typing import List, Optional, TextIO

from .config import Settings, load_config
from .datasource.http_api import GloHttpDataSource, GloHttpDataSourceConfig
from .dates import generate_draw_dates, parse_cli_date
from .db import create_db_engine
from .errors import BatchPersistError, IngestError, ReportNotFoundError
from .pipeline import IngestionPipeline
from .raw_json import RawJsonIngestor
from .reports import ReportGenerator
from .rpc import ToolServer
from .store import ResultStore
from .types import DateRequest

logger = logging.getLogger("glo_results")

# Commands whose stdout is machine-readable output.
STDOUT_COMMANDS = {"serve-rpc", "latest"}


def log_stream(command: str) -> TextIO:
    return sys.stderr if command in STDOUT_COMMANDS else sys.stdout


def configure_logging(verbose: bool, level_name: str = "INFO", stream: TextIO = sys.stdout) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=stream,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def build_store(settings: Settings) -> ResultStore:
    store = ResultStore(create_db_engine(settings.database_url))
    store.ensure_schema()
    return store


def build_datasource(settings: Settings) -> GloHttpDataSource:
    return GloHttpDataSource(
        GloHttpDataSourceConfig(
            url=settings.api.url,
            timeout_seconds=settings.api.timeout_seconds,
        )
    )


def build_pipeline(settings: Settings, store: ResultStore, datasource: GloHttpDataSource) -> IngestionPipeline:
    return IngestionPipeline(store, datasource, pace_seconds=settings.api.pace_seconds)


def _requests_from_args(args: argparse.Namespace) -> List[DateRequest]:
    if args.year is not None:
        return generate_draw_dates(args.year)
    return [parse_cli_date(value) for value in args.date]


def cmd_init_db(settings: Settings, args: argparse.Namespace) -> int:
    build_store(settings)
    logger.info("Database ready at %s", settings.database_url)
    return 0


def cmd_fetch(settings: Settings, args: argparse.Namespace) -> int:
    try:
        requests = _requests_from_args(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    try:
        store = build_store(settings)
        pipeline = build_pipeline(settings, store, build_datasource(settings))
        results = asyncio.run(pipeline.run_once(requests))
    except BatchPersistError as exc:
        logger.error("Fetched %s results but could not save them: %s", len(exc.results), exc)
        return 1
    except IngestError as exc:
        logger.error("Fetch run failed: %s", exc)
        return 1
    for result in results:
        first = result.categories.get("first")
        first_number = first.numbers[0].value if first and first.numbers else "N/A"
        logger.info("Date: %s | Period: %s | First prize: %s", result.date, result.period_key(), first_number)
    return 0


def cmd_ingest_json(settings: Settings, args: argparse.Namespace) -> int:
    if args.path == "-":
        raw = sys.stdin.read()
    else:
        raw = pathlib.Path(args.path).read_text(encoding="utf-8")

    ingestor = RawJsonIngestor(build_store(settings))
    try:
        draw_id = ingestor.ingest(raw)
    except IngestError as exc:
        logger.error("Could not ingest %s: %s", args.path, exc)
        return 1
    logger.info("Inserted lottery with ID: %s", draw_id)
    return 0


def cmd_report(settings: Settings, args: argparse.Namespace) -> int:
    generator = ReportGenerator(build_store(settings), settings.report_path)
    try:
        generator.save(args.date)
    except ReportNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def cmd_latest(settings: Settings, args: argparse.Namespace) -> int:
    records = build_store(settings).get_latest(args.limit)
    print(json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2))
    return 0


def cmd_serve_rpc(settings: Settings, args: argparse.Namespace) -> int:
    store = build_store(settings)
    datasource = build_datasource(settings)
    server = ToolServer(
        store=store,
        pipeline=build_pipeline(settings, store, datasource),
        ingestor=RawJsonIngestor(store),
        reports=ReportGenerator(store, settings.report_path),
    )
    try:
        server.serve(sys.stdin, sys.stdout)
    finally:
        asyncio.run(datasource.close())
    return 0


def cmd_serve_web(settings: Settings, args: argparse.Namespace) -> int:
    from glo_api.app import create_app

    web = settings.web
    settings = settings.copy(web=replace(web, host=args.host or web.host, port=args.port or web.port))
    app = create_app(settings)
    app.run(host=settings.web.host, port=settings.web.port)
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Thai government lottery results ingestion")
    parser.add_argument("--env-file", type=str, default=None, help="Path to .env file with settings")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging (default INFO).")
    sub = parser.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create the database tables.")
    init_db.set_defaults(handler=cmd_init_db)

    fetch = sub.add_parser("fetch", help="Fetch and store results for draw dates.")
    target = fetch.add_mutually_exclusive_group(required=True)
    target.add_argument("--year", type=int, help="Fetch the 1st and 16th of every month of a year.")
    target.add_argument("--date", nargs="+", metavar="DD-MM-YYYY", help="Fetch specific draw dates.")
    fetch.set_defaults(handler=cmd_fetch)

    ingest = sub.add_parser("ingest-json", help="Store an API reply saved to a file ('-' for stdin).")
    ingest.add_argument("path")
    ingest.set_defaults(handler=cmd_ingest_json)

    report = sub.add_parser("report", help="Write the HTML report for a draw date.")
    report.add_argument("date", metavar="YYYY-MM-DD")
    report.set_defaults(handler=cmd_report)

    latest = sub.add_parser("latest", help="Print the most recent stored draws as JSON.")
    latest.add_argument("--limit", type=int, default=10)
    latest.set_defaults(handler=cmd_latest)

    serve_rpc = sub.add_parser("serve-rpc", help="Serve the JSON-RPC tool protocol on stdio.")
    serve_rpc.set_defaults(handler=cmd_serve_rpc)

    serve_web = sub.add_parser("serve-web", help="Serve the read-only HTTP API.")
    serve_web.add_argument("--host", type=str, default=None)
    serve_web.add_argument("--port", type=int, default=None)
    serve_web.set_defaults(handler=cmd_serve_web)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_config(args.env_file)
    configure_logging(args.verbose, settings.log_level, stream=log_stream(args.command))
    try:
        return args.handler(settings, args)
    except KeyboardInterrupt:
        print("Stopped by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
