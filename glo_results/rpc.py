"""Line-delimited JSON-RPC 2.0 tool server.

Each request line is answered with one response line on the writer; requests
without an ``id`` (or ``notifications/*`` methods) are notifications and get
no reply. Tool results are returned as a text content block holding a JSON
document.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, TextIO, Type

from pydantic import BaseModel, ValidationError

from .errors import BatchPersistError, IngestError
from .pipeline import IngestionPipeline
from .raw_json import RawJsonIngestor
from .reports import ReportGenerator
from .schemas import (
    DateLimitParams,
    DateParams,
    DateRangeParams,
    FetchDatesParams,
    LatestParams,
    MonthParams,
    NoParams,
    NumberParams,
    RawJsonParams,
    YearParams,
)
from .store import ResultStore

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "lottery-mcp-server"
SERVER_VERSION = "0.1.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    params_model: Type[BaseModel]
    handler: Callable[[Any], Dict[str, Any]]

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.params_model.model_json_schema(),
        }


def _records(records: Iterable) -> List[Dict[str, Any]]:
    return [record.to_dict() for record in records]


class ToolServer:
    def __init__(
        self,
        store: ResultStore,
        pipeline: IngestionPipeline,
        ingestor: RawJsonIngestor,
        reports: ReportGenerator,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._pipeline = pipeline
        self._ingestor = ingestor
        self._reports = reports
        self._logger = logger or logging.getLogger("glo_results.rpc")
        self._tools = {tool.name: tool for tool in self._build_tools()}

    @property
    def tools(self) -> List[Tool]:
        return list(self._tools.values())

    def _build_tools(self) -> List[Tool]:
        return [
            Tool(
                "parse_and_insert_raw_json",
                "Parse raw JSON lottery data and insert into database",
                RawJsonParams,
                self._parse_and_insert_raw_json,
            ),
            Tool(
                "fetch_and_save_multiple_results",
                "Fetch lottery results from API for multiple dates and save to database",
                FetchDatesParams,
                self._fetch_and_save_multiple_results,
            ),
            Tool(
                "get_lottery_results_after_date",
                "Get lottery results after a specific date",
                DateLimitParams,
                lambda p: {"success": True, "results": _records(self._store.get_after_date(p.date, p.limit))},
            ),
            Tool(
                "get_lottery_results_before_date",
                "Get lottery results before a specific date",
                DateLimitParams,
                lambda p: {"success": True, "results": _records(self._store.get_before_date(p.date, p.limit))},
            ),
            Tool(
                "get_lottery_results_by_date_range",
                "Get lottery results within a date range",
                DateRangeParams,
                lambda p: {
                    "success": True,
                    "results": _records(self._store.get_by_date_range(p.start_date, p.end_date)),
                },
            ),
            Tool(
                "get_lottery_results_by_year",
                "Get all lottery results for a specific year",
                YearParams,
                lambda p: {"success": True, "results": _records(self._store.get_by_year(p.year))},
            ),
            Tool(
                "get_lottery_results_by_month",
                "Get lottery results for a specific month and year",
                MonthParams,
                lambda p: {"success": True, "results": _records(self._store.get_by_month(p.year, p.month))},
            ),
            Tool(
                "get_latest_lottery_results",
                "Get the latest lottery results",
                LatestParams,
                lambda p: {"success": True, "results": _records(self._store.get_latest(p.limit))},
            ),
            Tool(
                "get_lottery_by_date",
                "Get lottery result for a specific date",
                DateParams,
                self._get_lottery_by_date,
            ),
            Tool(
                "search_number",
                "Search for a specific lottery number across all results",
                NumberParams,
                self._search_number,
            ),
            Tool(
                "get_complete_lottery_data",
                "Get complete lottery data including all prize numbers for a specific date",
                DateParams,
                self._get_complete_lottery_data,
            ),
            Tool(
                "generate_and_save_report",
                "Generate and save HTML report for a specific date",
                DateParams,
                self._generate_and_save_report,
            ),
            Tool(
                "create_database",
                "Create and initialize the lottery database",
                NoParams,
                self._create_database,
            ),
        ]

    # -- tool handlers ------------------------------------------------------

    def _parse_and_insert_raw_json(self, params: RawJsonParams) -> Dict[str, Any]:
        lottery_id = self._ingestor.ingest(params.raw_json)
        return {
            "success": True,
            "lottery_id": lottery_id,
            "message": f"Successfully inserted lottery with ID: {lottery_id}",
        }

    def _fetch_and_save_multiple_results(self, params: FetchDatesParams) -> Dict[str, Any]:
        try:
            results = asyncio.run(self._pipeline.run(params.dates))
        except BatchPersistError as exc:
            self._logger.error("Fetched %s results but could not save them: %s", len(exc.results), exc)
            return {
                "success": False,
                "persisted": False,
                "error": str(exc),
                "results_count": len(exc.results),
                "results": [result.to_dict() for result in exc.results],
            }
        return {
            "success": True,
            "persisted": True,
            "results_count": len(results),
            "results": [result.to_dict() for result in results],
        }

    def _get_lottery_by_date(self, params: DateParams) -> Dict[str, Any]:
        record = self._store.get_by_date(params.date)
        return {"success": True, "result": record.to_dict() if record else None}

    def _search_number(self, params: NumberParams) -> Dict[str, Any]:
        matches = self._store.search_number(params.number)
        return {
            "success": True,
            "results": [{"draw": draw.to_dict(), "prize": prize.to_dict()} for draw, prize in matches],
        }

    def _get_complete_lottery_data(self, params: DateParams) -> Dict[str, Any]:
        complete = self._store.get_complete(params.date)
        return {"success": True, "result": complete.to_dict() if complete else None}

    def _generate_and_save_report(self, params: DateParams) -> Dict[str, Any]:
        path = self._reports.save(params.date)
        return {
            "success": True,
            "message": f"Report generated successfully for date: {params.date}",
            "path": str(path),
        }

    def _create_database(self, params: NoParams) -> Dict[str, Any]:
        self._store.ensure_schema()
        return {"success": True, "message": "Database created successfully"}

    # -- protocol -----------------------------------------------------------

    def serve(self, reader: TextIO, writer: TextIO) -> None:
        self._logger.info("Tool server listening on stdio")
        for line in reader:
            if not line.strip():
                continue
            response = self.handle_line(line)
            if response is None:
                continue
            writer.write(json.dumps(response, ensure_ascii=False) + "\n")
            writer.flush()

    def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        try:
            message = json.loads(line)
        except ValueError as exc:
            self._logger.warning("Failed to parse request: %s - Line: %s", exc, line.strip())
            return _error(None, PARSE_ERROR, "Parse error", str(exc))

        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            return _error(None, INVALID_REQUEST, "Invalid request")

        method = message["method"]
        if "id" not in message or method.startswith("notifications/"):
            if method == "notifications/initialized":
                self._logger.info("Client initialized")
            return None

        request_id = message.get("id")
        if method == "initialize":
            return _result(request_id, self._initialize())
        if method == "tools/list":
            return _result(request_id, {"tools": [tool.describe() for tool in self.tools]})
        if method == "tools/call":
            return self._call_tool(request_id, message.get("params"))
        return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    def _initialize(self) -> Dict[str, Any]:
        self._logger.info("Initializing lottery tool server")
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    def _call_tool(self, request_id: Any, params: Any) -> Dict[str, Any]:
        if not isinstance(params, dict):
            return _error(request_id, INVALID_PARAMS, "Missing params")
        name = params.get("name")
        if not isinstance(name, str):
            return _error(request_id, INVALID_PARAMS, "Missing tool name")

        tool = self._tools.get(name)
        if tool is None:
            return _error(request_id, INTERNAL_ERROR, f"Tool execution error: Unknown tool: {name}")

        arguments = params.get("arguments") or {}
        try:
            parsed = tool.params_model.model_validate(arguments)
        except ValidationError as exc:
            return _error(request_id, INVALID_PARAMS, f"Invalid arguments for {name}", json.loads(exc.json()))

        try:
            payload = tool.handler(parsed)
        except IngestError as exc:
            self._logger.error("Tool %s failed: %s", name, exc)
            return _error(request_id, INTERNAL_ERROR, f"Tool execution error: {exc}")
        except Exception as exc:
            self._logger.exception("Tool %s failed unexpectedly: %s", name, exc)
            return _error(request_id, INTERNAL_ERROR, f"Tool execution error: {exc}")

        text = json.dumps(payload, ensure_ascii=False)
        return _result(request_id, {"content": [{"type": "text", "text": text}]})


def _result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "result": result, "id": request_id}


def _error(request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "error": error, "id": request_id}
