from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from .datasource.decoders import decode_result
from .dates import is_draw_key
from .errors import ParseError, RejectedError, SchemaError
from .store import ResultStore


class RawJsonIngestor:
    """Persist an API reply that was obtained elsewhere (a file, a caller)."""

    def __init__(self, store: ResultStore, logger: Optional[logging.Logger] = None) -> None:
        self._store = store
        self._logger = logger or logging.getLogger("glo_results.raw_json")

    def ingest(self, raw_document: str) -> int:
        try:
            document = json.loads(raw_document)
        except ValueError as exc:
            raise ParseError(f"Invalid JSON: {exc}") from exc
        if not isinstance(document, Mapping):
            raise ParseError("Invalid JSON: expected an object")

        # Only a literal boolean true counts; strings such as "ok" are rejected.
        if document.get("status") is not True:
            raise RejectedError("JSON status is false")

        result = self._require_result(document)
        normalized = decode_result(result, lenient=True)
        draw_id = self._store.save(normalized)
        self._logger.info("Inserted raw document for %s as draw %s", normalized.date, draw_id)
        return draw_id

    @staticmethod
    def _require_result(document: Mapping[str, Any]) -> Mapping[str, Any]:
        response = document.get("response")
        result = response.get("result") if isinstance(response, Mapping) else None
        if not isinstance(result, Mapping):
            raise SchemaError("result")
        if not is_draw_key(result.get("date")):
            raise SchemaError("date")
        if not isinstance(result.get("period"), list):
            raise SchemaError("period")
        if not isinstance(result.get("data"), Mapping):
            raise SchemaError("data")
        return result
