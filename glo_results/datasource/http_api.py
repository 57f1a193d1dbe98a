from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

from ..config import DEFAULT_API_URL
from ..errors import DecodeError, TransportError
from ..types import NormalizedResult
from .base import ResultDataSource
from .decoders import decode_envelope


@dataclass(frozen=True)
class GloHttpDataSourceConfig:
    url: str = DEFAULT_API_URL
    timeout_seconds: Optional[int] = 30


class GloHttpDataSource(ResultDataSource):
    """Fetch one draw at a time from the lottery office's JSON endpoint."""

    def __init__(
        self,
        config: Optional[GloHttpDataSourceConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config or GloHttpDataSourceConfig()
        self._session = session or requests.Session()

    async def fetch(self, day: str, month: str, year: str) -> NormalizedResult:
        body = {"date": day, "month": month, "year": year}
        payload = await asyncio.to_thread(self._post_json, body)
        return decode_envelope(payload)

    def _post_json(self, body: Mapping[str, str]) -> Any:
        cfg = self._config
        try:
            resp = self._session.post(
                cfg.url,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=cfg.timeout_seconds,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"Request to {cfg.url} failed: {exc}") from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError("API returned a non-JSON body") from exc

    async def close(self) -> None:
        self._session.close()
