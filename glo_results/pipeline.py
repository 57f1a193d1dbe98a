from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from .datasource import ResultDataSource
from .errors import BatchPersistError, DecodeError, NoResult, StorageError, TransportError
from .store import ResultStore
from .types import NormalizedResult

SleepFn = Callable[[float], Awaitable[None]]


class IngestionPipeline:
    """Fetch the draws that are not stored yet and persist them in one batch.

    Fetches run one after another with a fixed pause between them; the remote
    endpoint is a third-party service and is not hit concurrently.
    """

    def __init__(
        self,
        store: ResultStore,
        datasource: ResultDataSource,
        pace_seconds: float = 1.0,
        logger: Optional[logging.Logger] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._store = store
        self._datasource = datasource
        self._pace_seconds = pace_seconds
        self._logger = logger or logging.getLogger("glo_results.pipeline")
        self._sleep = sleep

    async def run(self, requests: Iterable[Sequence[str]]) -> List[NormalizedResult]:
        requests = list(requests)
        partition = self._store.partition_by_existence(requests)

        for draw_date in partition.already_stored:
            self._logger.info("%s already stored; skipping.", draw_date)

        if not partition.to_fetch:
            self._logger.info("All %s requested dates already stored; nothing to fetch.", len(requests))
            return []

        self._logger.info("Fetching %s of %s requested dates.", len(partition.to_fetch), len(requests))

        results: List[NormalizedResult] = []
        failed = 0
        for index, request in enumerate(partition.to_fetch):
            if index > 0:
                await self._sleep(self._pace_seconds)
            label = "/".join(request)
            try:
                result = await self._datasource.fetch(request.day, request.month, request.year)
            except NoResult as exc:
                self._logger.warning("No lottery result for %s: %s", label, exc.message)
                continue
            except (TransportError, DecodeError) as exc:
                failed += 1
                self._logger.error("Fetching %s failed: %s", label, exc)
                continue
            self._logger.info("Fetched %s (draw date %s).", label, result.date)
            results.append(result)

        self._logger.info(
            "Batch finished: requested=%s already_stored=%s fetched=%s failed=%s",
            len(requests),
            len(partition.already_stored),
            len(results),
            failed,
        )

        if results:
            try:
                self._store.save_many(results)
            except StorageError as exc:
                self._logger.error("Saving %s fetched results failed: %s", len(results), exc)
                raise BatchPersistError(str(exc), results=results) from exc
            self._logger.info("Saved %s results.", len(results))
        return results

    async def run_once(self, requests: Iterable[Sequence[str]]) -> List[NormalizedResult]:
        try:
            return await self.run(requests)
        finally:
            await self._datasource.close()
