import asyncio
import tempfile
import unittest
from typing import Dict, List, Tuple
from unittest import mock

from glo_results.datasource.base import ResultDataSource
from glo_results.errors import BatchPersistError, DecodeError, NoResult, StorageError, TransportError
from glo_results.pipeline import IngestionPipeline
from glo_results.tests.fixtures import first_prize_only, make_store
from glo_results.types import NormalizedResult


class FakeDataSource(ResultDataSource):
    """Returns canned results keyed by (day, month, year); exceptions are raised."""

    def __init__(self, outcomes: Dict[Tuple[str, str, str], object]) -> None:
        self._outcomes = outcomes
        self.calls: List[Tuple[str, str, str]] = []
        self.closed = False

    async def fetch(self, day: str, month: str, year: str) -> NormalizedResult:
        self.calls.append((day, month, year))
        outcome = self._outcomes[(day, month, year)]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class IngestionPipelineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.store = make_store(self._tmpdir.name)
        self.sleep = SleepRecorder()

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def _pipeline(self, datasource: ResultDataSource, store=None) -> IngestionPipeline:
        return IngestionPipeline(store or self.store, datasource, pace_seconds=1.0, sleep=self.sleep)

    def test_full_overlap_makes_no_calls(self) -> None:
        self.store.save(first_prize_only("2024-03-01"))
        self.store.save(first_prize_only("2024-03-16"))
        datasource = FakeDataSource({})

        results = asyncio.run(
            self._pipeline(datasource).run([("01", "03", "2024"), ("16", "03", "2024")])
        )

        self.assertEqual(results, [])
        self.assertEqual(datasource.calls, [])
        self.assertEqual(self.sleep.delays, [])

    def test_fetches_missing_dates_in_order_with_pacing(self) -> None:
        self.store.save(first_prize_only("2024-02-01"))
        datasource = FakeDataSource(
            {
                ("16", "03", "2024"): first_prize_only("2024-03-16"),
                ("01", "01", "2024"): first_prize_only("2024-01-01"),
                ("16", "01", "2024"): first_prize_only("2024-01-16"),
            }
        )
        requests = [("16", "03", "2024"), ("01", "02", "2024"), ("01", "01", "2024"), ("16", "01", "2024")]

        results = asyncio.run(self._pipeline(datasource).run(requests))

        self.assertEqual(datasource.calls, [("16", "03", "2024"), ("01", "01", "2024"), ("16", "01", "2024")])
        self.assertEqual([r.date for r in results], ["2024-03-16", "2024-01-01", "2024-01-16"])
        self.assertEqual(self.sleep.delays, [1.0, 1.0])
        for date in ("2024-03-16", "2024-01-01", "2024-01-16"):
            self.assertTrue(self.store.exists(date))

    def test_failed_dates_do_not_abort_the_batch(self) -> None:
        datasource = FakeDataSource(
            {
                ("01", "03", "2024"): TransportError("connection reset"),
                ("16", "03", "2024"): first_prize_only("2024-03-16"),
                ("01", "04", "2024"): DecodeError("bad body"),
                ("16", "04", "2024"): NoResult("No lottery result", status_code=200),
                ("01", "05", "2024"): first_prize_only("2024-05-01"),
            }
        )
        requests = list(datasource._outcomes)

        results = asyncio.run(self._pipeline(datasource).run(requests))

        self.assertEqual([r.date for r in results], ["2024-03-16", "2024-05-01"])
        self.assertEqual(len(datasource.calls), 5)
        self.assertEqual(len(self.sleep.delays), 4)
        self.assertTrue(self.store.exists("2024-03-16"))
        self.assertTrue(self.store.exists("2024-05-01"))
        self.assertFalse(self.store.exists("2024-03-01"))

    def test_nothing_fetched_skips_persist(self) -> None:
        store = mock.Mock(wraps=self.store)
        datasource = FakeDataSource({("01", "03", "2024"): NoResult("No lottery result")})

        results = asyncio.run(self._pipeline(datasource, store=store).run([("01", "03", "2024")]))

        self.assertEqual(results, [])
        store.save_many.assert_not_called()

    def test_persist_failure_surfaces_fetched_results(self) -> None:
        store = mock.Mock(wraps=self.store)
        store.save_many.side_effect = StorageError("disk I/O error")
        datasource = FakeDataSource({("01", "03", "2024"): first_prize_only("2024-03-01")})

        with self.assertRaises(BatchPersistError) as ctx:
            asyncio.run(self._pipeline(datasource, store=store).run([("01", "03", "2024")]))

        self.assertEqual([r.date for r in ctx.exception.results], ["2024-03-01"])
        self.assertIsInstance(ctx.exception, StorageError)
        store.save_many.assert_called_once()

    def test_run_once_closes_datasource(self) -> None:
        datasource = FakeDataSource({("01", "03", "2024"): first_prize_only("2024-03-01")})

        asyncio.run(self._pipeline(datasource).run_once([("01", "03", "2024")]))

        self.assertTrue(datasource.closed)


if __name__ == "__main__":
    unittest.main()
