from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict

from glo_results.db import create_db_engine
from glo_results.store import ResultStore
from glo_results.types import NormalizedResult, PrizeCategory, PrizeEntry

_RESULT: Dict[str, Any] = {
    "date": "2024-03-01",
    "period": [123],
    "data": {
        "first": {"price": "6000000.00", "number": [{"round": 1, "value": "123456"}]},
        "second": {
            "price": "200000.00",
            "number": [{"round": 1, "value": "111111"}, {"round": 2, "value": "222222"}],
        },
        "third": {"price": "80000.00", "number": [{"round": 1, "value": "333333"}]},
        "fourth": {"price": "40000.00", "number": [{"round": 1, "value": "444444"}]},
        "fifth": {"price": "20000.00", "number": [{"round": 1, "value": "555555"}]},
        "last2": {"price": "2000.00", "number": [{"round": 1, "value": "56"}]},
        "last3f": {
            "price": "4000.00",
            "number": [{"round": 1, "value": "123"}, {"round": 2, "value": "789"}],
        },
        "last3b": {
            "price": "4000.00",
            "number": [{"round": 1, "value": "456"}, {"round": 2, "value": "012"}],
        },
        "near1": {
            "price": "100000.00",
            "number": [{"round": 1, "value": "123455"}, {"round": 2, "value": "123457"}],
        },
    },
}


def result_payload(date: str = "2024-03-01") -> Dict[str, Any]:
    result = copy.deepcopy(_RESULT)
    result["date"] = date
    return result


def api_payload(date: str = "2024-03-01") -> Dict[str, Any]:
    return {
        "statusMessage": "Success",
        "statusCode": 200,
        "status": True,
        "response": {"result": result_payload(date)},
    }


def api_document(date: str = "2024-03-01") -> str:
    return json.dumps(api_payload(date))


def first_prize_only(date: str = "2024-03-01", period=(123,)) -> NormalizedResult:
    return NormalizedResult(
        date=date,
        period=tuple(period),
        categories={"first": PrizeCategory(price="6000000.00", numbers=(PrizeEntry(1, "123456"),))},
    )


def make_store(directory: str) -> ResultStore:
    db_path = pathlib.Path(directory) / "lottery.db"
    store = ResultStore(create_db_engine(f"sqlite:///{db_path}"))
    store.ensure_schema()
    return store
