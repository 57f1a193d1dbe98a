"""Decoders for the response shapes the results API has used over time.

Every decoder produces the same `NormalizedResult`. The envelope
(``status``/``statusCode``/``response``) is shared; the prize ``data`` block
differs and is sniffed to pick a decoder:

* nested: ``{"first": {"price": "6000000.00", "number": [{"round": 1, "value": "123456"}]}}``
* flat:   ``{"first": ["123456"], "first_price": "6000000.00"}``

In lenient mode malformed prize fields fall back to placeholders instead of
raising; this is what raw documents supplied by callers go through.
"""

from __future__ import annotations

import abc
from typing import Any, List, Mapping, Optional, Tuple

from ..dates import is_draw_key
from ..errors import DecodeError, NoResult
from ..types import CATEGORIES, PLACEHOLDER_PRICE, NormalizedResult, PrizeCategory, PrizeEntry

SUCCESS_CODE = 200
TRUTHY_STATUS = {"true", "success", "ok", "1"}


def coerce_status(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in TRUTHY_STATUS
    raise DecodeError(f"Unrecognized status value: {raw!r}")


def coerce_status_code(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw)
    raise DecodeError(f"Unrecognized statusCode value: {raw!r}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ResultDecoder(abc.ABC):
    name = "base"

    @abc.abstractmethod
    def matches(self, data: Mapping[str, Any]) -> bool:
        ...

    @abc.abstractmethod
    def decode_category(
        self, name: str, data: Mapping[str, Any], lenient: bool
    ) -> Optional[PrizeCategory]:
        ...

    def decode(self, result: Mapping[str, Any], lenient: bool = False) -> NormalizedResult:
        date = result.get("date")
        if not is_draw_key(date):
            raise DecodeError(f"Missing or invalid date: {date!r}")

        period = self._decode_period(result.get("period"), lenient)

        data = result.get("data")
        if not isinstance(data, Mapping):
            raise DecodeError("Missing or invalid data")

        categories = {}
        for name in CATEGORIES:
            category = self.decode_category(name, data, lenient)
            if category is not None:
                categories[name] = category
        return NormalizedResult(date=date, period=period, categories=categories)

    @staticmethod
    def _decode_period(raw: Any, lenient: bool) -> Tuple[int, ...]:
        if not isinstance(raw, list):
            raise DecodeError("Missing or invalid period")
        if lenient:
            return tuple(p for p in raw if _is_int(p))
        if not all(_is_int(p) for p in raw):
            raise DecodeError("period must be a list of integers")
        return tuple(raw)

    @staticmethod
    def _decode_price(raw: Any, name: str, lenient: bool) -> str:
        if isinstance(raw, str):
            return raw
        if lenient:
            return PLACEHOLDER_PRICE
        raise DecodeError(f"Missing price for {name}")

    @staticmethod
    def _decode_entry(raw: Any, name: str, lenient: bool) -> PrizeEntry:
        item = raw if isinstance(raw, Mapping) else {}
        round_number = item.get("round")
        value = item.get("value")
        if lenient:
            return PrizeEntry(
                round=round_number if _is_int(round_number) else 0,
                value=value if isinstance(value, str) else "",
            )
        if not _is_int(round_number) or not isinstance(value, str):
            raise DecodeError(f"Malformed number entry in {name}: {raw!r}")
        return PrizeEntry(round=round_number, value=value)


class NestedCategoryDecoder(ResultDecoder):
    name = "nested"

    def matches(self, data: Mapping[str, Any]) -> bool:
        return any(isinstance(data.get(c), Mapping) for c in CATEGORIES)

    def decode_category(
        self, name: str, data: Mapping[str, Any], lenient: bool
    ) -> Optional[PrizeCategory]:
        raw = data.get(name)
        if raw is None:
            if lenient:
                return None
            raise DecodeError(f"Missing prize category {name}")
        if not isinstance(raw, Mapping):
            if lenient:
                return None
            raise DecodeError(f"Prize category {name} must be an object")

        price = self._decode_price(raw.get("price"), name, lenient)
        numbers = raw.get("number")
        if not isinstance(numbers, list):
            if lenient:
                return None
            raise DecodeError(f"Missing numbers for {name}")
        entries = tuple(self._decode_entry(item, name, lenient) for item in numbers)
        return PrizeCategory(price=price, numbers=entries)


class FlatCategoryDecoder(ResultDecoder):
    name = "flat"

    def matches(self, data: Mapping[str, Any]) -> bool:
        return any(isinstance(data.get(c), list) for c in CATEGORIES)

    def decode_category(
        self, name: str, data: Mapping[str, Any], lenient: bool
    ) -> Optional[PrizeCategory]:
        raw = data.get(name)
        if not isinstance(raw, list):
            if lenient:
                return None
            raise DecodeError(f"Missing prize category {name}")

        price = self._decode_price(data.get(f"{name}_price"), name, lenient)
        entries: List[PrizeEntry] = []
        for position, item in enumerate(raw, start=1):
            if isinstance(item, Mapping):
                entries.append(self._decode_entry(item, name, lenient))
            elif isinstance(item, str):
                entries.append(PrizeEntry(round=position, value=item))
            elif _is_int(item):
                entries.append(PrizeEntry(round=position, value=str(item)))
            elif lenient:
                entries.append(PrizeEntry(round=position, value=""))
            else:
                raise DecodeError(f"Malformed number entry in {name}: {item!r}")
        return PrizeCategory(price=price, numbers=tuple(entries))


DECODERS: Tuple[ResultDecoder, ...] = (NestedCategoryDecoder(), FlatCategoryDecoder())


def select_decoder(result: Mapping[str, Any]) -> ResultDecoder:
    data = result.get("data")
    if isinstance(data, Mapping):
        for decoder in DECODERS:
            if decoder.matches(data):
                return decoder
    return DECODERS[0]


def decode_result(result: Any, lenient: bool = False) -> NormalizedResult:
    if not isinstance(result, Mapping):
        raise DecodeError("result must be an object")
    return select_decoder(result).decode(result, lenient=lenient)


def decode_envelope(payload: Any) -> NormalizedResult:
    """Decode a full API reply, raising `NoResult` when it carries no draw."""
    if not isinstance(payload, Mapping):
        raise DecodeError("API returned non-object payload")
    if "status" not in payload or "statusCode" not in payload:
        raise DecodeError("API payload is missing status fields")

    status = coerce_status(payload["status"])
    status_code = coerce_status_code(payload["statusCode"])
    message = str(payload.get("statusMessage") or "")
    if not status or status_code != SUCCESS_CODE:
        raise NoResult(message or "API reported failure", status_code=status_code)

    response = payload.get("response")
    if response is None:
        raise NoResult("No response data", status_code=status_code)
    if not isinstance(response, Mapping):
        raise DecodeError("response must be an object")

    result = response.get("result")
    if result is None:
        raise NoResult("No lottery result", status_code=status_code)
    return decode_result(result)
