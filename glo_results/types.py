from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Sequence, Tuple

# Canonical category order used for persistence.
CATEGORIES: Tuple[str, ...] = (
    "first",
    "second",
    "third",
    "fourth",
    "fifth",
    "last2",
    "last3f",
    "last3b",
    "near1",
)

PLACEHOLDER_PRICE = "0.00"


class DateRequest(NamedTuple):
    """A draw date as the remote API expects it: day, month and year strings."""

    day: str
    month: str
    year: str


@dataclass(frozen=True)
class PrizeEntry:
    round: int
    value: str


@dataclass(frozen=True)
class PrizeCategory:
    price: str
    numbers: Tuple[PrizeEntry, ...] = ()


@dataclass(frozen=True)
class NormalizedResult:
    """One decoded draw, independent of the response schema it came from."""

    date: str
    period: Tuple[int, ...]
    categories: Mapping[str, PrizeCategory] = field(default_factory=dict)

    def period_key(self) -> str:
        return ",".join(str(p) for p in self.period)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in CATEGORIES:
            category = self.categories.get(name)
            if category is None:
                continue
            data[name] = {
                "price": category.price,
                "number": [{"round": n.round, "value": n.value} for n in category.numbers],
            }
        return {"date": self.date, "period": list(self.period), "data": data}


@dataclass
class Partition:
    to_fetch: List[DateRequest] = field(default_factory=list)
    already_stored: List[str] = field(default_factory=list)


@dataclass
class CompleteDraw:
    draw: Any
    prizes: Sequence[Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draw": self.draw.to_dict(),
            "prizes": [prize.to_dict() for prize in self.prizes],
        }
