from __future__ import annotations

import abc

from ..types import NormalizedResult


class ResultDataSource(abc.ABC):
    """Abstract result provider."""

    @abc.abstractmethod
    async def fetch(self, day: str, month: str, year: str) -> NormalizedResult:
        """Return the draw published for the given date.

        Implementations raise `TransportError` when the source cannot be
        reached, `DecodeError` when the reply cannot be understood and
        `NoResult` when the source has nothing for that date.
        """

    async def close(self) -> None:
        """Optional hook for connectors that require cleanup."""
        return None
