"""Ingestion, storage and reporting for Thai government lottery results."""

from .config import Settings, load_config
from .pipeline import IngestionPipeline
from .raw_json import RawJsonIngestor
from .store import ResultStore
from .types import DateRequest, NormalizedResult

__all__ = [
    "DateRequest",
    "IngestionPipeline",
    "NormalizedResult",
    "RawJsonIngestor",
    "ResultStore",
    "Settings",
    "load_config",
]
