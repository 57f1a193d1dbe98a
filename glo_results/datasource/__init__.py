from .base import ResultDataSource
from .decoders import FlatCategoryDecoder, NestedCategoryDecoder, decode_envelope, decode_result
from .http_api import GloHttpDataSource, GloHttpDataSourceConfig

__all__ = [
    "ResultDataSource",
    "GloHttpDataSource",
    "GloHttpDataSourceConfig",
    "NestedCategoryDecoder",
    "FlatCategoryDecoder",
    "decode_envelope",
    "decode_result",
]
