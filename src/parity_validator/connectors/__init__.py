"""Data source connectors."""

from .base_connector import (
    BaseConnector,
    FieldReadError,
    NativeField,
    SentinelRule,
    SourceUnavailableError,
)
from .duckdb_connector import DuckDBConnector
from .parquet_connector import ArrowConnector, ParquetConnector
from .factory import open_source

__all__ = [
    'BaseConnector',
    'FieldReadError',
    'NativeField',
    'SentinelRule',
    'SourceUnavailableError',
    'DuckDBConnector',
    'ArrowConnector',
    'ParquetConnector',
    'open_source',
]
