"""Choose a connector from a file path."""

from pathlib import Path

from .base_connector import BaseConnector, SourceUnavailableError
from .duckdb_connector import DuckDBConnector
from .parquet_connector import ParquetConnector

DUCKDB_SUFFIXES = {'.duckdb', '.ddb', '.db'}
PARQUET_SUFFIXES = {'.parquet', '.pq'}


def open_source(path: str, dataset: str) -> BaseConnector:
    """
    Open ``dataset`` in ``path`` with the connector its suffix calls for.

    DuckDB files (.duckdb, .ddb, .db) hold row-store tables; Parquet files
    (.parquet, .pq) or directories of them hold columnar datasets.

    Raises:
        SourceUnavailableError: If the path is not a supported source or cannot be opened
    """
    location = Path(path)
    suffix = location.suffix.lower()

    if suffix in DUCKDB_SUFFIXES:
        return DuckDBConnector(str(location), dataset)
    if suffix in PARQUET_SUFFIXES or location.is_dir():
        return ParquetConnector(str(location), dataset)
    if not location.exists():
        raise SourceUnavailableError(str(location), dataset, 'file does not exist')
    raise SourceUnavailableError(str(location), dataset, f"unsupported source type '{suffix or location.name}'")
