"""Arrow and Parquet connectors for the columnar-store side."""

import json
from pathlib import Path
from typing import List

import numpy as np
import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.parquet as pq

from ..comparison.type_normalizer import ScalarKind
from ..utils.logger import get_logger
from .base_connector import (
    BaseConnector,
    FieldReadError,
    NativeField,
    SentinelRule,
    SourceUnavailableError,
)

logger = get_logger('parquet_connector')

RESERVED_NAMES = frozenset({'_0'})


def pandas_index_columns(schema: pa.Schema) -> List[str]:
    """Index columns pandas stored alongside the data (e.g. '__index_level_0__')."""
    metadata = schema.metadata or {}
    raw = metadata.get(b'pandas')
    if not raw:
        return []
    try:
        index_columns = json.loads(raw).get('index_columns', [])
    except ValueError:
        logger.warning("Ignoring unreadable pandas metadata")
        return []
    # A RangeIndex is stored as a dict, not as a column
    return [c for c in index_columns if isinstance(c, str)]


class ArrowConnector(BaseConnector):
    """Columnar source over an in-memory pyarrow Table."""

    engine = 'arrow'

    def __init__(self, table: pa.Table, name: str = 'table'):
        """
        Args:
            table: Table holding the dataset
            name: Dataset name used in messages
        """
        self._table = table
        self.name = name

    @property
    def description(self) -> str:
        return f"arrow:{self.name}"

    @property
    def schema(self) -> pa.Schema:
        return self._table.schema

    @property
    def sentinel_rule(self) -> SentinelRule:
        return SentinelRule(RESERVED_NAMES | frozenset(pandas_index_columns(self.schema)))

    def exists(self) -> bool:
        return self._table is not None

    def row_count(self) -> int:
        return self._table.num_rows

    def enumerate_fields(self) -> List[NativeField]:
        return [NativeField(f.name, str(f.type)) for f in self.schema]

    def _column(self, name: str) -> pa.ChunkedArray:
        if name not in self.schema.names:
            raise FieldReadError(name, f"no such field in {self.description}")
        return self._table.column(name)

    def read_scalar(self, name: str, kind: ScalarKind) -> np.ndarray:
        if not isinstance(kind, ScalarKind):
            raise ValueError(f"Unsupported scalar kind: {kind!r}")
        try:
            values = pc.drop_null(self._column(name))
            return np.asarray(values.to_numpy(), dtype=kind.dtype)
        except pa.ArrowException as e:
            raise FieldReadError(name, str(e)) from e

    def read_vector_lengths(self, name: str) -> np.ndarray:
        try:
            lengths = pc.fill_null(pc.list_value_length(self._column(name)), 0)
            return np.asarray(lengths.to_numpy(), dtype=np.int64)
        except pa.ArrowException as e:
            raise FieldReadError(name, str(e)) from e

    def read_vector_values(self, name: str, kind: ScalarKind) -> np.ndarray:
        if not isinstance(kind, ScalarKind):
            raise ValueError(f"Unsupported scalar kind: {kind!r}")
        try:
            values = pc.drop_null(pc.list_flatten(self._column(name)))
            return np.asarray(values.to_numpy(), dtype=kind.dtype)
        except pa.ArrowException as e:
            raise FieldReadError(name, str(e)) from e


class ParquetConnector(ArrowConnector):
    """
    Columnar source over a Parquet file.

    ``path`` is either the dataset's file (stem equal to ``dataset``) or a
    directory holding ``<dataset>.parquet``. Columns are read one at a time.
    """

    def __init__(self, path: str, dataset: str):
        self.path = Path(path)
        self.dataset = dataset
        self.name = dataset
        self.file_path = self._resolve(self.path, dataset)

        try:
            self._file = pq.ParquetFile(str(self.file_path))
        except (pa.ArrowException, OSError) as e:
            raise SourceUnavailableError(str(path), dataset, str(e)) from e

        logger.info(f"Opened Parquet dataset {dataset} at {self.file_path}")

    @staticmethod
    def _resolve(path: Path, dataset: str) -> Path:
        if path.is_dir():
            candidate = path / f"{dataset}.parquet"
            if not candidate.is_file():
                raise SourceUnavailableError(str(path), dataset, f"{candidate.name} not found")
            return candidate
        if not path.is_file():
            raise SourceUnavailableError(str(path), dataset, 'file does not exist')
        if path.stem != dataset:
            raise SourceUnavailableError(str(path), dataset, f"file holds dataset '{path.stem}'")
        return path

    @property
    def description(self) -> str:
        return f"{self.file_path}:{self.dataset}"

    @property
    def schema(self) -> pa.Schema:
        return self._file.schema_arrow

    def exists(self) -> bool:
        return self.file_path.is_file()

    def row_count(self) -> int:
        return self._file.metadata.num_rows

    def _column(self, name: str) -> pa.ChunkedArray:
        if name not in self.schema.names:
            raise FieldReadError(name, f"no such field in {self.description}")
        try:
            return self._file.read(columns=[name]).column(name)
        except (pa.ArrowException, OSError) as e:
            raise FieldReadError(name, str(e)) from e

    def close(self):
        self._file.close()
