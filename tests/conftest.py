"""
Pytest configuration and shared fixtures.

Provides in-memory sources that use ROOT TTree/RNTuple type spellings, and
builders for the DuckDB and Parquet copies of the same dataset.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union

import duckdb
import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from parity_validator.connectors.base_connector import (
    BaseConnector,
    FieldReadError,
    NativeField,
    SentinelRule,
)

ENTRIES = 100_000

# Vector columns are (per-row lengths, flattened values)
VectorData = Tuple[np.ndarray, np.ndarray]
ColumnData = Union[np.ndarray, VectorData]


class FakeSource(BaseConnector):
    """In-memory source of named, typed columns."""

    def __init__(
        self,
        engine: str,
        name: str,
        rows: int,
        columns: List[Tuple[str, str, Optional[ColumnData]]],
        sentinel_rule: Optional[SentinelRule] = None,
        unreadable: Iterable[str] = ()
    ):
        self.engine = engine
        self.name = name
        self.rows = rows
        self.columns = columns
        self._rule = sentinel_rule or SentinelRule.none()
        self.unreadable = set(unreadable)
        self.closed = False
        self.reads: List[str] = []

    @property
    def description(self) -> str:
        return f"fake-{self.engine}:{self.name}"

    @property
    def sentinel_rule(self) -> SentinelRule:
        return self._rule

    def exists(self) -> bool:
        return True

    def row_count(self) -> int:
        return self.rows

    def enumerate_fields(self) -> List[NativeField]:
        return [NativeField(name, type_name) for name, type_name, _ in self.columns]

    def _data(self, name: str) -> ColumnData:
        self.reads.append(name)
        if name in self.unreadable:
            raise FieldReadError(name, 'corrupted basket')
        for column_name, _, data in self.columns:
            if column_name == name:
                return data
        raise FieldReadError(name, 'no such field')

    def read_scalar(self, name, kind):
        return np.asarray(self._data(name), dtype=kind.dtype)

    def read_vector_lengths(self, name):
        lengths, _ = self._data(name)
        return np.asarray(lengths, dtype=np.int64)

    def read_vector_values(self, name, kind):
        _, values = self._data(name)
        return np.asarray(values, dtype=kind.dtype)

    def close(self):
        self.closed = True


def dataset_columns(entries: int = ENTRIES, skip: Optional[int] = None) -> Dict[str, ColumnData]:
    """value = i, weight = i * 0.1f, energy = i * 1.5, isNew = i % 2 == 0, hits has i % 3 elements."""
    index = np.arange(entries)
    if skip is not None:
        index = index[index != skip]

    lengths = (index % 3).astype(np.int64)
    return {
        'value': index.astype(np.int32),
        'weight': index.astype(np.float32) * np.float32(0.1),
        'energy': index * 1.5,
        'isNew': index % 2 == 0,
        'hits': (lengths, np.repeat(index.astype(np.float32), lengths)),
    }


TTREE_TYPES = {
    'value': 'Int_t',
    'weight': 'Float_t',
    'energy': 'Double_t',
    'isNew': 'Bool_t',
    'hits': 'vector<float>',
}

RNTUPLE_TYPES = {
    'value': 'std::int32_t',
    'weight': 'float',
    'energy': 'double',
    'isNew': 'bool',
    'hits': 'std::vector<float>',
}

RNTUPLE_RULE = SentinelRule(frozenset({'_0'}), drop_trailing=True)


def make_ttree(entries: int = ENTRIES, **kwargs) -> FakeSource:
    data = dataset_columns(entries)
    columns = [(name, TTREE_TYPES[name], data[name]) for name in TTREE_TYPES]
    return FakeSource('ttree', 'events', entries, columns, **kwargs)


def make_rntuple(
    entries: int = ENTRIES,
    skip: Optional[int] = None,
    drop: Iterable[str] = (),
    rename: Optional[Dict[str, str]] = None,
    types: Optional[Dict[str, str]] = None,
    **kwargs
) -> FakeSource:
    data = dataset_columns(entries, skip)
    rename = rename or {}
    spellings = dict(RNTUPLE_TYPES, **(types or {}))

    columns = [
        (rename.get(name, name), spellings[name], data[name])
        for name in RNTUPLE_TYPES
        if name not in set(drop)
    ]
    # Bookkeeping field appended by the storage format
    columns.append(('_0', 'std::uint64_t', None))

    rows = entries if skip is None else entries - 1
    kwargs.setdefault('sentinel_rule', RNTUPLE_RULE)
    return FakeSource('rntuple', 'events', rows, columns, **kwargs)


def make_arrow_table(entries: int, skip: Optional[int] = None) -> pa.Table:
    data = dataset_columns(entries, skip)
    lengths, values = data['hits']
    offsets = np.concatenate([[0], np.cumsum(lengths)]).astype(np.int32)

    return pa.table({
        'value': pa.array(data['value'], type=pa.int32()),
        'weight': pa.array(data['weight'], type=pa.float32()),
        'energy': pa.array(data['energy'], type=pa.float64()),
        'isNew': pa.array(data['isNew'], type=pa.bool_()),
        'hits': pa.ListArray.from_arrays(pa.array(offsets), pa.array(values, type=pa.float32())),
    })


def write_duckdb(path, table: pa.Table, name: str = 'events') -> str:
    """Write ``table`` into a DuckDB file and close the writer."""
    conn = duckdb.connect(str(path))
    try:
        conn.register('staging', table)
        conn.execute(f'CREATE TABLE "{name}" AS SELECT * FROM staging')
        conn.unregister('staging')
    finally:
        conn.close()
    return str(path)


def write_parquet(path, table: pa.Table) -> str:
    pq.write_table(table, str(path))
    return str(path)


@pytest.fixture
def ttree():
    return make_ttree()


@pytest.fixture
def rntuple():
    return make_rntuple()


@pytest.fixture
def small_ttree():
    return make_ttree(entries=1000)


@pytest.fixture
def small_rntuple():
    return make_rntuple(entries=1000)


@pytest.fixture
def arrow_table():
    return make_arrow_table(1000)


@pytest.fixture
def duckdb_file(tmp_path, arrow_table):
    return write_duckdb(tmp_path / 'events.duckdb', arrow_table)


@pytest.fixture
def parquet_file(tmp_path, arrow_table):
    return write_parquet(tmp_path / 'events.parquet', arrow_table)
