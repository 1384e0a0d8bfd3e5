"""
Tests for the DuckDB connector.
"""

import duckdb
import numpy as np
import pyarrow as pa
import pytest

from conftest import make_arrow_table, write_duckdb

from parity_validator.comparison.type_normalizer import ScalarKind
from parity_validator.connectors.base_connector import FieldReadError, SourceUnavailableError
from parity_validator.connectors.duckdb_connector import DuckDBConnector, quote_identifier


@pytest.fixture
def connector(duckdb_file):
    conn = DuckDBConnector(duckdb_file, 'events')
    yield conn
    conn.close()


class TestDuckDBConnector:
    """Test reads from a DuckDB table."""

    def test_row_count(self, connector):
        """Test the entry count."""
        assert connector.row_count() == 1000

    def test_enumerate_fields_in_declaration_order(self, connector):
        """Test native type spellings in column order."""
        fields = connector.enumerate_fields()

        assert [f.name for f in fields] == ['value', 'weight', 'energy', 'isNew', 'hits']
        assert [f.type_name for f in fields] == ['INTEGER', 'FLOAT', 'DOUBLE', 'BOOLEAN', 'FLOAT[]']

    def test_read_scalar(self, connector):
        """Test that scalars come back with the kind's dtype."""
        values = connector.read_scalar('value', ScalarKind.INT32)

        assert values.dtype == np.int32
        assert len(values) == 1000
        assert int(values.sum()) == sum(range(1000))

    def test_read_vector(self, connector):
        """Test vector lengths and flattened elements."""
        lengths = connector.read_vector_lengths('hits')
        values = connector.read_vector_values('hits', ScalarKind.FLOAT32)

        assert lengths.tolist()[:4] == [0, 1, 2, 0]
        assert int(lengths.sum()) == len(values)
        assert values.dtype == np.float32

    def test_unknown_column_raises_field_read_error(self, connector):
        """Test that a bad column is a per-field failure."""
        with pytest.raises(FieldReadError):
            connector.read_scalar('missing', ScalarKind.FLOAT64)

    def test_nulls_are_dropped(self, tmp_path):
        """Test that null scalars are skipped and null vectors count zero."""
        table = pa.table({
            'x': pa.array([1.0, None, 3.0]),
            'v': pa.array([[1.0], None, [2.0, 3.0]], type=pa.list_(pa.float64())),
        })
        path = write_duckdb(tmp_path / 'nulls.duckdb', table, 't')

        with DuckDBConnector(path, 't') as conn:
            assert conn.read_scalar('x', ScalarKind.FLOAT64).tolist() == [1.0, 3.0]
            assert conn.read_vector_lengths('v').tolist() == [1, 0, 2]
            assert conn.read_vector_values('v', ScalarKind.FLOAT64).tolist() == [1.0, 2.0, 3.0]


class TestUnavailable:
    """Test SourceUnavailableError cases."""

    def test_missing_file(self, tmp_path):
        """Test that a missing database file is rejected."""
        with pytest.raises(SourceUnavailableError, match='file does not exist'):
            DuckDBConnector(str(tmp_path / 'nope.duckdb'), 'events')

    def test_missing_table(self, duckdb_file):
        """Test that a missing table is rejected."""
        with pytest.raises(SourceUnavailableError, match="Cannot open dataset 'other'"):
            DuckDBConnector(duckdb_file, 'other')


def test_quote_identifier():
    """Test double-quote escaping."""
    assert quote_identifier('a"b') == '"a""b"'


def test_dropped_row_table(tmp_path):
    """Test that a table without row 42 reports one entry less."""
    path = write_duckdb(tmp_path / 'short.duckdb', make_arrow_table(100, skip=42))

    with DuckDBConnector(path, 'events') as conn:
        assert conn.row_count() == 99
        assert 42 not in conn.read_scalar('value', ScalarKind.INT32).tolist()


def test_same_table_name_in_another_schema(tmp_path, arrow_table):
    """Test that only the default schema's table is enumerated and checked."""
    path = write_duckdb(tmp_path / 'events.duckdb', arrow_table)
    conn = duckdb.connect(path)
    try:
        conn.execute('CREATE SCHEMA staging')
        conn.execute('CREATE TABLE staging.events (other INTEGER)')
        conn.execute('CREATE TABLE staging.calibration (other INTEGER)')
    finally:
        conn.close()

    with DuckDBConnector(path, 'events') as connector:
        assert [f.name for f in connector.enumerate_fields()] == ['value', 'weight', 'energy', 'isNew', 'hits']

    with pytest.raises(SourceUnavailableError, match='table not found'):
        DuckDBConnector(path, 'calibration')
