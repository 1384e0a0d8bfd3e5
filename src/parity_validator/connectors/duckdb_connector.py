"""DuckDB connector for the row-store side."""

from pathlib import Path
from typing import List

import duckdb
import numpy as np

from ..comparison.type_normalizer import ScalarKind
from ..utils.logger import get_logger
from .base_connector import BaseConnector, FieldReadError, NativeField, SourceUnavailableError

logger = get_logger('duckdb_connector')


def quote_identifier(name: str) -> str:
    """Double-quote a DuckDB identifier."""
    return '"' + name.replace('"', '""') + '"'


class DuckDBConnector(BaseConnector):
    """Read-only access to one table in the default schema of a DuckDB database file."""

    engine = 'duckdb'

    def __init__(self, db_path: str, table: str):
        """
        Open the database read-only and check the table exists.

        Args:
            db_path: Path to the .duckdb file
            table: Table (dataset) name

        Raises:
            SourceUnavailableError: If the file or the table does not exist
        """
        self.db_path = str(db_path)
        self.table = table
        self.conn = None

        if not Path(self.db_path).is_file():
            raise SourceUnavailableError(self.db_path, table, 'file does not exist')

        try:
            self.conn = duckdb.connect(self.db_path, read_only=True)
        except duckdb.Error as e:
            raise SourceUnavailableError(self.db_path, table, str(e)) from e

        if not self.exists():
            self.close()
            raise SourceUnavailableError(self.db_path, table, 'table not found')

        logger.info(f"Opened DuckDB table {table} in {self.db_path}")

    @property
    def description(self) -> str:
        return f"{self.db_path}:{self.table}"

    def exists(self) -> bool:
        row = self.conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables "
            "WHERE table_catalog = current_database() AND table_schema = current_schema() "
            "AND table_name = ?",
            [self.table]
        ).fetchone()
        return bool(row and row[0])

    def row_count(self) -> int:
        try:
            return int(self.conn.execute(f"SELECT COUNT(*) FROM {quote_identifier(self.table)}").fetchone()[0])
        except duckdb.Error as e:
            raise SourceUnavailableError(self.db_path, self.table, str(e)) from e

    def enumerate_fields(self) -> List[NativeField]:
        rows = self.conn.execute(
            """
            SELECT column_name, data_type
            FROM information_schema.columns
            WHERE table_catalog = current_database()
              AND table_schema = current_schema()
              AND table_name = ?
            ORDER BY ordinal_position
            """,
            [self.table]
        ).fetchall()
        return [NativeField(name, type_name) for name, type_name in rows]

    def _fetch(self, name: str, query: str, dtype) -> np.ndarray:
        try:
            result = self.conn.execute(query).fetchnumpy()
        except duckdb.Error as e:
            raise FieldReadError(name, str(e)) from e

        values = result['v']
        if isinstance(values, np.ma.MaskedArray):
            values = values.compressed()
        return np.asarray(values, dtype=dtype)

    def read_scalar(self, name: str, kind: ScalarKind) -> np.ndarray:
        if not isinstance(kind, ScalarKind):
            raise ValueError(f"Unsupported scalar kind: {kind!r}")
        column = quote_identifier(name)
        query = f"SELECT {column} AS v FROM {quote_identifier(self.table)} WHERE {column} IS NOT NULL"
        return self._fetch(name, query, kind.dtype)

    def read_vector_lengths(self, name: str) -> np.ndarray:
        query = f"SELECT COALESCE(len({quote_identifier(name)}), 0) AS v FROM {quote_identifier(self.table)}"
        return self._fetch(name, query, np.int64)

    def read_vector_values(self, name: str, kind: ScalarKind) -> np.ndarray:
        if not isinstance(kind, ScalarKind):
            raise ValueError(f"Unsupported scalar kind: {kind!r}")
        query = (
            f"SELECT v FROM (SELECT UNNEST({quote_identifier(name)}) AS v "
            f"FROM {quote_identifier(self.table)}) WHERE v IS NOT NULL"
        )
        return self._fetch(name, query, kind.dtype)

    def close(self):
        """Close DuckDB connection."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.debug(f"Closed DuckDB connection to {self.db_path}")
