"""Base connector interface for the row and columnar data sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, NamedTuple

import numpy as np


class SourceUnavailableError(RuntimeError):
    """A source cannot be opened, or its dataset does not exist."""

    def __init__(self, path: str, dataset: str, reason: str = ''):
        self.path = str(path)
        self.dataset = dataset
        self.reason = reason
        if dataset:
            message = f"Cannot open dataset '{dataset}' in {self.path}"
        else:
            message = f"Cannot read source {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class FieldReadError(RuntimeError):
    """A single field cannot be read from an otherwise available source."""

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Cannot read field '{field_name}': {reason}")


class NativeField(NamedTuple):
    """A field as enumerated by a source, with the engine's own type spelling."""
    name: str
    type_name: str


@dataclass(frozen=True)
class SentinelRule:
    """
    Decides which enumerated fields are storage bookkeeping, not user schema.

    A field is a sentinel when its name is reserved, or when ``drop_trailing``
    is set and it is the last enumerated field.
    """
    reserved_names: FrozenSet[str] = frozenset()
    drop_trailing: bool = False

    @classmethod
    def none(cls) -> 'SentinelRule':
        return cls()

    def extend(self, reserved_names: Iterable[str] = (), drop_trailing: bool = False) -> 'SentinelRule':
        return SentinelRule(
            reserved_names=self.reserved_names | frozenset(reserved_names),
            drop_trailing=self.drop_trailing or drop_trailing
        )

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_names

    def is_sentinel(self, name: str, position: int, total: int) -> bool:
        if self.is_reserved(name):
            return True
        return self.drop_trailing and total > 0 and position == total - 1


class BaseConnector(ABC):
    """
    Abstract read-only source of one dataset.

    Subclasses set ``engine`` to the name of the type table their spellings
    belong to. Nulls are dropped from scalar and element reads; a null vector
    has length 0.
    """

    engine: str = ''

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable identification of the source (path and dataset)."""
        pass

    @property
    def sentinel_rule(self) -> SentinelRule:
        """Bookkeeping fields this source adds on its own."""
        return SentinelRule.none()

    @abstractmethod
    def exists(self) -> bool:
        """Whether the dataset exists in the underlying storage."""
        pass

    @abstractmethod
    def row_count(self) -> int:
        """
        Get the number of entries of the dataset.

        Returns:
            Number of rows
        """
        pass

    @abstractmethod
    def enumerate_fields(self) -> List[NativeField]:
        """
        Enumerate fields in declaration order.

        Returns:
            List of NativeField with the engine's type spelling
        """
        pass

    @abstractmethod
    def read_scalar(self, name: str, kind) -> np.ndarray:
        """
        Read every non-null value of a scalar field.

        Args:
            name: Field name
            kind: ScalarKind the values are read as

        Returns:
            1-D array with ``kind.dtype``

        Raises:
            FieldReadError: If the field cannot be read
        """
        pass

    @abstractmethod
    def read_vector_lengths(self, name: str) -> np.ndarray:
        """
        Read the per-row element count of a vector field.

        Raises:
            FieldReadError: If the field cannot be read
        """
        pass

    @abstractmethod
    def read_vector_values(self, name: str, kind) -> np.ndarray:
        """
        Read every non-null element of a vector field, flattened over rows.

        Raises:
            FieldReadError: If the field cannot be read
        """
        pass

    def close(self):
        """Close connection and cleanup resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
