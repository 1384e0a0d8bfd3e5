"""
Parity Validator - row-store vs columnar-store equivalence checker

Verifies that two independently written copies of one dataset, a row store
and a columnar store, hold the same schema, the same vector cardinalities
and bit-identical value distributions.
"""

__version__ = '1.0.0'

from .connectors import open_source, DuckDBConnector, ParquetConnector, ArrowConnector
from .comparison import ParityComparator, ComparisonContext, compare_sources
from .reporting import ConsoleRenderer, ReportGenerator
from .utils import ConfigLoader, setup_logging

__all__ = [
    'open_source',
    'DuckDBConnector',
    'ParquetConnector',
    'ArrowConnector',
    'ParityComparator',
    'ComparisonContext',
    'compare_sources',
    'ConsoleRenderer',
    'ReportGenerator',
    'ConfigLoader',
    'setup_logging',
]
