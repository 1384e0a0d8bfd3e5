"""Comparison engine: catalogs, matching, subfields and distributions."""

from .type_normalizer import (
    LogicalType,
    ScalarKind,
    TypeClass,
    TypeNormalizer,
    UNKNOWN,
    classify,
)
from .field_catalog import FieldCatalog, FieldDescriptor, ReadIssue, SourceSide
from .statistical_tests import (
    DistributionComparator,
    DistributionComparison,
    DistributionSummary,
    Histogram,
    TestResult,
)
from .schema_validator import FieldMatch, FieldTypeComparison, SchemaValidator
from .subfield_reconciler import SubfieldComparison, SubfieldReconciler
from .results import ComparisonStage, ReconciliationReport
from .comparator import ComparisonContext, ParityComparator, compare_sources

__all__ = [
    'LogicalType',
    'ScalarKind',
    'TypeClass',
    'TypeNormalizer',
    'UNKNOWN',
    'classify',
    'FieldCatalog',
    'FieldDescriptor',
    'ReadIssue',
    'SourceSide',
    'DistributionComparator',
    'DistributionComparison',
    'DistributionSummary',
    'Histogram',
    'TestResult',
    'FieldMatch',
    'FieldTypeComparison',
    'SchemaValidator',
    'SubfieldComparison',
    'SubfieldReconciler',
    'ComparisonStage',
    'ReconciliationReport',
    'ComparisonContext',
    'ParityComparator',
    'compare_sources',
]
