"""Schema validation: field matching, type classification and count checks."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..utils.logger import get_logger
from .field_catalog import FieldDescriptor
from .statistical_tests import TestResult
from .type_normalizer import LogicalType, TypeClass, classify

logger = get_logger('schema_validator')


@dataclass(frozen=True)
class FieldMatch:
    """A field paired by name across sources. A missing side means the field is unmatched."""
    name: str
    row: Optional[FieldDescriptor]
    columnar: Optional[FieldDescriptor]

    @property
    def is_matched(self) -> bool:
        return self.row is not None and self.columnar is not None

    def to_dict(self) -> Dict[str, object]:
        return {
            'name': self.name,
            'row_type': self.row.native_type if self.row else None,
            'columnar_type': self.columnar.native_type if self.columnar else None,
            'matched': self.is_matched,
        }


@dataclass(frozen=True)
class FieldTypeComparison:
    """(name, row type, columnar type) with the classification of the pair."""
    name: str
    row_type: Optional[str]
    columnar_type: Optional[str]
    row_logical: Optional[LogicalType]
    columnar_logical: Optional[LogicalType]
    type_class: Optional[TypeClass]

    def to_dict(self) -> Dict[str, object]:
        return {
            'name': self.name,
            'row_type': self.row_type,
            'columnar_type': self.columnar_type,
            'row_logical': str(self.row_logical) if self.row_logical else None,
            'columnar_logical': str(self.columnar_logical) if self.columnar_logical else None,
            'class': self.type_class.value if self.type_class else None,
        }


class SchemaValidator:
    """Validates schema compatibility between the row and columnar sources."""

    def match_fields(
        self,
        row_catalog: List[FieldDescriptor],
        columnar_catalog: List[FieldDescriptor]
    ) -> List[FieldMatch]:
        """
        Pair fields by exact name.

        Row-side order first, then columnar-only leftovers in columnar order.
        Each columnar descriptor is consumed at most once; surplus duplicates
        surface as unmatched entries.

        Args:
            row_catalog: Row source descriptors in declaration order
            columnar_catalog: Columnar source descriptors in declaration order

        Returns:
            List of FieldMatch
        """
        lookup: Dict[str, List[FieldDescriptor]] = {}
        for descriptor in columnar_catalog:
            lookup.setdefault(descriptor.name, []).append(descriptor)

        matches = []
        for row_field in row_catalog:
            candidates = lookup.get(row_field.name)
            columnar_field = candidates.pop(0) if candidates else None
            matches.append(FieldMatch(row_field.name, row_field, columnar_field))

        consumed = {id(m.columnar) for m in matches if m.columnar is not None}
        for descriptor in columnar_catalog:
            if id(descriptor) not in consumed:
                matches.append(FieldMatch(descriptor.name, None, descriptor))

        unmatched = [m.name for m in matches if not m.is_matched]
        if unmatched:
            logger.info(f"Unmatched fields: {unmatched}")

        return matches

    def compare_types(self, matches: List[FieldMatch]) -> List[FieldTypeComparison]:
        """
        Build the type triple of every match.

        The classification is None for unmatched fields.
        """
        comparisons = []
        for match in matches:
            row_logical = match.row.logical_type if match.row else None
            columnar_logical = match.columnar.logical_type if match.columnar else None
            type_class = classify(row_logical, columnar_logical) if match.is_matched else None

            comparisons.append(FieldTypeComparison(
                name=match.name,
                row_type=match.row.native_type if match.row else None,
                columnar_type=match.columnar.native_type if match.columnar else None,
                row_logical=row_logical,
                columnar_logical=columnar_logical,
                type_class=type_class
            ))

        return comparisons

    def compare_counts(self, test_name: str, row_count: int, columnar_count: int) -> TestResult:
        """
        Compare an entry or field count pair.

        Args:
            test_name: 'entry_count' or 'field_count'
            row_count: Count on the row source
            columnar_count: Count on the columnar source

        Returns:
            TestResult with both counts
        """
        return TestResult(
            test_name=test_name,
            column=None,
            status='PASS' if row_count == columnar_count else 'FAIL',
            details={
                'row': row_count,
                'columnar': columnar_count,
                'difference': columnar_count - row_count,
            }
        )

    def field_names_result(self, matches: List[FieldMatch]) -> TestResult:
        row_only = [m.name for m in matches if m.columnar is None]
        columnar_only = [m.name for m in matches if m.row is None]

        return TestResult(
            test_name='field_names',
            column=None,
            status='FAIL' if row_only or columnar_only else 'PASS',
            details={
                'matched': sum(1 for m in matches if m.is_matched),
                'row_only': row_only,
                'columnar_only': columnar_only,
            }
        )

    def field_types_result(self, comparisons: List[FieldTypeComparison]) -> TestResult:
        by_class: Dict[str, List[str]] = {}
        for comparison in comparisons:
            if comparison.type_class is not None:
                by_class.setdefault(comparison.type_class.value, []).append(comparison.name)

        near = by_class.get(TypeClass.NEAR_MATCH.value, [])
        bad = by_class.get(TypeClass.MISMATCH.value, []) + by_class.get(TypeClass.MISSING.value, [])

        if bad:
            status = 'FAIL'
        elif near:
            status = 'WARNING'
        else:
            status = 'PASS'

        return TestResult(
            test_name='field_types',
            column=None,
            status=status,
            details={
                'exact': len(by_class.get(TypeClass.EXACT.value, [])),
                'near_match': near,
                'mismatch': by_class.get(TypeClass.MISMATCH.value, []),
                'missing': by_class.get(TypeClass.MISSING.value, []),
            }
        )
