"""Aggregated result of one comparison run."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple

from .field_catalog import ReadIssue
from .schema_validator import FieldMatch, FieldTypeComparison, SchemaValidator
from .statistical_tests import DistributionComparison, TestResult
from .subfield_reconciler import SubfieldComparison
from .type_normalizer import TypeClass


class ComparisonStage(Enum):
    """Pipeline stages, in the order a run passes through them."""
    INIT = 'Init'
    CATALOG_BUILT = 'CatalogBuilt'
    MATCHED = 'Matched'
    SUBFIELDS_RECONCILED = 'SubfieldsReconciled'
    DISTRIBUTIONS_COMPARED = 'DistributionsCompared'
    DONE = 'Done'


@dataclass
class ReconciliationReport:
    """Everything one run found, consumed by the console and file reporters."""
    row_description: str
    columnar_description: str
    entry_counts: Tuple[int, int] = (0, 0)
    field_counts: Tuple[int, int] = (0, 0)
    matches: List[FieldMatch] = field(default_factory=list)
    type_comparisons: List[FieldTypeComparison] = field(default_factory=list)
    subfields: List[SubfieldComparison] = field(default_factory=list)
    distributions: List[DistributionComparison] = field(default_factory=list)
    element_distributions: List[DistributionComparison] = field(default_factory=list)
    read_issues: List[ReadIssue] = field(default_factory=list)
    stage: ComparisonStage = ComparisonStage.INIT
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    duration_seconds: float = 0.0

    @property
    def entry_counts_match(self) -> bool:
        return self.entry_counts[0] == self.entry_counts[1]

    @property
    def field_counts_match(self) -> bool:
        return self.field_counts[0] == self.field_counts[1]

    @property
    def all_fields_matched(self) -> bool:
        return all(m.is_matched for m in self.matches)

    @property
    def all_types_exact(self) -> bool:
        return all(
            c.type_class is TypeClass.EXACT
            for c in self.type_comparisons
            if c.type_class is not None
        )

    @property
    def subfields_match(self) -> bool:
        return all(s.matches for s in self.subfields)

    @property
    def distributions_match(self) -> bool:
        return all(d.matches for d in self.distributions)

    @property
    def element_distributions_match(self) -> bool:
        """Informational; not part of the verdict."""
        return all(d.matches for d in self.element_distributions)

    @property
    def passed(self) -> bool:
        return (
            self.entry_counts_match
            and self.field_counts_match
            and self.all_fields_matched
            and self.all_types_exact
            and self.subfields_match
            and self.distributions_match
            and not self.read_issues
        )

    def tests(self) -> List[TestResult]:
        """One TestResult per section, plus one per scalar kind."""
        validator = SchemaValidator()
        results = [
            validator.compare_counts('entry_count', *self.entry_counts),
            validator.compare_counts('field_count', *self.field_counts),
            validator.field_names_result(self.matches),
            validator.field_types_result(self.type_comparisons),
        ]

        for subfield in self.subfields:
            results.append(TestResult(
                test_name='subfield_count',
                column=subfield.field_name,
                status='PASS' if subfield.matches else 'FAIL',
                details=subfield.to_dict()
            ))

        for comparison in self.distributions:
            results.append(TestResult(
                test_name='histogram',
                column=comparison.kind.value,
                status='PASS' if comparison.matches else 'FAIL',
                details=comparison.to_dict()
            ))
            results.append(comparison.chi_square)

        for comparison in self.element_distributions:
            results.append(TestResult(
                test_name='element_histogram',
                column=comparison.kind.value,
                status='PASS' if comparison.matches else 'WARNING',
                details=comparison.to_dict()
            ))

        for issue in self.read_issues:
            results.append(TestResult(
                test_name='read_issue',
                column=issue.field,
                status='ERROR',
                details=issue.to_dict()
            ))

        return results

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dictionary for the file reporters."""
        tests = [t.to_dict() for t in self.tests()]

        return {
            'row_source': self.row_description,
            'columnar_source': self.columnar_description,
            'started_at': self.started_at,
            'duration_seconds': round(self.duration_seconds, 2),
            'stage': self.stage.value,
            'overall_status': 'PASS' if self.passed else 'FAIL',
            'summary': {
                'total_tests': len(tests),
                'passed': sum(1 for t in tests if t['status'] == 'PASS'),
                'failed': sum(1 for t in tests if t['status'] == 'FAIL'),
                'warnings': sum(1 for t in tests if t['status'] == 'WARNING'),
                'skipped': sum(1 for t in tests if t['status'] == 'SKIP'),
                'errors': sum(1 for t in tests if t['status'] == 'ERROR'),
            },
            'entry_counts': {'row': self.entry_counts[0], 'columnar': self.entry_counts[1]},
            'field_counts': {'row': self.field_counts[0], 'columnar': self.field_counts[1]},
            'fields': [m.to_dict() for m in self.matches],
            'types': [c.to_dict() for c in self.type_comparisons],
            'subfields': [s.to_dict() for s in self.subfields],
            'distributions': [d.to_dict() for d in self.distributions],
            'element_distributions': [d.to_dict() for d in self.element_distributions],
            'read_issues': [i.to_dict() for i in self.read_issues],
            'tests': tests,
        }
