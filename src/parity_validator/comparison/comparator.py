"""Comparison engine: drives one row-store vs columnar-store run end to end."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from ..connectors.base_connector import (
    BaseConnector,
    FieldReadError,
    SentinelRule,
    SourceUnavailableError,
)
from ..utils.config_loader import DEFAULT_CONFIG
from ..utils.logger import get_logger
from .field_catalog import FieldCatalog, FieldDescriptor, ReadIssue, SourceSide
from .results import ComparisonStage, ReconciliationReport
from .schema_validator import FieldMatch, SchemaValidator
from .statistical_tests import DistributionComparator
from .subfield_reconciler import SubfieldReconciler
from .type_normalizer import ScalarKind, TypeNormalizer

logger = get_logger('comparator')


@dataclass
class ComparisonContext:
    """Both sources of one run. Closing the context closes both connectors."""
    row_source: BaseConnector
    columnar_source: BaseConnector
    config: Dict[str, Any] = field(default_factory=dict)

    def close(self):
        self.row_source.close()
        self.columnar_source.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ParityComparator:
    """
    Compares a row-store dataset against its columnar-store counterpart.

    A run walks Init -> CatalogBuilt -> Matched -> SubfieldsReconciled ->
    DistributionsCompared -> Done. Only a source that cannot be enumerated
    or counted aborts the run; unreadable fields are recorded in the report
    and contribute no data.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        normalizer: Optional[TypeNormalizer] = None
    ):
        """
        Initialize the comparator.

        Args:
            config: Configuration dictionary from ConfigLoader.get_all()
            normalizer: Type normalizer (default: built-in engine tables)
        """
        self.config = config or DEFAULT_CONFIG
        self.normalizer = normalizer or TypeNormalizer()

        histogram_config = self.config.get('histogram', {})
        comparison_config = self.config.get('comparison', {})
        sentinel_config = self.config.get('sentinel', {})

        self.catalog = FieldCatalog(self.normalizer)
        self.schema_validator = SchemaValidator()
        self.subfield_reconciler = SubfieldReconciler(self.normalizer)
        self.distribution_comparator = DistributionComparator(
            bins=histogram_config.get('bins', 100),
            bool_bins=histogram_config.get('bool_bins', 2),
            chi_square=comparison_config.get('chi_square', True)
        )

        self.element_distributions = comparison_config.get('element_distributions', True)
        self.extra_sentinel_names = sentinel_config.get('reserved_names', []) or []
        self.drop_trailing = sentinel_config.get('drop_trailing', False)

    def columnar_rule(self, source: BaseConnector) -> SentinelRule:
        """The columnar source's own sentinel rule, extended by configuration."""
        return source.sentinel_rule.extend(self.extra_sentinel_names, self.drop_trailing)

    def compare(self, context: ComparisonContext) -> ReconciliationReport:
        """
        Run the full comparison.

        Args:
            context: Both sources of the run

        Returns:
            ReconciliationReport

        Raises:
            SourceUnavailableError: If either source cannot be counted or enumerated
        """
        start_time = time.time()
        row_source, columnar_source = context.row_source, context.columnar_source

        report = ReconciliationReport(
            row_description=row_source.description,
            columnar_description=columnar_source.description
        )

        logger.info(f"Starting comparison: {row_source.description} vs {columnar_source.description}")

        # Phase 1: catalogs and entry counts
        logger.info("Phase 1: Building field catalogs")
        columnar_rule = self.columnar_rule(columnar_source)
        row_count, row_catalog = self._load_source(row_source, SourceSide.ROW, row_source.sentinel_rule)
        columnar_count, columnar_catalog = self._load_source(columnar_source, SourceSide.COLUMNAR, columnar_rule)

        report.entry_counts = (row_count, columnar_count)
        report.field_counts = (len(row_catalog), len(columnar_catalog))
        report.stage = ComparisonStage.CATALOG_BUILT
        logger.info(f"Entries: {row_count} vs {columnar_count}; fields: {len(row_catalog)} vs {len(columnar_catalog)}")

        # Phase 2: matching and type classification
        logger.info("Phase 2: Matching fields")
        report.matches = self.schema_validator.match_fields(row_catalog, columnar_catalog)
        report.type_comparisons = self.schema_validator.compare_types(report.matches)
        report.stage = ComparisonStage.MATCHED

        # Phase 3: vector cardinality
        logger.info("Phase 3: Reconciling subfields")
        for match in report.matches:
            comparison = self.subfield_reconciler.reconcile(
                match, row_source, columnar_source, columnar_rule, report.read_issues
            )
            if comparison is not None:
                report.subfields.append(comparison)
        report.stage = ComparisonStage.SUBFIELDS_RECONCILED

        # Phase 4: pooled distributions
        logger.info("Phase 4: Comparing distributions")
        matched = [m for m in report.matches if m.is_matched]
        report.distributions = self._compare_scalars(matched, context, report.read_issues)
        if self.element_distributions:
            report.element_distributions = self._compare_elements(matched, context, report.read_issues)
        report.stage = ComparisonStage.DISTRIBUTIONS_COMPARED

        report.duration_seconds = time.time() - start_time
        report.stage = ComparisonStage.DONE

        logger.info(f"Comparison complete: {'PASS' if report.passed else 'FAIL'} ({report.duration_seconds:.2f}s)")
        return report

    def _load_source(self, source: BaseConnector, side: SourceSide, rule: SentinelRule):
        try:
            count = int(source.row_count())
            catalog = self.catalog.enumerate(source, side, rule)
        except SourceUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Cannot enumerate {side.value} source {source.description}: {e}")
            raise SourceUnavailableError(source.description, '', str(e)) from e
        return count, catalog

    def _read(
        self,
        source: BaseConnector,
        descriptor: FieldDescriptor,
        kind: ScalarKind,
        vector: bool,
        stage: str,
        issues: List[ReadIssue]
    ) -> Optional[np.ndarray]:
        try:
            if vector:
                return source.read_vector_values(descriptor.name, kind)
            return source.read_scalar(descriptor.name, kind)
        except FieldReadError as e:
            logger.warning(f"Failed to read '{descriptor.name}' on {descriptor.side.value} side: {e}")
            issues.append(ReadIssue(descriptor.name, descriptor.side, stage, str(e)))
            return None

    def _compare_scalars(
        self,
        matched: List[FieldMatch],
        context: ComparisonContext,
        issues: List[ReadIssue]
    ):
        """Pool scalar values per kind on each side and compare every kind."""
        row_buffers: Dict[ScalarKind, List[np.ndarray]] = {kind: [] for kind in ScalarKind}
        columnar_buffers: Dict[ScalarKind, List[np.ndarray]] = {kind: [] for kind in ScalarKind}

        for match in matched:
            for descriptor, source, buffers in (
                (match.row, context.row_source, row_buffers),
                (match.columnar, context.columnar_source, columnar_buffers),
            ):
                if not descriptor.logical_type.is_scalar:
                    continue
                kind = descriptor.logical_type.kind
                values = self._read(source, descriptor, kind, False, 'distributions', issues)
                if values is not None:
                    buffers[kind].append(values)

        return self._compare_buffers(row_buffers, columnar_buffers)

    def _compare_elements(
        self,
        matched: List[FieldMatch],
        context: ComparisonContext,
        issues: List[ReadIssue]
    ):
        """Pool vector element values per element kind on each side and compare."""
        row_buffers: Dict[ScalarKind, List[np.ndarray]] = {kind: [] for kind in ScalarKind}
        columnar_buffers: Dict[ScalarKind, List[np.ndarray]] = {kind: [] for kind in ScalarKind}
        seen = set()

        for match in matched:
            for descriptor, source, buffers in (
                (match.row, context.row_source, row_buffers),
                (match.columnar, context.columnar_source, columnar_buffers),
            ):
                if not descriptor.logical_type.is_vector:
                    continue
                kind = descriptor.logical_type.element.kind
                seen.add(kind)
                values = self._read(source, descriptor, kind, True, 'element_distributions', issues)
                if values is not None:
                    buffers[kind].append(values)

        comparisons = self._compare_buffers(row_buffers, columnar_buffers)
        return [c for c in comparisons if c.kind in seen]

    def _compare_buffers(self, row_buffers, columnar_buffers):
        comparisons = []
        for kind in ScalarKind:
            row_values = _pool(row_buffers[kind], kind)
            columnar_values = _pool(columnar_buffers[kind], kind)
            comparison = self.distribution_comparator.compare(kind, row_values, columnar_values)
            if not comparison.matches:
                logger.warning(
                    f"{kind.value} histogram differs: row {comparison.row.to_dict()} "
                    f"vs columnar {comparison.columnar.to_dict()}"
                )
            comparisons.append(comparison)
        return comparisons


def _pool(chunks: List[np.ndarray], kind: ScalarKind) -> np.ndarray:
    if not chunks:
        return np.zeros(0, dtype=kind.dtype)
    return np.concatenate(chunks)


def compare_sources(
    row_source: BaseConnector,
    columnar_source: BaseConnector,
    config: Optional[Dict[str, Any]] = None
) -> ReconciliationReport:
    """Compare two open sources with a fresh comparator."""
    context = ComparisonContext(row_source, columnar_source, config or {})
    return ParityComparator(config).compare(context)
