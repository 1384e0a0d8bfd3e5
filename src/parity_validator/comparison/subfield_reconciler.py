"""Total element cardinality of vector fields on both sources."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from ..connectors.base_connector import BaseConnector, FieldReadError, SentinelRule
from ..utils.logger import get_logger
from .field_catalog import ReadIssue, SourceSide
from .schema_validator import FieldMatch
from .type_normalizer import UNKNOWN, LogicalType, TypeNormalizer

logger = get_logger('subfield_reconciler')

STAGE = 'subfields'


@dataclass(frozen=True)
class SubfieldComparison:
    """Summed per-row vector lengths of one field on both sources."""
    field_name: str
    row_element_type: str
    columnar_element_type: str
    row_total: int
    columnar_total: int
    columnar_counted: bool = True

    @property
    def matches(self) -> bool:
        return self.row_total == self.columnar_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field': self.field_name,
            'row_element_type': self.row_element_type,
            'columnar_element_type': self.columnar_element_type,
            'row_total': self.row_total,
            'columnar_total': self.columnar_total,
            'columnar_counted': self.columnar_counted,
            'matches': self.matches,
        }


class SubfieldReconciler:
    """
    Counts vector elements per field on both sources.

    Only Int32, Float32, Float64 and Bool elements are counted. Other element
    types count as 0 on both sides instead of failing the run.
    """

    def __init__(self, normalizer: Optional[TypeNormalizer] = None):
        self.normalizer = normalizer or TypeNormalizer()

    def reconcile(
        self,
        match: FieldMatch,
        row_source: BaseConnector,
        columnar_source: BaseConnector,
        sentinel_rule: Optional[SentinelRule] = None,
        issues: Optional[List[ReadIssue]] = None
    ) -> Optional[SubfieldComparison]:
        """
        Compare the element cardinality of a matched vector field.

        Args:
            match: Field pair to reconcile
            row_source: Row-side connector
            columnar_source: Columnar-side connector
            sentinel_rule: Columnar sentinel rule (default: the connector's rule)
            issues: List that read failures are appended to

        Returns:
            SubfieldComparison, or None when the field is not a row-side
            vector, is unmatched, or is a sentinel
        """
        if match.row is None or match.columnar is None:
            return None

        row_engine = row_source.engine
        if not self.normalizer.denotes_vector(match.row.native_type, row_engine):
            return None

        rule = sentinel_rule if sentinel_rule is not None else columnar_source.sentinel_rule
        if rule.is_reserved(match.name):
            logger.debug(f"Skipping subfield count of bookkeeping field '{match.name}'")
            return None

        row_element_type = self.normalizer.element_type(match.row.native_type, row_engine)
        if not row_element_type:
            return None

        columnar_element_type = self.normalizer.element_type(
            match.columnar.native_type, columnar_source.engine
        )
        row_element: LogicalType = match.row.logical_type.element or UNKNOWN

        if row_element.is_scalar:
            row_total = self._total(row_source, match.name, SourceSide.ROW, issues)
        else:
            logger.info(
                f"Element type '{row_element_type}' of '{match.name}' is not supported; counting 0"
            )
            row_total = 0

        columnar_type = match.columnar.logical_type
        counted = row_element.is_scalar and columnar_type.is_vector and columnar_type.element == row_element
        if counted:
            columnar_total = self._total(columnar_source, match.name, SourceSide.COLUMNAR, issues)
        else:
            logger.info(
                f"Columnar type '{match.columnar.native_type}' of '{match.name}' is not a vector of "
                f"'{row_element_type}'; skipping its count"
            )
            columnar_total = 0

        comparison = SubfieldComparison(
            field_name=match.name,
            row_element_type=row_element_type,
            columnar_element_type=columnar_element_type,
            row_total=row_total,
            columnar_total=columnar_total,
            columnar_counted=counted
        )

        if not comparison.matches:
            logger.warning(f"Subfield count mismatch for '{match.name}': {row_total} vs {columnar_total}")

        return comparison

    def _total(
        self,
        source: BaseConnector,
        name: str,
        side: SourceSide,
        issues: Optional[List[ReadIssue]]
    ) -> int:
        try:
            lengths = source.read_vector_lengths(name)
            return int(np.sum(lengths, dtype=np.int64))
        except FieldReadError as e:
            logger.warning(f"Failed to read vector lengths of '{name}' on {side.value} side: {e}")
            if issues is not None:
                issues.append(ReadIssue(name, side, STAGE, str(e)))
            return 0
