"""Field discovery: ordered, sentinel-free descriptors for each source."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..connectors.base_connector import BaseConnector, NativeField, SentinelRule
from ..utils.logger import get_logger
from .type_normalizer import LogicalType, TypeNormalizer

logger = get_logger('field_catalog')


class SourceSide(Enum):
    ROW = 'row'
    COLUMNAR = 'columnar'


@dataclass(frozen=True)
class FieldDescriptor:
    """A discovered field. ``container`` records a vector spelling whose element type is not supported."""
    name: str
    native_type: str
    logical_type: LogicalType
    side: SourceSide
    container: bool = False

    @property
    def is_vector(self) -> bool:
        return self.logical_type.is_vector or self.container


class FieldCatalog:
    """Enumerates the fields of a source and drops its bookkeeping fields."""

    def __init__(self, normalizer: Optional[TypeNormalizer] = None):
        self.normalizer = normalizer or TypeNormalizer()

    def partition(
        self,
        source: BaseConnector,
        rule: Optional[SentinelRule] = None
    ) -> Tuple[List[NativeField], List[NativeField]]:
        """
        Split the enumerated fields of ``source`` into user fields and sentinels.

        Args:
            source: Connector to enumerate
            rule: Sentinel rule (default: the connector's own rule)

        Returns:
            (kept fields, excluded fields), both in declaration order
        """
        rule = rule if rule is not None else source.sentinel_rule
        fields = list(source.enumerate_fields())

        kept, excluded = [], []
        for position, native in enumerate(fields):
            if rule.is_sentinel(native.name, position, len(fields)):
                excluded.append(native)
            else:
                kept.append(native)

        return kept, excluded

    def describe(self, native: NativeField, engine: str, side: SourceSide) -> FieldDescriptor:
        logical = self.normalizer.normalize(native.type_name, engine)
        return FieldDescriptor(
            name=native.name,
            native_type=native.type_name,
            logical_type=logical,
            side=side,
            container=self.normalizer.denotes_vector(native.type_name, engine)
        )

    def enumerate(
        self,
        source: BaseConnector,
        side: SourceSide,
        rule: Optional[SentinelRule] = None
    ) -> List[FieldDescriptor]:
        """
        Build the catalog of one source.

        Args:
            source: Connector to enumerate
            side: Which side of the comparison the source is on
            rule: Sentinel rule (default: the connector's own rule)

        Returns:
            FieldDescriptors in declaration order, sentinels removed
        """
        kept, excluded = self.partition(source, rule)

        for native in excluded:
            logger.debug(f"Excluding bookkeeping field '{native.name}' ({native.type_name}) from {source.description}")

        descriptors = [self.describe(native, source.engine, side) for native in kept]

        unknown = [d.name for d in descriptors if d.logical_type.is_unknown]
        if unknown:
            logger.info(f"{len(unknown)} field(s) of {source.description} have unresolved types: {unknown}")

        return descriptors


@dataclass(frozen=True)
class ReadIssue:
    """A field that could not be read during one stage of a run."""
    field: str
    side: SourceSide
    stage: str
    message: str

    def to_dict(self):
        return {
            'field': self.field,
            'side': self.side.value,
            'stage': self.stage,
            'message': self.message,
        }
