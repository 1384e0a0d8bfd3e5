"""Native type spellings to canonical logical types, and type-pair classification."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

import numpy as np


class ScalarKind(Enum):
    """The four scalar kinds values are read and pooled by."""
    INT32 = 'Int32'
    FLOAT32 = 'Float32'
    FLOAT64 = 'Float64'
    BOOL = 'Bool'

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype values of this kind are read into."""
        return _KIND_DTYPES[self]

    @property
    def label(self) -> str:
        """Short display label (Int, Float, Double, Bool)."""
        return _KIND_LABELS[self]


_KIND_DTYPES: Dict[ScalarKind, np.dtype] = {
    ScalarKind.INT32: np.dtype(np.int32),
    ScalarKind.FLOAT32: np.dtype(np.float32),
    ScalarKind.FLOAT64: np.dtype(np.float64),
    ScalarKind.BOOL: np.dtype(np.bool_),
}

_KIND_LABELS: Dict[ScalarKind, str] = {
    ScalarKind.INT32: 'Int',
    ScalarKind.FLOAT32: 'Float',
    ScalarKind.FLOAT64: 'Double',
    ScalarKind.BOOL: 'Bool',
}


@dataclass(frozen=True)
class LogicalType:
    """
    Canonical type of a field.

    Exactly one shape applies: a scalar (``kind`` set), a vector of a scalar
    (``element`` set), or Unknown (neither set).
    """
    kind: Optional[ScalarKind] = None
    element: Optional['LogicalType'] = None

    @classmethod
    def scalar(cls, kind: ScalarKind) -> 'LogicalType':
        return cls(kind=kind)

    @classmethod
    def vector_of(cls, element: 'LogicalType') -> 'LogicalType':
        # Only vectors of scalars are representable
        if not element.is_scalar:
            return UNKNOWN
        return cls(element=element)

    @property
    def is_scalar(self) -> bool:
        return self.kind is not None

    @property
    def is_vector(self) -> bool:
        return self.element is not None

    @property
    def is_unknown(self) -> bool:
        return self.kind is None and self.element is None

    def __str__(self) -> str:
        if self.is_scalar:
            return self.kind.value
        if self.is_vector:
            return f"VectorOf({self.element})"
        return 'Unknown'


UNKNOWN = LogicalType()


class TypeClass(Enum):
    """Equivalence class of a pair of logical types."""
    EXACT = 'Exact'
    NEAR_MATCH = 'NearMatch'
    MISMATCH = 'Mismatch'
    MISSING = 'Missing'


_FLOAT_WIDTHS = frozenset({ScalarKind.FLOAT32, ScalarKind.FLOAT64})


def classify(a: LogicalType, b: LogicalType) -> TypeClass:
    """
    Classify a pair of logical types.

    Unknown on either side is Missing; identical types are Exact; Float32 vs
    Float64 (scalar or as vector elements) is a NearMatch; anything else is a
    Mismatch. The result does not depend on argument order.
    """
    if a.is_unknown or b.is_unknown:
        return TypeClass.MISSING
    if a == b:
        return TypeClass.EXACT
    if a.is_scalar and b.is_scalar and {a.kind, b.kind} == _FLOAT_WIDTHS:
        return TypeClass.NEAR_MATCH
    if a.is_vector and b.is_vector and {a.element.kind, b.element.kind} == _FLOAT_WIDTHS:
        return TypeClass.NEAR_MATCH
    return TypeClass.MISMATCH


@dataclass(frozen=True)
class EngineTypeTable:
    """Literal type spellings of one storage engine."""
    engine: str
    scalars: Dict[str, ScalarKind]
    vector_templates: Tuple[str, ...] = ()
    case_sensitive: bool = True
    _lookup: Dict[str, ScalarKind] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        lookup = {self._fold(name): kind for name, kind in self.scalars.items()}
        object.__setattr__(self, '_lookup', lookup)

    def _fold(self, spelling: str) -> str:
        return spelling if self.case_sensitive else spelling.upper()

    def scalar_kind(self, spelling: str) -> Optional[ScalarKind]:
        return self._lookup.get(self._fold(_strip_nullability(spelling)))

    def unwrap(self, spelling: str) -> Optional[str]:
        """Return the element token when ``spelling`` has the shape of a vector template."""
        folded = self._fold(spelling)
        for template in self.vector_templates:
            prefix, suffix = (self._fold(part) for part in template.split('{}', 1))
            if len(folded) <= len(prefix) + len(suffix):
                continue
            if folded.startswith(prefix) and folded.endswith(suffix):
                inner = spelling[len(prefix):len(spelling) - len(suffix)].strip()
                if inner:
                    return inner
        return None


def _strip_nullability(spelling: str) -> str:
    spelling = spelling.strip()
    if spelling.endswith(' not null'):
        spelling = spelling[:-len(' not null')].rstrip()
    return spelling


_I, _F, _D, _B = ScalarKind.INT32, ScalarKind.FLOAT32, ScalarKind.FLOAT64, ScalarKind.BOOL

DEFAULT_ENGINE_TABLES: Tuple[EngineTypeTable, ...] = (
    EngineTypeTable(
        engine='ttree',
        scalars={
            'Int_t': _I, 'int': _I, 'int32_t': _I,
            'Float_t': _F, 'float': _F,
            'Double_t': _D, 'double': _D,
            'Bool_t': _B, 'bool': _B,
        },
        vector_templates=('vector<{}>',),
    ),
    EngineTypeTable(
        engine='rntuple',
        scalars={
            'std::int32_t': _I, 'int': _I, 'int32_t': _I,
            'float': _F,
            'double': _D,
            'bool': _B,
        },
        vector_templates=('std::vector<{}>',),
    ),
    EngineTypeTable(
        engine='arrow',
        scalars={'int32': _I, 'float': _F, 'double': _D, 'bool': _B},
        vector_templates=(
            'list<item: {}>',
            'list<element: {}>',
            'large_list<item: {}>',
            'large_list<element: {}>',
        ),
    ),
    EngineTypeTable(
        engine='duckdb',
        scalars={
            'INTEGER': _I, 'INT': _I, 'INT4': _I,
            'FLOAT': _F, 'REAL': _F, 'FLOAT4': _F,
            'DOUBLE': _D, 'FLOAT8': _D,
            'BOOLEAN': _B, 'BOOL': _B,
        },
        vector_templates=('{}[]',),
        case_sensitive=False,
    ),
)


def generic_element_type(native_type: str) -> str:
    """Text between the first '<' and the last '>', or '' if there is no such pair."""
    start = native_type.find('<')
    end = native_type.rfind('>')
    if start == -1 or end <= start:
        return ''
    return native_type[start + 1:end].strip()


class TypeNormalizer:
    """Maps native type spellings of registered engines to logical types."""

    def __init__(self, tables: Optional[Iterable[EngineTypeTable]] = None):
        self._tables: Dict[str, EngineTypeTable] = {}
        for table in (DEFAULT_ENGINE_TABLES if tables is None else tables):
            self._tables[table.engine] = table

    @property
    def engines(self) -> Tuple[str, ...]:
        return tuple(self._tables)

    def register_engine(
        self,
        engine: str,
        scalars: Dict[str, ScalarKind],
        vector_templates: Iterable[str] = (),
        case_sensitive: bool = True
    ) -> None:
        """
        Register (or replace) the spelling table of an engine.

        Args:
            engine: Engine name connectors report
            scalars: Literal scalar spelling to ScalarKind
            vector_templates: Container spellings with '{}' standing for the element
            case_sensitive: Whether spellings are matched case-sensitively
        """
        templates = tuple(vector_templates)
        for template in templates:
            if template.count('{}') != 1:
                raise ValueError(f"Vector template must contain exactly one '{{}}': {template!r}")
        self._tables[engine] = EngineTypeTable(engine, dict(scalars), templates, case_sensitive)

    def normalize(self, native_type: str, engine: str) -> LogicalType:
        """
        Map a native spelling to its logical type.

        Unknown engines and unrecognized spellings yield ``UNKNOWN``.
        """
        table = self._tables.get(engine)
        if table is None or not native_type:
            return UNKNOWN

        kind = table.scalar_kind(native_type)
        if kind is not None:
            return LogicalType.scalar(kind)

        inner = table.unwrap(native_type.strip())
        if inner is not None:
            element_kind = table.scalar_kind(inner)
            if element_kind is not None:
                return LogicalType.vector_of(LogicalType.scalar(element_kind))

        return UNKNOWN

    def denotes_vector(self, native_type: str, engine: str) -> bool:
        """True when the spelling has the shape of one of the engine's vector templates."""
        table = self._tables.get(engine)
        if table is None or not native_type:
            return False
        return table.unwrap(native_type.strip()) is not None

    def element_type(self, native_type: str, engine: str) -> str:
        """Element token of a container spelling, '' when it is not a container."""
        table = self._tables.get(engine)
        if table is not None and native_type:
            inner = table.unwrap(native_type.strip())
            if inner is not None:
                return inner
        return generic_element_type(native_type or '')

    def classify(self, a: LogicalType, b: LogicalType) -> TypeClass:
        return classify(a, b)
