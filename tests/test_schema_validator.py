"""
Unit tests for field matching, type triples and count checks.
"""

import pytest

from parity_validator.comparison.field_catalog import FieldDescriptor, SourceSide
from parity_validator.comparison.schema_validator import SchemaValidator
from parity_validator.comparison.type_normalizer import UNKNOWN, LogicalType, ScalarKind, TypeClass

FLOAT = LogicalType.scalar(ScalarKind.FLOAT32)
DOUBLE = LogicalType.scalar(ScalarKind.FLOAT64)
INT = LogicalType.scalar(ScalarKind.INT32)


def row_field(name, native='Double_t', logical=DOUBLE):
    return FieldDescriptor(name, native, logical, SourceSide.ROW)


def columnar_field(name, native='double', logical=DOUBLE):
    return FieldDescriptor(name, native, logical, SourceSide.COLUMNAR)


@pytest.fixture
def validator():
    return SchemaValidator()


class TestMatchFields:
    """Test exact-name pairing."""

    def test_identical_catalogs_match_one_to_one(self, validator):
        """Test that every field is paired with its namesake."""
        matches = validator.match_fields(
            [row_field('a'), row_field('b')],
            [columnar_field('b'), columnar_field('a')]
        )

        assert [m.name for m in matches] == ['a', 'b']
        assert all(m.is_matched for m in matches)
        assert matches[0].columnar.name == 'a'

    def test_renamed_field_yields_two_unmatched_entries(self, validator):
        """Test the energy/mass rename surfaces once per side."""
        matches = validator.match_fields(
            [row_field('value'), row_field('energy')],
            [columnar_field('value'), columnar_field('mass')]
        )

        assert [(m.name, m.row is not None, m.columnar is not None) for m in matches] == [
            ('value', True, True),
            ('energy', True, False),
            ('mass', False, True),
        ]

    def test_columnar_leftovers_keep_catalog_order(self, validator):
        """Test that columnar-only fields follow in columnar order."""
        matches = validator.match_fields(
            [row_field('a')],
            [columnar_field('z'), columnar_field('a'), columnar_field('m')]
        )

        assert [m.name for m in matches] == ['a', 'z', 'm']

    def test_duplicate_names_are_consumed_once(self, validator):
        """Test that a columnar descriptor is never used by two matches."""
        first, second = columnar_field('x', native='double'), columnar_field('x', native='float', logical=FLOAT)
        matches = validator.match_fields([row_field('x'), row_field('x')], [first, second])

        assert matches[0].columnar is first
        assert matches[1].columnar is second
        assert len(matches) == 2

    def test_surplus_duplicates_are_unmatched(self, validator):
        """Test that a second row-side duplicate finds nothing left."""
        matches = validator.match_fields(
            [row_field('x'), row_field('x')],
            [columnar_field('x')]
        )

        assert matches[0].is_matched
        assert matches[1].columnar is None

    def test_no_fuzzy_matching(self, validator):
        """Test that names differing in case are not paired."""
        matches = validator.match_fields([row_field('Energy')], [columnar_field('energy')])

        assert len(matches) == 2
        assert not any(m.is_matched for m in matches)


class TestCompareTypes:
    """Test type triples."""

    def test_classification_per_match(self, validator):
        """Test exact, near-match and missing classifications."""
        matches = validator.match_fields(
            [row_field('e'), row_field('w', 'Float_t', FLOAT), row_field('u', 'UInt_t', UNKNOWN)],
            [columnar_field('e'), columnar_field('w'), columnar_field('u', 'std::uint32_t', UNKNOWN)]
        )
        comparisons = validator.compare_types(matches)

        assert [c.type_class for c in comparisons] == [TypeClass.EXACT, TypeClass.NEAR_MATCH, TypeClass.MISSING]
        assert (comparisons[1].row_type, comparisons[1].columnar_type) == ('Float_t', 'double')

    def test_unmatched_fields_have_no_class(self, validator):
        """Test that one-sided entries keep their known type only."""
        comparisons = validator.compare_types(validator.match_fields([row_field('energy')], [columnar_field('mass')]))

        assert comparisons[0].type_class is None
        assert comparisons[0].columnar_type is None
        assert comparisons[1].row_type is None

    def test_field_types_result(self, validator):
        """Test the section status for near matches and mismatches."""
        near = validator.compare_types(validator.match_fields(
            [row_field('w', 'Float_t', FLOAT)], [columnar_field('w')]
        ))
        wrong = validator.compare_types(validator.match_fields(
            [row_field('w', 'Int_t', INT)], [columnar_field('w')]
        ))

        assert validator.field_types_result(near).status == 'WARNING'
        assert validator.field_types_result(wrong).status == 'FAIL'
        assert validator.field_types_result(wrong).details['mismatch'] == ['w']


class TestCounts:
    """Test entry and field count checks."""

    def test_equal_counts_pass(self, validator):
        """Test that equal counts pass."""
        result = validator.compare_counts('entry_count', 100000, 100000)

        assert result.status == 'PASS'
        assert result.details == {'row': 100000, 'columnar': 100000, 'difference': 0}

    def test_differing_counts_report_both(self, validator):
        """Test that both counts are reported on mismatch."""
        result = validator.compare_counts('entry_count', 100000, 99999)

        assert result.status == 'FAIL'
        assert result.details['row'] == 100000
        assert result.details['columnar'] == 99999

    def test_field_names_result(self, validator):
        """Test that the names section lists the one-sided fields."""
        result = validator.field_names_result(validator.match_fields([row_field('energy')], [columnar_field('mass')]))

        assert result.status == 'FAIL'
        assert result.details['row_only'] == ['energy']
        assert result.details['columnar_only'] == ['mass']
