"""Colored terminal rendering of a ReconciliationReport."""

from typing import Callable, List, Optional

import click

from ..comparison.results import ReconciliationReport
from ..comparison.statistical_tests import DistributionComparison
from ..comparison.type_normalizer import TypeClass

NO_MATCH = 'No match'
COLUMN_WIDTH = 20

SUCCESS_LINE = 'Check ran through successfully! No inconsistency found.'


def _verdict(ok: bool) -> str:
    if ok:
        return click.style(' TRUE ', fg='black', bg='green')
    return click.style(' FALSE ', fg='black', bg='red')


def _header(title: str) -> str:
    return click.style(f"\n*** {title} ***", fg='blue', bold=True)


def _cell(text: str, color: Optional[str] = None) -> str:
    padded = f"{text:<{COLUMN_WIDTH}}"
    return click.style(padded, fg=color) if color else padded


class ConsoleRenderer:
    """
    Renders the report section by section.

    Without ``verbose`` a section with no discrepancy is left out. A fully
    passing run then renders as a single line.
    """

    def __init__(self, verbose: bool = False, echo: Callable[[str], None] = click.echo):
        self.verbose = verbose
        self.echo = echo

    def render(self, report: ReconciliationReport) -> List[str]:
        """Build the output lines of ``report``."""
        # Element distributions are informational and never fail a run
        if report.passed and not self.verbose:
            return [click.style(SUCCESS_LINE, fg='green')]

        sections = [
            self._entry_count(report),
            self._field_count(report),
            self._field_names(report),
            self._field_types(report),
            self._subfields(report),
            self._histograms(report.distributions, 'Histograms', 'The histograms are identical: '),
            self._histograms(
                report.element_distributions,
                'Element Distributions',
                'The vector element histograms are identical: '
            ),
            self._read_issues(report),
        ]

        lines: List[str] = []
        for section in sections:
            lines.extend(section)

        if report.passed:
            lines.append('')
            lines.append(click.style(SUCCESS_LINE, fg='green'))
        return lines

    def show(self, report: ReconciliationReport) -> None:
        for line in self.render(report):
            self.echo(line)

    def _entry_count(self, report: ReconciliationReport) -> List[str]:
        row, columnar = report.entry_counts
        if not self.verbose and report.entry_counts_match:
            return []

        lines = [_header('Entry Count')]
        if report.entry_counts_match:
            lines.append('Number of entries: ' + click.style(str(row), fg='green'))
        else:
            lines.append('Number of entries in row source: ' + click.style(str(row), fg='red'))
            lines.append('Number of entries in columnar source: ' + click.style(str(columnar), fg='red'))
        lines.append('Both sources have the same entry count: ' + _verdict(report.entry_counts_match))
        return lines

    def _field_count(self, report: ReconciliationReport) -> List[str]:
        row, columnar = report.field_counts
        if not self.verbose and report.field_counts_match:
            return []

        lines = [_header('Field Count')]
        if report.field_counts_match:
            lines.append('Number of fields: ' + click.style(str(row), fg='green'))
        else:
            lines.append(f"Number of fields in row source: {row}")
            lines.append(f"Number of fields in columnar source: {columnar}")
        lines.append('Both sources have the same field count: ' + _verdict(report.field_counts_match))
        return lines

    def _field_names(self, report: ReconciliationReport) -> List[str]:
        if not self.verbose and report.all_fields_matched:
            return []

        lines = [
            _header('Field Names'),
            _cell('Row Field') + '|  ' + _cell('Columnar Field'),
            '-' * 44,
        ]
        for match in report.matches:
            row_name = match.row.name if match.row else NO_MATCH
            columnar_name = match.columnar.name if match.columnar else NO_MATCH
            lines.append(
                _cell(row_name, 'red' if match.row is None else None)
                + '|  '
                + _cell(columnar_name, 'red' if match.columnar is None else None)
            )
        lines.append('The fields have the same names: ' + _verdict(report.all_fields_matched))
        return lines

    def _field_types(self, report: ReconciliationReport) -> List[str]:
        compared = [c for c in report.type_comparisons if c.type_class is not None]
        if not self.verbose and report.all_types_exact:
            return []

        lines = [
            _header('Field Types'),
            _cell('Type - Row') + '|  ' + _cell('Type - Columnar') + _cell('Field'),
            '-' * 64,
        ]
        for comparison in compared:
            row_text = str(comparison.row_logical)
            columnar_text = str(comparison.columnar_logical)
            line = (
                _cell(row_text, 'red' if comparison.row_logical.is_unknown else None)
                + '|  '
                + _cell(columnar_text, 'red' if comparison.columnar_logical.is_unknown else None)
                + _cell(comparison.name)
            )
            if comparison.type_class is TypeClass.NEAR_MATCH:
                line += click.style('   no exact match   ', fg='white', bg='yellow')
            elif comparison.type_class is TypeClass.MISMATCH:
                line += click.style('   type mismatch   ', fg='white', bg='red')
            elif comparison.type_class is TypeClass.MISSING:
                line += click.style('   type missing   ', fg='white', bg='red')
            lines.append(line)
        lines.append('The fields have the same types: ' + _verdict(report.all_types_exact))
        return lines

    def _subfields(self, report: ReconciliationReport) -> List[str]:
        if not report.subfields or (not self.verbose and report.subfields_match):
            return []

        lines = [_header('Subfields')]
        for subfield in report.subfields:
            color = 'green' if subfield.matches else 'red'
            lines.append(
                f"{subfield.field_name} <{subfield.row_element_type}>: "
                + click.style(f"{subfield.row_total} vs {subfield.columnar_total}", fg=color)
            )
            if not subfield.columnar_counted:
                lines.append(click.style(
                    f"  columnar type <{subfield.columnar_element_type}> is not a vector of the same element",
                    fg='yellow'
                ))
        lines.append('The subfield counts are the same: ' + _verdict(report.subfields_match))
        return lines

    def _histograms(self, comparisons: List[DistributionComparison], title: str, question: str) -> List[str]:
        identical = all(c.matches for c in comparisons)
        if not comparisons or (not self.verbose and identical):
            return []

        lines = [_header(title)]
        for comparison in comparisons:
            if not self.verbose and comparison.matches:
                continue
            color = 'green' if comparison.matches else 'red'
            lines.append(click.style(f"{comparison.kind.label}:", bold=True))
            for side, summary in (('row', comparison.row), ('columnar', comparison.columnar)):
                lines.append(click.style(
                    f"  {side:<9} entries={summary.count}  mean={summary.mean!r}  stddev={summary.stddev!r}",
                    fg=color
                ))
            chi = comparison.chi_square
            statistic = chi.details.get('statistic')
            chi_text = f"  chi-square: {chi.status}" + (f" ({statistic!r})" if statistic is not None else '')
            lines.append(click.style(chi_text, fg='red' if chi.status == 'FAIL' else None))
        lines.append(question + _verdict(identical))
        return lines

    def _read_issues(self, report: ReconciliationReport) -> List[str]:
        if not report.read_issues:
            return []

        lines = [_header('Read Issues')]
        for issue in report.read_issues:
            lines.append(click.style(f"{issue.side.value}:{issue.field} ({issue.stage}) {issue.message}", fg='red'))
        return lines
