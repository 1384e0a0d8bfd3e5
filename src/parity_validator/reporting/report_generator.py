"""Report generation for parity results."""

import html
import json
import os
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from ..utils.logger import get_logger


logger = get_logger('report_generator')

STATUS_COLORS = {
    'PASS': '#28a745',
    'FAIL': '#dc3545',
    'WARNING': '#ffc107',
    'ERROR': '#6c757d',
    'SKIP': '#17a2b8'
}


def _slug(text: str) -> str:
    """File-name-safe form of a source description."""
    base = os.path.basename(text.rstrip('/\\')) or text
    return re.sub(r'[^A-Za-z0-9_-]+', '_', base).strip('_') or 'source'


class ReportGenerator:
    """Generates reports in multiple formats (JSON, HTML, CSV)."""

    def __init__(self, output_dir: str = './reports'):
        """
        Initialize report generator.

        Args:
            output_dir: Directory to save reports
        """
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)
        logger.info(f"Report generator initialized. Output dir: {output_dir}")

    def filename_prefix(self, result: Dict[str, Any]) -> str:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        row_name = _slug(result['row_source'])
        columnar_name = _slug(result['columnar_source'])
        return f"parity_{row_name}_to_{columnar_name}_{timestamp}"

    def generate_report(
        self,
        result: Dict[str, Any],
        formats: Optional[List[str]] = None
    ) -> Dict[str, str]:
        """
        Generate reports in specified formats.

        Args:
            result: ReconciliationReport.to_dict() output
            formats: List of formats to generate ['json', 'html', 'csv']

        Returns:
            Dictionary mapping format to file path
        """
        if formats is None:
            formats = ['json', 'html']

        unknown = set(formats) - {'json', 'html', 'csv'}
        if unknown:
            raise ValueError(f"Unsupported report formats: {sorted(unknown)}")

        report_files = {}
        prefix = self.filename_prefix(result)

        logger.info(f"Generating reports in formats: {formats}")

        if 'json' in formats:
            report_files['json'] = self._generate_json(result, prefix)

        if 'html' in formats:
            report_files['html'] = self._generate_html_report(result, prefix)

        if 'csv' in formats:
            report_files['csv'] = self._generate_csv(result, prefix)

        logger.info(f"Reports generated successfully: {list(report_files.keys())}")
        return report_files

    def _generate_json(self, result: Dict[str, Any], prefix: str) -> str:
        """Generate JSON report."""
        filepath = os.path.join(self.output_dir, f"{prefix}.json")

        with open(filepath, 'w') as f:
            json.dump(result, f, indent=2, default=str)

        logger.info(f"JSON report generated: {filepath}")
        return filepath

    def _generate_html_report(self, result: Dict[str, Any], prefix: str) -> str:
        """Generate HTML report file."""
        filepath = os.path.join(self.output_dir, f"{prefix}.html")

        with open(filepath, 'w') as f:
            f.write(self._generate_html(result))

        logger.info(f"HTML report generated: {filepath}")
        return filepath

    def _generate_html(self, result: Dict[str, Any]) -> str:
        """Generate HTML report with one table per section."""
        overall_color = STATUS_COLORS.get(result['overall_status'], '#6c757d')
        summary = result['summary']
        row_source = html.escape(result['row_source'])
        columnar_source = html.escape(result['columnar_source'])

        cards = ''.join(
            f'<div class="summary-card"><div class="summary-number">{summary[key]}</div>'
            f'<div class="summary-label">{label}</div></div>'
            for key, label in (
                ('total_tests', 'Total'),
                ('passed', 'Passed'),
                ('failed', 'Failed'),
                ('warnings', 'Warnings'),
                ('skipped', 'Skipped'),
                ('errors', 'Errors'),
            )
        )

        field_rows = ''.join(
            f"<tr><td>{html.escape(t['name'])}</td>"
            f"<td>{html.escape(t['row_type'] or 'No match')}</td>"
            f"<td>{html.escape(t['columnar_type'] or 'No match')}</td>"
            f"<td>{t['row_logical'] or ''}</td><td>{t['columnar_logical'] or ''}</td>"
            f"<td>{t['class'] or 'Unmatched'}</td></tr>"
            for t in result['types']
        )

        distribution_rows = ''.join(
            f"<tr><td>{d['kind']}</td>"
            f"<td>{d['row']['count']}</td><td>{d['row']['mean']!r}</td><td>{d['row']['stddev']!r}</td>"
            f"<td>{d['columnar']['count']}</td><td>{d['columnar']['mean']!r}</td><td>{d['columnar']['stddev']!r}</td>"
            f"<td>{'yes' if d['matches'] else 'no'}</td><td>{d['chi_square']['status']}</td></tr>"
            for d in result['distributions']
        )

        test_rows = ''.join(
            f"<tr><td>{html.escape(t['test_name'])}</td><td>{html.escape(str(t.get('column', '')))}</td>"
            f"<td><span class=\"status-cell status-{t['status']}\">{t['status']}</span></td>"
            f"<td><pre>{html.escape(json.dumps(t.get('details', {}), indent=2, default=str))}</pre></td></tr>"
            for t in result['tests']
        )

        return f"""<!DOCTYPE html>
<html>
<head>
    <title>Parity Report - {row_source} vs {columnar_source}</title>
    <style>
        body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 20px; background-color: #f5f5f5; }}
        .container {{ max-width: 1400px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px; }}
        h1 {{ color: #333; border-bottom: 3px solid {overall_color}; padding-bottom: 10px; }}
        .status-badge {{ display: inline-block; padding: 8px 16px; border-radius: 4px; color: white;
                         font-weight: bold; background-color: {overall_color}; font-size: 18px; }}
        .summary-grid {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(150px, 1fr)); gap: 15px; margin: 20px 0; }}
        .summary-card {{ background: #343a40; color: white; padding: 20px; border-radius: 8px; text-align: center; }}
        .summary-number {{ font-size: 36px; font-weight: bold; }}
        table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
        th {{ background: #343a40; color: white; padding: 10px; text-align: left; }}
        td {{ padding: 10px; border-bottom: 1px solid #dee2e6; vertical-align: top; }}
        pre {{ margin: 0; font-size: 12px; }}
        .status-cell {{ font-weight: bold; padding: 4px 10px; border-radius: 4px; }}
        .status-PASS {{ background: #d4edda; color: #155724; }}
        .status-FAIL {{ background: #f8d7da; color: #721c24; }}
        .status-WARNING {{ background: #fff3cd; color: #856404; }}
        .status-ERROR {{ background: #e2e3e5; color: #383d41; }}
        .status-SKIP {{ background: #d1ecf1; color: #0c5460; }}
    </style>
</head>
<body>
<div class="container">
    <h1>Parity Report</h1>
    <p><span class="status-badge">{result['overall_status']}</span></p>
    <p><b>Row source:</b> {row_source}<br><b>Columnar source:</b> {columnar_source}<br>
       <b>Started:</b> {result['started_at']} ({result['duration_seconds']}s)</p>
    <div class="summary-grid">{cards}</div>

    <h2>Counts</h2>
    <table>
        <tr><th></th><th>Row</th><th>Columnar</th></tr>
        <tr><td>Entries</td><td>{result['entry_counts']['row']}</td><td>{result['entry_counts']['columnar']}</td></tr>
        <tr><td>Fields</td><td>{result['field_counts']['row']}</td><td>{result['field_counts']['columnar']}</td></tr>
    </table>

    <h2>Fields</h2>
    <table>
        <tr><th>Field</th><th>Row type</th><th>Columnar type</th><th>Row logical</th><th>Columnar logical</th><th>Class</th></tr>
        {field_rows}
    </table>

    <h2>Histograms</h2>
    <table>
        <tr><th>Kind</th><th>Row entries</th><th>Row mean</th><th>Row stddev</th>
            <th>Columnar entries</th><th>Columnar mean</th><th>Columnar stddev</th><th>Identical</th><th>Chi-square</th></tr>
        {distribution_rows}
    </table>

    <h2>All checks</h2>
    <table>
        <tr><th>Test</th><th>Column</th><th>Status</th><th>Details</th></tr>
        {test_rows}
    </table>
</div>
</body>
</html>
"""

    def _generate_csv(self, result: Dict[str, Any], prefix: str) -> str:
        """Generate CSV report, one row per test."""
        filepath = os.path.join(self.output_dir, f"{prefix}.csv")

        rows = [
            {
                'test_name': test['test_name'],
                'column': test.get('column', ''),
                'status': test['status'],
                'details': json.dumps(test.get('details', {}), default=str),
            }
            for test in result['tests']
        ]
        pd.DataFrame(rows, columns=['test_name', 'column', 'status', 'details']).to_csv(filepath, index=False)

        logger.info(f"CSV report generated: {filepath}")
        return filepath
