"""
Tests for the command-line interface, end to end over DuckDB and Parquet files.
"""

import logging
from pathlib import Path

import pyarrow as pa
import pytest
from click.testing import CliRunner

from conftest import make_arrow_table, write_duckdb, write_parquet

from parity_validator import cli as cli_module
from parity_validator.cli import cli
from parity_validator.reporting.console import SUCCESS_LINE


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep log handlers off the runner's streams; record the verbosity asked for."""
    calls = []

    def fake_setup_logging(verbose=False):
        calls.append(verbose)
        return logging.getLogger('parity_validator')

    monkeypatch.setattr(cli_module, 'setup_logging', fake_setup_logging)
    return calls


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sources(tmp_path):
    table = make_arrow_table(1000)
    return (
        write_duckdb(tmp_path / 'events.duckdb', table),
        write_parquet(tmp_path / 'events.parquet', table),
    )


def compare_args(row_file, columnar_file, *extra):
    return ['compare', '-t', row_file, '-tn', 'events', '-r', columnar_file, '-rn', 'events', *extra]


class TestCompare:
    """Test the compare command."""

    def test_identical_sources(self, runner, sources):
        """Test that identical copies print the success line only."""
        result = runner.invoke(cli, compare_args(*sources))

        assert result.exit_code == 0
        assert result.output.strip() == SUCCESS_LINE

    def test_discrepancy_still_exits_zero(self, runner, tmp_path):
        """Test that a dropped row is reported with exit code 0."""
        row = write_duckdb(tmp_path / 'events.duckdb', make_arrow_table(1000))
        columnar = write_parquet(tmp_path / 'events.parquet', make_arrow_table(1000, skip=42))

        result = runner.invoke(cli, compare_args(row, columnar))

        assert result.exit_code == 0
        assert SUCCESS_LINE not in result.output
        assert 'Number of entries in columnar source: 999' in result.output

    def test_missing_source_exits_one(self, runner, sources, tmp_path):
        """Test that an unreadable source exits 1."""
        result = runner.invoke(cli, compare_args(sources[0], str(tmp_path / 'missing.parquet')))

        assert result.exit_code == 1
        assert 'Error' in result.output

    def test_missing_table_exits_one(self, runner, sources):
        """Test that a missing dataset name exits 1."""
        args = ['compare', '-t', sources[0], '-tn', 'other', '-r', sources[1], '-rn', 'events']
        result = runner.invoke(cli, args)

        assert result.exit_code == 1
        assert "Cannot open dataset 'other'" in result.output

    def test_missing_options_is_usage_error(self, runner, sources):
        """Test that all four source options are required."""
        result = runner.invoke(cli, ['compare', '-t', sources[0], '-tn', 'events'])

        assert result.exit_code == 2

    def test_unknown_flag_is_usage_error(self, runner, sources):
        """Test that an unknown flag exits non-zero with usage."""
        result = runner.invoke(cli, compare_args(*sources, '--bogus'))

        assert result.exit_code == 2
        assert 'No such option' in result.output

    def test_verbose_reaches_logging_setup(self, runner, sources, tmp_path, quiet_logging):
        """Test that -v turns on verbose logging."""
        runner.invoke(cli, compare_args(*sources, '-o', str(tmp_path)))
        runner.invoke(cli, compare_args(*sources, '-v', '-o', str(tmp_path)))

        assert quiet_logging == [False, True]

    def test_verbose_writes_charts(self, runner, sources, tmp_path):
        """Test that verbose mode shows every section and saves charts."""
        out = tmp_path / 'out'
        result = runner.invoke(cli, compare_args(*sources, '-v', '-o', str(out)))

        assert result.exit_code == 0
        assert '*** Field Types ***' in result.output
        assert (out / 'histogram_int32.png').exists()

    def test_report_formats(self, runner, sources, tmp_path):
        """Test that requested formats are written to the output directory."""
        out = tmp_path / 'reports'
        result = runner.invoke(cli, compare_args(*sources, '-f', 'json', '-f', 'csv', '-o', str(out)))

        assert result.exit_code == 0
        assert len(list(out.glob('*.json'))) == 1
        assert len(list(out.glob('*.csv'))) == 1
        assert not list(out.glob('*.png'))

    def test_config_file(self, runner, sources, tmp_path):
        """Test that formats and output directory come from the config file."""
        out = tmp_path / 'from_config'
        config = tmp_path / 'config.yaml'
        config.write_text(f"reporting:\n  output_dir: {out}\n  formats: [html]\n")

        result = runner.invoke(cli, compare_args(*sources, '-c', str(config)))

        assert result.exit_code == 0
        assert len(list(out.glob('*.html'))) == 1


class TestInspect:
    """Test the inspect command."""

    def test_lists_fields(self, runner, sources):
        """Test field listing with logical types."""
        result = runner.invoke(cli, ['inspect', sources[1], 'events'])

        assert result.exit_code == 0
        assert 'Entries: 1000' in result.output
        assert 'VectorOf(Float32)' in result.output

    def test_lists_excluded_fields(self, runner, tmp_path):
        """Test that bookkeeping columns are listed separately."""
        table = pa.table({'_0': pa.array([1, 2], type=pa.uint64()), 'x': pa.array([1.0, 2.0])})
        path = write_parquet(tmp_path / 'events.parquet', table)

        result = runner.invoke(cli, ['inspect', path, 'events'])

        assert result.exit_code == 0
        assert 'Fields:  1' in result.output
        assert 'Excluded bookkeeping fields: _0' in result.output

    def test_unknown_source(self, runner, tmp_path):
        """Test that a missing file exits 1."""
        result = runner.invoke(cli, ['inspect', str(Path(tmp_path) / 'x.duckdb'), 'events'])

        assert result.exit_code == 1
