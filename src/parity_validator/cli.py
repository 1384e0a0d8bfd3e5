"""Command-line interface for the parity validator."""

import sys
from typing import Optional

import click

from .comparison.comparator import ComparisonContext, ParityComparator
from .comparison.field_catalog import FieldCatalog
from .connectors.base_connector import SourceUnavailableError
from .connectors.factory import open_source
from .reporting.console import ConsoleRenderer
from .reporting.report_generator import ReportGenerator
from .utils.config_loader import ConfigLoader
from .utils.logger import setup_logging


@click.group()
@click.version_option(version='1.0.0')
def cli():
    """Row-store vs columnar-store parity validation."""
    pass


@cli.command('compare')
@click.option('-t', 'row_file', required=True, help='Row-store file (DuckDB database)')
@click.option('-tn', 'row_name', required=True, help='Dataset (table) name in the row-store file')
@click.option('-r', 'columnar_file', required=True, help='Columnar-store file or directory (Parquet)')
@click.option('-rn', 'columnar_name', required=True, help='Dataset name in the columnar store')
@click.option('--verbose', '-v', is_flag=True, help='Show every section and DEBUG logs on stderr')
@click.option('--config', '-c', help='Path to config YAML file')
@click.option('--env', '-e', help='Path to .env file')
@click.option('--output-dir', '-o', help='Output directory for reports and charts')
@click.option('--formats', '-f', multiple=True, type=click.Choice(['json', 'html', 'csv']),
              help='Report formats to write (json, html, csv)')
@click.option('--charts', is_flag=True, help='Save per-kind histogram charts')
def compare(
    row_file: str,
    row_name: str,
    columnar_file: str,
    columnar_name: str,
    verbose: bool,
    config: Optional[str],
    env: Optional[str],
    output_dir: Optional[str],
    formats: tuple,
    charts: bool
):
    """
    Compare a row-store dataset against its columnar-store copy.

    Exits 0 whether or not discrepancies were found; 1 when a source
    cannot be read.

    Examples:
        parity-validator compare -t events.duckdb -tn events -r events.parquet -rn events

        parity-validator compare -t events.duckdb -tn events -r exports/ -rn events -v -f json -f html
    """
    try:
        setup_logging(verbose=verbose)

        config_loader = ConfigLoader(config_path=config, env_path=env)
        app_config = config_loader.get_all()

        if verbose:
            click.echo(f"\n🔍 Parity Validator")
            click.echo(f"{'='*60}")
            click.echo(f"  Row source:      {row_file} ({row_name})")
            click.echo(f"  Columnar source: {columnar_file} ({columnar_name})")

        with open_source(row_file, row_name) as row_source:
            with open_source(columnar_file, columnar_name) as columnar_source:
                context = ComparisonContext(row_source, columnar_source, app_config)
                report = ParityComparator(app_config).compare(context)

        ConsoleRenderer(verbose=verbose).show(report)

        report_dir = output_dir or config_loader.get('reporting.output_dir', './reports')
        report_formats = list(formats) or list(config_loader.get('reporting.formats', []) or [])

        if report_formats:
            report_files = ReportGenerator(report_dir).generate_report(report.to_dict(), formats=report_formats)
            click.echo(f"\n✅ Reports generated:")
            for fmt, path in report_files.items():
                click.echo(f"  {fmt.upper()}: {path}")

        if verbose or charts or config_loader.get('reporting.charts', False):
            from .reporting.charts import save_distribution_charts

            chart_files = save_distribution_charts(report, report_dir)
            if chart_files:
                click.echo(f"\n📊 Charts saved:")
                for path in chart_files:
                    click.echo(f"  {path}")

        sys.exit(0)

    except SourceUnavailableError as e:
        click.echo(f"\n❌ Error: {str(e)}", err=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"\n❌ Error: {str(e)}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@cli.command('inspect')
@click.argument('source_file')
@click.argument('dataset')
@click.option('--config', '-c', help='Path to config YAML file')
def inspect(source_file: str, dataset: str, config: Optional[str]):
    """
    List the fields of one source with native and logical types.

    Example:
        parity-validator inspect events.parquet events
    """
    try:
        config_loader = ConfigLoader(config_path=config)
        comparator = ParityComparator(config_loader.get_all())

        with open_source(source_file, dataset) as source:
            rule = source.sentinel_rule
            if source.engine == 'arrow':
                rule = comparator.columnar_rule(source)

            catalog = FieldCatalog(comparator.normalizer)
            kept, excluded = catalog.partition(source, rule)

            click.echo(f"\n📋 {source.description}")
            click.echo(f"  Entries: {source.row_count()}")
            click.echo(f"  Fields:  {len(kept)}\n")

            for native in kept:
                logical = comparator.normalizer.normalize(native.type_name, source.engine)
                click.echo(f"  {native.name:<24} {native.type_name:<28} {logical}")

            if excluded:
                click.echo(f"\n  Excluded bookkeeping fields: {', '.join(f.name for f in excluded)}")

    except SourceUnavailableError as e:
        click.echo(f"\n❌ Error: {str(e)}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    cli()
