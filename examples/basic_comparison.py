"""
Basic usage example for the parity validator.

This script demonstrates how to:
1. Load configuration
2. Open a DuckDB table and its Parquet copy
3. Run a parity comparison
4. Generate reports
"""

from parity_validator import ConfigLoader, ComparisonContext, ParityComparator, ReportGenerator, open_source


def main():
    # Load configuration
    config = ConfigLoader()

    # Define the two copies of the dataset
    row_file, row_table = "data/events.duckdb", "events"
    columnar_file, columnar_dataset = "data/events.parquet", "events"

    # Run comparison
    print(f"Comparing {row_file}:{row_table} with {columnar_file}:{columnar_dataset}...")
    with ComparisonContext(open_source(row_file, row_table), open_source(columnar_file, columnar_dataset)) as context:
        report = ParityComparator(config.get_all()).compare(context)

    result = report.to_dict()

    # Generate reports
    report_gen = ReportGenerator(output_dir="./reports")
    report_files = report_gen.generate_report(result, formats=['json', 'html'])

    print(f"\n✅ Comparison complete!")
    print(f"Status: {result['overall_status']}")
    print(f"Reports generated:")
    for fmt, path in report_files.items():
        print(f"  - {fmt.upper()}: {path}")

    # Access specific results
    if result['overall_status'] == 'FAIL':
        failed_tests = [t for t in result['tests'] if t['status'] in ('FAIL', 'ERROR')]
        print(f"\n❌ Failed checks:")
        for test in failed_tests:
            print(f"  - {test['test_name']} on {test.get('column', 'dataset')}")


if __name__ == '__main__':
    main()
