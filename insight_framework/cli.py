"""
Command-line interface for the Data Insight Framework.

Provides commands for:
- Analyzing a CSV or JSON sample into chart recommendations and a report
- Analyzing several samples in one batch
- Checking a stored output for contract compliance
- Generating a default configuration file
"""

import csv
import json
import sys
import time
from pathlib import Path

import click
import pandas as pd

from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import AnalysisError
from insight_framework.core.logging_config import setup_logging, get_logger
from insight_framework.core.pipeline import analyze as run_analysis, analyze_batch
from insight_framework.core.pretty_output import PrettyOutput as po
from insight_framework.profiler.json_utils import convert_to_json_serializable, safe_json_dumps
from insight_framework.reporters.output_contract import (
    check_compliance,
    format_output_robust,
    to_json_string,
)

logger = get_logger(__name__)

LOG_LEVELS = click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False)


def detect_csv_delimiter(file_path: str, sample_size: int = 8192) -> str:
    """
    Auto-detect the delimiter used in a CSV file.

    Uses Python's csv.Sniffer to analyze a sample of the file.
    Returns the detected delimiter or ',' as default.
    """
    # Try multiple encodings (Windows often uses cp1252)
    encodings = ['utf-8', 'utf-8-sig', 'cp1252', 'latin-1']

    for encoding in encodings:
        try:
            with open(file_path, 'r', newline='', encoding=encoding) as f:
                sample = f.read(sample_size)

            sniffer = csv.Sniffer()
            dialect = sniffer.sniff(sample, delimiters=',\t|;:')
            return dialect.delimiter
        except (UnicodeDecodeError, csv.Error):
            continue
        except OSError:
            break

    # Fall back to comma if detection fails
    return ','


def load_sample(file_path: str, delimiter: str = None, max_rows: int = None) -> dict:
    """
    Load a dataset sample file into the analysis input shape.

    JSON files must already hold {"headers": [...], "sampleData": [[...]]}.
    Anything else is read as delimited text with pandas; empty cells become
    null and numeric columns keep their numeric values.

    Args:
        file_path: Path to a .json or delimited text file
        delimiter: Column delimiter (auto-detected when None)
        max_rows: Read at most this many data rows

    Returns:
        Analysis input dict
    """
    path = Path(file_path)
    if path.suffix.lower() == '.json':
        with open(path, 'r', encoding='utf-8') as f:
            input_data = json.load(f)
        if max_rows is not None and isinstance(input_data, dict) \
                and isinstance(input_data.get('sampleData'), list):
            input_data['sampleData'] = input_data['sampleData'][:max_rows]
        return input_data

    if delimiter is None:
        delimiter = detect_csv_delimiter(file_path)
        logger.debug(f"Detected delimiter {delimiter!r} for {file_path}")
    elif delimiter == '\\t':
        delimiter = '\t'

    df = pd.read_csv(path, sep=delimiter, nrows=max_rows, encoding_errors='replace')
    headers = [str(column) for column in df.columns]
    rows = convert_to_json_serializable(df.astype(object).to_numpy().tolist())
    logger.info(f"Loaded {len(rows)} rows x {len(headers)} columns from {file_path}")
    return {"headers": headers, "sampleData": rows}


def load_config(config_path: str = None) -> AnalysisConfig:
    if config_path:
        return AnalysisConfig.from_yaml(config_path)
    return DEFAULT_CONFIG


def write_text(path: str, text: str) -> None:
    output_file = Path(path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding='utf-8')


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """
    Data Insight Framework - chart recommendations and analysis reports.

    Analyzes a small tabular sample (headers plus rows), infers column
    types, recommends charts and writes a markdown business-analysis
    report, emitted together as one strictly validated JSON document.
    """
    pass


@cli.command()
@click.argument('data_file', type=click.Path(exists=True))
@click.option('--output', '-o', help='Path for JSON output (default: print to stdout)')
@click.option('--report', '-r', help='Also write the markdown report to this path')
@click.option('--charts-only', is_flag=True, help='Emit only the chart recommendation list')
@click.option('--delimiter', '-d', default=None,
              help='Column delimiter for CSV files (default: auto-detect). Use "\\t" for tab.')
@click.option('--max-rows', type=int, default=None, help='Analyze only the first N rows')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='YAML analysis configuration')
@click.option('--robust', is_flag=True, help='Repair output problems instead of failing')
@click.option('--indent', type=int, default=None, help='Indent the JSON output')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def analyze(data_file, output, report, charts_only, delimiter, max_rows, config_path, robust,
            indent, log_level, log_file):
    """
    Analyze a dataset sample.

    DATA_FILE: CSV file, or JSON file with headers and sampleData

    Examples:

    \b
    data-insight analyze sales.csv -o sales_insight.json
    data-insight analyze sample.json -r report.md --robust
    """
    setup_logging(level=log_level, log_file=log_file)
    interactive = output is not None

    try:
        config = load_config(config_path)
        if interactive:
            po.header("DATA INSIGHT ANALYSIS")
            po.task_start(f"Analyzing {data_file}")

        start = time.monotonic()
        input_data = load_sample(data_file, delimiter, max_rows)
        result = run_analysis(input_data, config, robust=robust)
        if charts_only:
            json_text = safe_json_dumps(result['charts_to_generate'], ensure_ascii=False, indent=indent)
        else:
            json_text = to_json_string(result, config, indent=indent)
        duration = time.monotonic() - start

    except AnalysisError as e:
        po.analysis_error(e)
        sys.exit(1)
    except (OSError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        po.error(f"Could not read {data_file}: {e}")
        sys.exit(1)

    if report:
        write_text(report, result['full_analysis_report_markdown'])

    if not interactive:
        click.echo(json_text)
        return

    write_text(output, json_text)
    po.task_complete("Analysis complete", duration)

    charts = result['charts_to_generate']
    po.summary_box("ANALYSIS SUMMARY", [
        ("Columns", len(input_data['headers']), po.PRIMARY),
        ("Rows analyzed", len(input_data['sampleData']), po.PRIMARY),
        ("Charts recommended", len(charts), po.SUCCESS if charts else po.WARNING),
        ("Report characters", f"{len(result['full_analysis_report_markdown']):,}", po.PRIMARY),
    ])

    if charts:
        po.section("Recommended Charts")
        for chart in charts:
            po.item(f"[{chart['type']}] {chart['title']}")

    po.output_file("JSON output", output)
    if report:
        po.output_file("Markdown report", report)


@cli.command()
@click.argument('data_files', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--output', '-o', required=True, help='Path for the JSON list of batch results')
@click.option('--delimiter', '-d', default=None, help='Column delimiter for CSV files')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='YAML analysis configuration')
@click.option('--fail-on-error', is_flag=True, help='Exit with status 1 if any dataset fails')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
def batch(data_files, output, delimiter, config_path, fail_on_error, log_level):
    """
    Analyze several dataset samples independently.

    A failing dataset is recorded with its error and does not stop the rest.

    Example:

    \b
    data-insight batch q1.csv q2.csv q3.json -o results.json
    """
    setup_logging(level=log_level)

    try:
        config = load_config(config_path)
    except AnalysisError as e:
        po.analysis_error(e)
        sys.exit(1)

    po.header("DATA INSIGHT BATCH")
    inputs = []
    for data_file in data_files:
        try:
            inputs.append(load_sample(data_file, delimiter))
        except (OSError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            # Unreadable files still take a slot so results line up with the arguments
            logger.warning(f"Could not read {data_file}: {e}")
            inputs.append(None)

    results = analyze_batch(inputs, config)

    for data_file, result in zip(data_files, results):
        if result.succeeded:
            po.success(f"{data_file}: {len(result.output['charts_to_generate'])} charts")
        else:
            po.error(f"{data_file}: {result.error['message']} [{result.error['code']}]")

    payload = [dict(result.to_dict(), source=str(data_file))
               for data_file, result in zip(data_files, results)]
    write_text(output, safe_json_dumps(payload, ensure_ascii=False, indent=2))

    failed = sum(1 for r in results if not r.succeeded)
    po.summary_box("BATCH SUMMARY", [
        ("Datasets", len(results), po.PRIMARY),
        ("Succeeded", len(results) - failed, po.SUCCESS),
        ("Failed", failed, po.ERROR if failed else po.SUCCESS),
    ])
    po.output_file("Batch results", output)

    if fail_on_error and failed:
        sys.exit(1)


@cli.command()
@click.argument('json_file', type=click.Path(exists=True))
@click.option('--repair', type=click.Path(), help='Write a repaired copy of the output here')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='YAML analysis configuration')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
def check(json_file, repair, config_path, log_level):
    """
    Check a stored analysis output for contract compliance.

    JSON_FILE: Output previously produced by 'data-insight analyze'

    Exits with status 1 if the output violates the contract.
    """
    setup_logging(level=log_level)

    try:
        config = load_config(config_path)
        with open(json_file, 'r', encoding='utf-8') as f:
            output = json.load(f)
    except AnalysisError as e:
        po.analysis_error(e)
        sys.exit(1)
    except (OSError, ValueError) as e:
        po.error(f"Could not read {json_file}: {e}")
        sys.exit(1)

    report = check_compliance(output, config)

    po.section(f"Compliance check: {json_file}")
    for error in report.errors:
        po.error(error, indent=2)
    for warning in report.warnings:
        po.warning(warning, indent=2)
    for key, value in report.metrics.items():
        po.metric(key, value)

    if repair:
        source = output if isinstance(output, dict) else {}
        repaired = format_output_robust(source.get('charts_to_generate'),
                                        source.get('full_analysis_report_markdown'), config)
        for warning in repaired.warnings:
            po.info(warning, indent=2)
        write_text(repair, to_json_string(repaired.output, config))
        po.output_file("Repaired output", repair)

    if report.is_valid:
        po.success("Output is compliant")
    else:
        po.error(f"Output is not compliant ({len(report.errors)} errors)")
        sys.exit(1)


@cli.command()
@click.argument('output_path', type=click.Path())
def init_config(output_path):
    """
    Generate a configuration file with every default value.

    OUTPUT_PATH: Path where the config should be written

    Example:

    \b
    data-insight init-config insight.yaml
    """
    header = "# Data Insight Configuration\n# Generated by Data Insight Framework\n\n"
    try:
        write_text(output_path, header + DEFAULT_CONFIG.to_yaml())
    except OSError as e:
        click.echo(f"❌ Error creating config file: {str(e)}", err=True)
        sys.exit(1)

    click.echo(f"✓ Default configuration written to: {output_path}")
    click.echo("\nEdit the file to tune thresholds, then run:")
    click.echo(f"  data-insight analyze data.csv --config {output_path}")


if __name__ == '__main__':
    cli()
