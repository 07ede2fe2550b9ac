"""
Command-line front end.

Usage:
    ecucsv csv <file.ecu>... [options]
    ecucsv compress <file.ecu>... [options]
    ecucsv decompress <file.cmp>... [options]
    ecucsv inspect <file.ecu> [--format yaml|json]
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from ecucsv import __version__
from ecucsv.config import ConfigError, ConversionConfig, load_config
from ecucsv.conversion import convert_batch
from ecucsv.errors import ConversionError
from ecucsv.extractor import extract
from ecucsv.model import BatchReport, ConversionMode, OutcomeStatus
from ecucsv.serialization import records_to_json, records_to_yaml, report_to_json, report_to_yaml


logger = logging.getLogger(__name__)

COMMAND_MODES = {
    "csv": ConversionMode.CSV_ONLY,
    "compress": ConversionMode.COMPRESS,
    "decompress": ConversionMode.DECOMPRESS,
}

STATUS_MARKS = {
    OutcomeStatus.CONVERTED: "ok",
    OutcomeStatus.SKIPPED: "skipped",
    OutcomeStatus.FAILED: "FAILED",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecucsv",
        description="Convert ECU XML logs to CSV and pack them into compressed containers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    help_text = {
        "csv": "Convert .ecu files to plain .csv",
        "compress": "Convert .ecu files to compressed .cmp",
        "decompress": "Restore .csv from .cmp files",
    }
    for command in COMMAND_MODES:
        sub = subparsers.add_parser(command, help=help_text[command])
        sub.add_argument("files", nargs="+", help="Input files")
        sub.add_argument(
            "--config", "-c",
            default=None,
            help="Path to a YAML settings file",
        )
        sub.add_argument(
            "--any-extension",
            action="store_true",
            help="Process files regardless of their extension",
        )
        sub.add_argument(
            "--report",
            default="text",
            choices=["text", "json", "yaml"],
            help="Output format for the batch summary (default: text)",
        )
        sub.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Print detailed progress",
        )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the records extracted from one .ecu file",
    )
    inspect_parser.add_argument("file", help="Input .ecu file")
    inspect_parser.add_argument(
        "--format", "-f",
        default="yaml",
        choices=["yaml", "json"],
        help="Output format (default: yaml)",
    )
    inspect_parser.add_argument("--verbose", "-v", action="store_true", help="Print detailed progress")

    return parser


def select_inputs(files: List[str], mode: ConversionMode, config: ConversionConfig) -> List[str]:
    """Keep the files whose extension matches the mode, warning about the rest."""
    expected = config.expected_extension(mode)
    selected = []
    for path in files:
        if os.path.splitext(path)[1].lower() == expected.lower():
            selected.append(path)
        else:
            logger.warning("Ignoring %s: expected a %s file", path, expected)
    return selected


def _run_conversion(args, mode: ConversionMode) -> int:
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    # Output names are cut at the first dot, so "./x.ecu" has to be resolved first
    paths = [os.path.abspath(p) for p in args.files]
    files = paths if args.any_extension else select_inputs(paths, mode, config)
    if not files:
        print(f"No {config.expected_extension(mode)} files to process", file=sys.stderr)
        return 1

    report = BatchReport(mode=mode)
    for outcome in convert_batch(files, mode, config):
        report.outcomes.append(outcome)
        if args.report == "text":
            line = f"[{STATUS_MARKS[outcome.status]}] {outcome.display_name}"
            if outcome.error:
                line += f": {outcome.error}"
            print(line)

    if args.report == "json":
        print(report_to_json(report))
    elif args.report == "yaml":
        print(report_to_yaml(report), end="")
    else:
        print(f"\n{report.converted} converted, {report.skipped} skipped, {report.failed} failed")

    return 1 if report.failed else 0


def _run_inspect(args) -> int:
    try:
        records = extract(args.file)
    except ConversionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "json":
        print(records_to_json(records))
    else:
        print(records_to_yaml(records), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "inspect":
        return _run_inspect(args)
    return _run_conversion(args, COMMAND_MODES[args.command])


__all__ = ["main", "build_parser", "select_inputs"]
