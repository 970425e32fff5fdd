#!/usr/bin/env python3
"""
Content Table Export - Main CLI Entry Point

Validates content tables exported from the design tool, normalizes them and
writes their clipboard projections (HTML, TSV, JSON, plain text) together with
the strict XHTML document accepted by the Confluence storage API.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from tqdm import tqdm

from config_loader import EXPORT_FORMATS, ConfigLoader, get_nested
from logger import ProgressTracker, log_config, log_section, setup_logging
from content_table import (
    ContentTableValidator,
    TableRenderer,
    extract_from_html,
    load_catalogue,
)
from exporters import TableExporter
from orchestrator import ExportOrchestrator

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = 'config.yaml'


class InputError(Exception):
    """An input file could not be read as a content table."""


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='content-table-export',
        description="Export universal content tables to HTML, TSV, JSON, text and Confluence XHTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export with the configured formats and default preset
  content-table-export table.json

  # Pick a preset and formats
  content-table-export table.json --preset content-model-1 --format tsv --format xhtml

  # Recover a table from pasted HTML and print its TSV
  content-table-export pasted.html --stdout --format tsv

  # Only check tables against the schema
  content-table-export *.json --validate-only -v

  # Show the preset catalogue
  content-table-export --list-presets
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'inputs',
        nargs='*',
        metavar='INPUT',
        help='Content table JSON files, or HTML files with an embedded table'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--preset',
        type=str,
        help='Preset id for rendering (default: export.default_preset)'
    )

    parser.add_argument(
        '--format',
        dest='formats',
        action='append',
        choices=EXPORT_FORMATS,
        help='Output format; repeat for several (default: export.formats)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory for exported files (default: export.output_directory)'
    )

    parser.add_argument(
        '--stdout',
        action='store_true',
        help='Print the first requested format to stdout instead of writing files'
    )

    parser.add_argument(
        '--validate-only',
        action='store_true',
        help='Validate inputs and report schema errors without exporting'
    )

    parser.add_argument(
        '--no-embed-json',
        dest='embed_json',
        action='store_false',
        default=None,
        help='Do not embed the table JSON in HTML output'
    )

    parser.add_argument(
        '--full-document',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Wrap HTML output in a complete HTML document'
    )

    parser.add_argument(
        '--list-presets',
        action='store_true',
        help='List the preset catalogue and exit'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG and validation logging)'
    )

    return parser


def load_configuration(args: argparse.Namespace) -> Dict[str, Any]:
    """Load, merge and validate configuration; raises on any problem."""
    config_path = args.config
    if config_path is None and Path(DEFAULT_CONFIG_PATH).is_file():
        config_path = DEFAULT_CONFIG_PATH

    if config_path:
        config = ConfigLoader.load(config_path)
    else:
        config = ConfigLoader.with_defaults({})

    config = ConfigLoader.merge_with_args(config, args)
    ConfigLoader.validate(config)
    return config


def read_table(path: Path) -> Any:
    """
    Read a content table from a JSON file or from HTML with an embedded table.

    Raises:
        InputError: If the file is missing, unreadable or carries no table
    """
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Cannot read {path}: {e}")

    if path.suffix.lower() in ('.html', '.htm'):
        table = extract_from_html(text)
        if table is None:
            raise InputError(f"No embedded content table found in {path}")
        return table

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}")


def list_presets(config: Dict[str, Any]) -> int:
    """Print the preset catalogue."""
    catalogue = load_catalogue(get_nested(config, 'presets.catalogue_path'))
    for preset_id in catalogue.preset_ids():
        definition = catalogue.get(preset_id)
        status = 'enabled' if definition.usable else 'disabled'
        print(f"{preset_id:<18} {status:<9} {definition.label}")
        if definition.description:
            print(f"{'':<28} {definition.description}")
        for column in definition.columns:
            print(f"{'':<28} - {column.label} ({column.path})")
    return 0


def run_export(config: Dict[str, Any], args: argparse.Namespace, logger: logging.Logger) -> int:
    """Validate and export every input; returns the process exit code."""
    inputs = [Path(p) for p in args.inputs]
    preset = get_nested(config, 'export.default_preset')
    validator = ContentTableValidator(
        enable_logging=get_nested(config, 'dev.enable_validation_logging', False),
        logger=logger
    )

    renderer = TableRenderer(
        catalogue=load_catalogue(get_nested(config, 'presets.catalogue_path'), logger=logger),
        logger=logger
    )
    orchestrator = ExportOrchestrator(config=config, renderer=renderer, validator=validator, logger=logger)
    exporter: Optional[TableExporter] = None
    if not args.validate_only and not args.stdout:
        exporter = TableExporter(config, renderer=renderer, logger=logger)

    failures: List[str] = []
    show_progress = len(inputs) > 1 and not args.stdout and sys.stderr.isatty()

    with ProgressTracker(total_items=len(inputs), item_type='tables') as tracker:
        for path in tqdm(inputs, desc="Exporting", unit="table", disable=not show_progress):
            try:
                table = read_table(path)
            except InputError as e:
                logger.error(str(e))
                failures.append(str(path))
                tracker.increment(success=False)
                continue

            report = validator.validate(table)
            if not report.ok:
                logger.warning(f"{path}: {len(report.errors)} schema errors")
                for error in report.errors:
                    logger.info(f"  {path}: {error}")

            if args.validate_only:
                if report.ok:
                    print(f"{path}: OK")
                else:
                    print(f"{path}: INVALID", file=sys.stderr)
                    for error in report.errors:
                        print(f"  - {error}", file=sys.stderr)
                    failures.append(str(path))
                tracker.increment(success=report.ok)
                continue

            result = orchestrator.build_export_document_sync(table, preset=preset)

            if args.stdout:
                print(_render_for_stdout(args, config, renderer, result, preset))
            else:
                try:
                    exporter.export(result.table_used, preset, path.stem, xhtml_document=result.document)
                except OSError as e:
                    logger.error(f"Failed to export {path}: {e}")
                    failures.append(str(path))
                    tracker.increment(success=False)
                    continue

            tracker.increment(success=True)

    if exporter is not None:
        stats = exporter.stats
        logger.info(
            f"Export complete: {stats['tables_exported']} tables, "
            f"{stats['files_written']} files written, {stats['files_unchanged']} unchanged"
        )

    if failures:
        logger.warning(f"{len(failures)} of {len(inputs)} tables failed: {', '.join(failures)}")
        return 1
    return 0


def _render_for_stdout(args: argparse.Namespace, config: Dict[str, Any], renderer: TableRenderer, result, preset) -> str:
    formats = args.formats or get_nested(config, 'export.formats', ['html'])
    fmt = formats[0]
    table = result.table_used

    if fmt == 'xhtml':
        return result.document
    if fmt == 'tsv':
        return renderer.to_tsv(table, preset)
    if fmt == 'json':
        return renderer.to_json(table)
    if fmt == 'txt':
        return renderer.to_plain_text(table, preset)
    return renderer.to_html(
        table,
        preset,
        embed_json=get_nested(config, 'export.embed_json', True),
        full_document=get_nested(config, 'export.full_document', False)
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(verbosity=args.verbose)
        logger = logging.getLogger('content_table_export.cli')

        config = load_configuration(args)

        # Reconfigure logging with config file settings
        setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level')
        )

        if args.list_presets:
            return list_presets(config)

        if not args.inputs:
            parser.print_usage(sys.stderr)
            print("ERROR: at least one INPUT file is required", file=sys.stderr)
            return 2

        log_section("Content Table Export")
        logger.info(f"Version: {__version__}")
        log_config(config)

        return run_export(config, args, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid configuration YAML: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
