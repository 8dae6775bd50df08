"""
Command-line interface for done-item exports.

Usage:
    python -m done_export.cli.export_cli run --config <config.yaml> [options]
    python -m done_export.cli.export_cli show-query --config <config.yaml> [options]
"""

import argparse
import asyncio
import sys

from done_export.config import (
    ExportConfigLoader,
    build_export_config,
    build_site_connection,
)
from done_export.core.errors import ConfigurationError
from done_export.core.query import build_list_query
from done_export.export import ExportRunner
from done_export.observability.logger import get_logger, setup_logger
from done_export.observability.metrics import write_metrics_file
from done_export.sharepoint import SharePointRestClient

logger = get_logger(__name__)


def load_settings(args) -> tuple[dict, dict]:
    """Read the export and site sections of the config file, if one was given."""
    if not args.config:
        return {}, {}
    settings = ExportConfigLoader(args.config).load_settings()
    return settings["export"], settings["site"]


def export_overrides(args) -> dict:
    """Export settings given on the command line."""
    return {
        "list_title": args.list,
        "status_field": args.status_field,
        "done_value": args.done_value,
        "done_date_field": args.date_field,
        "select_fields": args.fields,
        "older_than_days": args.older_than_days,
        "target_folder_url": args.target_folder,
        "file_prefix": args.file_prefix,
        "page_size": args.page_size,
    }


def print_line(line: str) -> None:
    print(line, flush=True)


async def run_export(args) -> int:
    """
    Execute one export run.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code (0 for completed/no_rows, 1 for failed)
    """
    export_settings, site_settings = load_settings(args)
    config = build_export_config(export_settings, export_overrides(args))
    connection = build_site_connection(
        site_settings,
        {"site_url": args.site_url, "timeout_seconds": args.timeout},
    )

    logger.info(
        f"Starting export for list: {config.list_title}",
        extra={"list_title": config.list_title, "site_url": connection.site_url, "dry_run": args.dry_run},
    )

    async with SharePointRestClient(connection) as context:
        runner = ExportRunner(context, config, listener=print_line)
        result = await runner.trigger(dry_run=args.dry_run, output_path=args.output)

    if args.metrics_file:
        write_metrics_file(args.metrics_file)

    logger.info(
        f"Export finished: {result.status}",
        extra={
            "list_title": result.list_title,
            "status": result.status,
            "row_count": result.row_count,
            "file_url": result.file_url,
        },
    )

    return 0 if result.succeeded else 1


def run_command(args) -> int:
    """Run an export and map configuration problems to exit code 1."""
    try:
        return asyncio.run(run_export(args))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


def show_query_command(args) -> int:
    """Print the CAML view the export would send, without contacting the server."""
    try:
        export_settings, _ = load_settings(args)
        config = build_export_config(export_settings, export_overrides(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    query = build_list_query(config)
    print(f"List: {query.list_title}")
    print(f"Threshold: {query.threshold.isoformat()}")
    print(f"Fields: {', '.join(query.view_fields)}")
    print(query.view_xml)
    return 0


def add_export_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by all commands that build an export configuration."""
    parser.add_argument(
        "--config",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--list",
        help="Source list title"
    )
    parser.add_argument(
        "--status-field",
        help="Internal name of the status field"
    )
    parser.add_argument(
        "--done-value",
        help="Status value of completed items"
    )
    parser.add_argument(
        "--date-field",
        help="Internal name of the completion date field"
    )
    parser.add_argument(
        "--fields",
        help="Comma-separated fields to export, in column order"
    )
    parser.add_argument(
        "--older-than-days",
        type=int,
        help="Export items completed at least this many days ago (default: 30)"
    )
    parser.add_argument(
        "--target-folder",
        help="Server-relative destination folder, e.g. '/sites/Agile/Shared Documents/Exports'"
    )
    parser.add_argument(
        "--file-prefix",
        help="File name prefix; files are named <prefix>_<YYYY-MM-DD>.csv"
    )
    parser.add_argument(
        "--page-size",
        type=int,
        help="Rows per page of the list query (default: 500)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="done-export",
        description="Export completed list items to a CSV file in a document library",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export with settings from a file (token from SHAREPOINT_ACCESS_TOKEN)
  done-export run --config config/export.yaml

  # Override the threshold and prefix
  done-export run --config config/export.yaml --older-than-days 60 --file-prefix Stories_Q3

  # Fetch and encode only, keep a local copy
  done-export run --config config/export.yaml --dry-run --output /tmp/export.csv

  # Show the CAML query without contacting SharePoint
  done-export show-query --config config/export.yaml
        """
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: env var LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "text"],
        help="Log format (default: env var LOG_FORMAT or json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run one export")
    add_export_arguments(run_parser)
    run_parser.add_argument(
        "--site-url",
        help="SharePoint web URL (default: env var SHAREPOINT_SITE_URL)"
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        help="HTTP timeout in seconds (default: 30)"
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and encode, but do not upload"
    )
    run_parser.add_argument(
        "--output",
        help="Also write the CSV to this local file"
    )
    run_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this file after the run"
    )

    query_parser = subparsers.add_parser("show-query", help="Print the list query")
    add_export_arguments(query_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logger(level=args.log_level, format_type=args.log_format)

    if args.command == "run":
        return run_command(args)
    if args.command == "show-query":
        return show_query_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
