#!/usr/bin/env python3
"""
Command Line Interface for the ONT protocol comparison analysis.

This module provides the main entry point for the CLI with subcommands for:
- stats: Compute summary statistics and export them as CSV
- figures: Write the comparison figures as HTML
- info: Show package information
- version: Show version information
"""

import argparse
import sys
import logging
from pathlib import Path
import importlib.metadata

from .config import AnalysisConfig, DATA_DIR_ENV
from .errors import ProtocolComparisonError

logger = logging.getLogger(__name__)

# Package information
PACKAGE_NAME = "ont-protocol-comparison"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def get_version() -> str:
    """Get the package version."""
    try:
        return importlib.metadata.version(PACKAGE_NAME)
    except importlib.metadata.PackageNotFoundError:
        from . import __version__
        return __version__


def cmd_version() -> None:
    """Print version information."""
    print(f"{PACKAGE_NAME} version {get_version()}")


def cmd_info() -> None:
    """Print package information."""
    print(f"""
{PACKAGE_NAME} - ONT ligation vs rapid library preparation comparison
Version: {get_version()}
Description: Read-level statistics, plasmid depth regressions and figures

Available commands:
  stats          Compute statistics and export CSV tables
  figures        Write comparison figures as HTML
  info           Show this information
  version        Show version

The data directory can also be set with the {DATA_DIR_ENV} environment variable.
For help on a specific command, use: {PACKAGE_NAME} <command> --help
""")


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    """Resolve configuration from --config, the environment and CLI flags."""
    overrides = {
        'data_dir': args.data,
        'ambiguous_references': args.ambiguous_reference or None,
        'yield_hour_cutoff': args.hour_cutoff,
        'identity_threshold': args.identity_threshold,
    }
    return AnalysisConfig.resolve(args.config, **overrides)


def cmd_stats(args: argparse.Namespace) -> None:
    """Compute statistics and export CSV tables."""
    from .analysis import ProtocolComparisonAnalysis

    config = build_config(args)
    output_dir = Path(args.output)
    logger.info("Data directory: %s", config.data_dir)

    analysis = ProtocolComparisonAnalysis(config, modules=args.modules)
    analysis.log_headline_statistics()
    analysis.export_statistics(output_dir)


def cmd_figures(args: argparse.Namespace) -> None:
    """Write comparison figures."""
    from .analysis import ProtocolComparisonAnalysis

    config = build_config(args)
    analysis = ProtocolComparisonAnalysis(config, modules=args.modules)
    written = analysis.write_figures(Path(args.output))
    logger.info("Wrote %d figures to %s", len(written), args.output)


def _add_analysis_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by the stats and figures commands."""
    parser.add_argument(
        "--data",
        type=str,
        help=f"Path to data directory (default: ${DATA_DIR_ENV} or current directory)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="results",
        help="Output directory (default: results)"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="JSON file with configuration values"
    )
    parser.add_argument(
        "--modules",
        nargs="+",
        choices=["reads", "replicons", "barcodes", "gc_depth"],
        help="Analysis modules to run (default: all)"
    )
    parser.add_argument(
        "--ambiguous-reference",
        action="append",
        metavar="NAME",
        help="Reference name excluded from demultiplexing statistics (repeatable)"
    )
    parser.add_argument(
        "--hour-cutoff",
        type=float,
        help="Hours from run start used for the early-yield statistic"
    )
    parser.add_argument(
        "--identity-threshold",
        type=float,
        help="Identity fraction for the proportion-below-identity statistic"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog=PACKAGE_NAME,
        description="ONT library preparation protocol comparison CLI"
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_version()}"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)"
    )

    # Create subparsers
    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        metavar="COMMAND"
    )

    stats_parser = subparsers.add_parser(
        "stats",
        help="Compute statistics and export CSV tables"
    )
    _add_analysis_arguments(stats_parser)
    stats_parser.set_defaults(func=cmd_stats)

    figures_parser = subparsers.add_parser(
        "figures",
        help="Write comparison figures as HTML"
    )
    _add_analysis_arguments(figures_parser)
    figures_parser.set_defaults(func=cmd_figures)

    # Info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show package information"
    )
    info_parser.set_defaults(func=lambda args: cmd_info())

    # Version command
    version_parser = subparsers.add_parser(
        "version",
        help="Show version information"
    )
    version_parser.set_defaults(func=lambda args: cmd_version())

    return parser


def main(argv=None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    if not hasattr(args, 'func'):
        # No command provided, show help
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(130)
    except ProtocolComparisonError as e:
        logger.error("%s", e)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
