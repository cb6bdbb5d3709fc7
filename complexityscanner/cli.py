"""
Command-line interface for the complexity scanner.

Provides commands to analyze files, directories or stdin, to list the
decision point tokens of a language, and to create a config file.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from complexityscanner import __version__
from complexityscanner.config import (
    AnalyzerConfig, create_default_config, load_analyzer_config,
)
from complexityscanner.core.analyzer import ComplexityAnalyzer
from complexityscanner.core.types import Language
from complexityscanner.formatters import get_formatter
from complexityscanner.scanner import ComplexityScanner, ScanReport

logger = logging.getLogger(__name__)

LANGUAGE_CHOICES = [language.value for language in Language]
STDIN_TARGET = "-"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="complexityscanner",
        description="Cyclomatic complexity analysis for TypeScript, JavaScript, Go and Python.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  complexityscanner analyze ./src                       # Analyze a directory
  complexityscanner analyze app.ts --functions          # Per-function metrics
  complexityscanner analyze . --format json -o out.json # JSON output to file
  complexityscanner analyze . --max-ccn 15              # Fail on complex functions
  cat main.go | complexityscanner analyze --stdin-filename main.go
  complexityscanner conditions --language python        # List decision tokens
  complexityscanner init                                # Create config file
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze code complexity")
    analyze_parser.add_argument(
        "targets",
        nargs="*",
        default=["."],
        help="Files or directories to analyze, '-' for stdin (default: current directory)",
    )
    analyze_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    analyze_parser.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default=None,
        help="Output format (default: text)",
    )
    analyze_parser.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    analyze_parser.add_argument(
        "--language",
        choices=LANGUAGE_CHOICES,
        help="Force the language instead of inferring it from file extensions",
    )
    analyze_parser.add_argument(
        "--stdin-filename",
        help="Read source from stdin, inferring the language from this name",
    )
    analyze_parser.add_argument(
        "--include",
        action="append",
        help="Include patterns (can be specified multiple times)",
    )
    analyze_parser.add_argument(
        "--exclude",
        action="append",
        help="Exclude patterns (can be specified multiple times)",
    )
    analyze_parser.add_argument(
        "--max-ccn",
        type=int,
        help="Exit with status 1 if any function exceeds this CCN",
    )
    analyze_parser.add_argument(
        "-j", "--jobs",
        type=int,
        help="Number of parallel workers (default: 4)",
    )
    analyze_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output and debug logging",
    )
    analyze_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    analyze_parser.add_argument(
        "--functions",
        action="store_true",
        help="Show per-function metrics",
    )

    # Conditions command
    conditions_parser = subparsers.add_parser("conditions", help="List decision point tokens")
    conditions_parser.add_argument(
        "--language",
        choices=LANGUAGE_CHOICES,
        required=True,
        help="Language to list",
    )

    # Init command
    init_parser = subparsers.add_parser("init", help="Create a configuration file")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing config file",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_config(args: argparse.Namespace) -> AnalyzerConfig:
    """Load configuration and apply command-line overrides."""
    start_dir = "."
    if args.targets and args.targets[0] != STDIN_TARGET:
        start_dir = args.targets[0]
    config = load_analyzer_config(args.config, start_dir=start_dir)

    if args.include:
        config.include_patterns = args.include
    if args.exclude:
        config.exclude_patterns = config.exclude_patterns + args.exclude
    if args.jobs is not None:
        config.max_workers = args.jobs
    if args.max_ccn is not None:
        config.max_function_ccn = args.max_ccn
    if args.format:
        config.output.format = args.format
    if args.verbose:
        config.output.verbose = True
    if args.no_color:
        config.output.color = False
    if args.functions:
        config.output.show_functions = True

    return config


def merge_reports(reports: List[ScanReport]) -> ScanReport:
    """Combine the reports of several targets into one."""
    merged = ScanReport()
    languages = set()
    for report in reports:
        merged.files.extend(report.files)
        merged.errors.extend(report.errors)
        merged.scan_time_seconds += report.scan_time_seconds
        languages.update(report.languages_detected)
    merged.files.sort(key=lambda r: r.path)
    merged.languages_detected = sorted(languages)
    merged.scan_time_seconds = round(merged.scan_time_seconds, 3)
    return merged


def exceeds_limit(report: ScanReport, limit: Optional[int]) -> bool:
    """
    True if any function is above ``limit``. Files without detected
    functions are judged by their total CCN.
    """
    if limit is None:
        return False
    for file_report in report.files:
        if not file_report.ok:
            continue
        result = file_report.result
        worst = result.max_function_ccn if result.functions else result.total_ccn
        if worst > limit:
            return True
    return False


def cmd_analyze(args: argparse.Namespace) -> int:
    """Execute the analyze command."""
    config = build_config(args)
    forced_language = Language.coerce(args.language) if args.language else None

    if args.stdin_filename or args.targets == [STDIN_TARGET]:
        content = sys.stdin.read()
        scanner = ComplexityScanner(config, language=forced_language)
        file_report = scanner.scan_content(content, args.stdin_filename or "<stdin>", forced_language)
        report = ScanReport(
            files=[file_report],
            languages_detected=[file_report.language.value],
        )
    else:
        reports = []
        for target in args.targets:
            if config.output.verbose and config.output.format == "text":
                print(f"Analyzing {os.path.abspath(target)}...")
            reports.append(ComplexityScanner(config, language=forced_language).scan(target))
        report = merge_reports(reports)

    formatter = get_formatter(config.output.format)

    if hasattr(formatter, 'verbose'):
        formatter.verbose = config.output.verbose
    if hasattr(formatter, 'use_color'):
        formatter.use_color = formatter.use_color and config.output.color
    if hasattr(formatter, 'show_functions'):
        formatter.show_functions = config.output.show_functions

    output = formatter.format_result(report)

    # Write output
    output_file = args.output or config.output.output_file
    if output_file:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(output)
        if config.output.format == "text":
            print(f"Results written to {output_file}")
    else:
        print(output)

    if exceeds_limit(report, config.max_function_ccn):
        logger.debug("Function CCN limit %d exceeded", config.max_function_ccn)
        return 1
    return 0


def cmd_conditions(args: argparse.Namespace) -> int:
    """Execute the conditions command."""
    conditions = ComplexityAnalyzer(args.language).conditions

    categories = [
        ("Control flow", conditions.control_flow),
        ("Logical operators", conditions.logical_operators),
        ("Case keywords", conditions.case_keywords),
        ("Ternary operators", conditions.ternary_operators),
        ("Exception handling", conditions.exception_handling),
    ]

    print(f"\nDecision points for {args.language}")
    print("=" * 40)
    for label, tokens in categories:
        print(f"  {label + ':':<20} {' '.join(tokens) if tokens else '(none)'}")

    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Execute the init command."""
    config_file = ".complexityscanner.yaml"

    if os.path.exists(config_file) and not args.force:
        print(f"Configuration file {config_file} already exists.")
        print("Use --force to overwrite.")
        return 1

    content = create_default_config()

    with open(config_file, 'w', encoding='utf-8') as f:
        f.write(content)

    print(f"Created configuration file: {config_file}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(getattr(args, "verbose", False))

    try:
        if args.command == "analyze":
            return cmd_analyze(args)
        elif args.command == "conditions":
            return cmd_conditions(args)
        elif args.command == "init":
            return cmd_init(args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\nAnalysis interrupted.")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
