import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from rich.console import Console

from .config import ConverterOptions, ProjectLayout
from .pipeline import ScholarshipPipeline, console_sink

COMMANDS = {
    "validate": "Validate all documents (word count, format, completeness)",
    "convert": "Convert Markdown documents to PDF",
    "merge": "Merge all PDFs into a single file",
    "analyze": "Analyze content quality and readability",
    "report": "Generate full reports (Markdown, JSON, HTML)",
    "all": "Run every step (validate -> convert -> merge -> analyze -> report)",
    "help": "Show this help message",
}

STEP_METHODS = {
    "validate": "validate",
    "convert": "convert",
    "merge": "merge",
    "analyze": "analyze",
    "report": "report",
    "all": "run_all",
}


def build_parser() -> argparse.ArgumentParser:
    epilog = "commands:\n" + "\n".join(f"  {name:<10} {text}" for name, text in COMMANDS.items())
    parser = argparse.ArgumentParser(
        prog="scholardoc",
        description="Scholarship application document tool",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "command",
        nargs="?",
        help="Command to run (see below)"
    )
    parser.add_argument(
        "-b", "--base",
        default=None,
        help="Project base directory (default: $SCHOLARDOC_BASE or current directory)"
    )
    parser.add_argument(
        "--font",
        default=None,
        help="TrueType font file for PDF output (default: search system fonts)"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output messages"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False):
    logger.remove()
    level = "DEBUG" if verbose else ("ERROR" if quiet else "WARNING")
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")


def main(argv: Optional[List[str]] = None) -> int:
    # CLI entry point.
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()

    configure_logging(args.verbose, args.quiet)

    if args.command in (None, "help"):
        parser.print_help()
        return 0

    if args.command not in STEP_METHODS:
        console.print(f"Unknown command: {args.command}", style="red", markup=False)
        parser.print_help()
        return 1

    layout = ProjectLayout(Path(args.base)) if args.base else ProjectLayout.from_env()
    pipeline = ScholarshipPipeline(
        layout=layout,
        verbose=not args.quiet,
        sink=console_sink(console),
        converter_options=ConverterOptions().with_overrides(font_path=args.font),
    )

    try:
        ok = getattr(pipeline, STEP_METHODS[args.command])()
    except (FileNotFoundError, ValueError, RuntimeError, OSError) as e:
        console.print(f"✗ Error: {e}", style="red", markup=False)
        return 1

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
