#!/usr/bin/env python3
"""biblint CLI - Command-line interface for checking .bib files.

Usage:
    biblint refs.bib
    biblint refs.bib --strict
    biblint *.bib --json
    biblint refs.bib --disable unknown-fields --disable entry-types
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import CHECK_NAMES, Config
from .exceptions import BibLintError, BibTeXError
from .linter import BibLinter, LintResult, Severity
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def format_result_text(result: LintResult, path: Path, verbose: bool = False) -> str:
    """Format lint result as human-readable text."""
    lines = []

    status = "VALID" if result.valid else "INVALID"
    status_symbol = "[OK]" if result.valid else "[FAIL]"

    lines.append(f"{status_symbol} {path.name}: {status}")

    for diagnostic in result.diagnostics:
        symbol = {
            Severity.ERROR: "  [x]",
            Severity.WARNING: "  [!]",
        }[diagnostic.severity]
        line, column = result.document.location(diagnostic.start)
        lines.append(f"{symbol} {path}:{line}:{column} {diagnostic.code}: {diagnostic.message}")

    if verbose and result.stats:
        lines.append(f"  Stats: {result.stats}")

    return "\n".join(lines)


def format_result_json(result: LintResult, path: Path) -> dict:
    """Format lint result as JSON-serializable dict."""
    diagnostics = []
    for diagnostic in result.diagnostics:
        data = diagnostic.to_dict()
        data["line"], data["column"] = result.document.location(diagnostic.start)
        diagnostics.append(data)
    return {
        "file": str(path),
        "valid": result.valid,
        "diagnostics": diagnostics,
        "stats": result.stats,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="biblint",
        description="Check BibTeX files for structural problems and missing fields",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Checks (names for --disable): {', '.join(CHECK_NAMES)}

Examples:
  biblint refs.bib                          # Basic check
  biblint refs.bib --strict                 # Treat warnings as errors
  biblint *.bib                             # Check multiple files
  biblint refs.bib --json                   # JSON output
  biblint refs.bib --disable unknown-fields
        """,
    )

    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="BibTeX file(s) to check",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as errors",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed information and debug logging",
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show files with problems",
    )

    parser.add_argument(
        "--disable",
        action="append",
        default=[],
        choices=sorted(CHECK_NAMES),
        metavar="CHECK",
        help="Turn off a check (repeatable)",
    )

    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="Read BIBLINT_CHECK_* settings from this .env file",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    try:
        config = Config.from_env(args.env_file).disable(*args.disable)
    except BibLintError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2

    linter = BibLinter(config=config, strict=args.strict)

    results: List[Tuple[Path, Optional[LintResult], Optional[str]]] = []
    all_valid = True

    for file_path in args.files:
        try:
            result = linter.lint_file(file_path)
        except BibTeXError as e:
            logger.error(str(e))
            results.append((file_path, None, str(e)))
            all_valid = False
            continue

        if not result.valid:
            all_valid = False
        results.append((file_path, result, None))

    # Output results
    if args.json_output:
        output = {
            "results": [
                format_result_json(r, p) if r is not None
                else {"file": str(p), "valid": False, "error": error}
                for p, r, error in results
            ],
            "summary": {
                "total": len(results),
                "valid": sum(1 for _, r, _ in results if r is not None and r.valid),
                "invalid": sum(1 for _, r, _ in results if r is None or not r.valid),
            },
        }
        print(json.dumps(output, indent=2))
    else:
        for file_path, result, error in results:
            if result is None:
                print(f"[FAIL] {file_path.name}: {error}")
                continue
            if args.quiet and result.valid and not result.diagnostics:
                continue
            print(format_result_text(result, file_path, verbose=args.verbose))
            if len(results) > 1:
                print()  # Blank line between files

        # Summary for multiple files
        if len(results) > 1 and not args.quiet:
            valid_count = sum(1 for _, r, _ in results if r is not None and r.valid)
            print(f"Summary: {valid_count}/{len(results)} files valid")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
