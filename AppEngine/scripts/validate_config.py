#!/usr/bin/env python3
"""App configuration validation tool.

Command line tool for:
- Validating AppConfig JSON files (surveys, visualizations, product cards, lifecycle)
- Validating product card collections with --product-cards
- Validating raw agent output (prose, code fences, almost-JSON) with --agent-output
- Batch processing of files and directories

How to use:
    python -m AppEngine.scripts.validate_config config.json
    python -m AppEngine.scripts.validate_config ./configs/ --recursive --verbose
    python -m AppEngine.scripts.validate_config catalog.json --product-cards"""

from __future__ import annotations

import argparse
import glob
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

# Add project root directory to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from loguru import logger

from AppEngine.schema.issues import ValidationIssue
from AppEngine.schema.validator import ConfigValidator
from AppEngine.utils.json_parser import JSONParseError, parse_config_text


@dataclass
class FileReport:
    """Validation report of one file"""
    file_path: str
    issues: List[ValidationIssue] = field(default_factory=list)
    skipped: bool = False

    @property
    def has_issues(self) -> bool:
        return len(self.issues) > 0


def validate_file(
    file_path: Path,
    validator: ConfigValidator,
    product_cards: bool = False,
    agent_output: bool = False,
) -> FileReport:
    """Validate a single file"""
    report = FileReport(file_path=str(file_path))
    try:
        text = file_path.read_text(encoding="utf-8")
        if agent_output:
            raw = parse_config_text(text)
            if raw is None:
                logger.info(f"{file_path}: agent output contains no configuration")
                report.skipped = True
                return report
        else:
            raw = json.loads(text)
    except (json.JSONDecodeError, JSONParseError) as e:
        logger.error(f"JSON parsing error: {file_path}: {e}")
        report.issues.append(ValidationIssue(path=[], message=f"JSON parsing error: {e}", code="json_invalid"))
        return report
    except OSError as e:
        logger.error(f"Error reading file: {file_path}: {e}")
        report.issues.append(ValidationIssue(path=[], message=f"Error reading file: {e}", code="io_error"))
        return report

    if product_cards:
        result = validator.validate_product_card_collection(raw)
    else:
        result = validator.validate_config(raw)
    report.issues.extend(result.errors)
    return report


def print_report(report: FileReport, verbose: bool = False):
    """Print validation report"""
    print(f"\n{'=' * 60}")
    print(f"File: {report.file_path}")
    print(f"{'=' * 60}")

    if report.skipped:
        print("No configuration found, skipped")
    elif report.has_issues:
        print(f"Found {len(report.issues)} issue(s):")
        for issue in report.issues:
            code = f" [{issue.code}]" if verbose else ""
            print(f"  - {issue.dotted_path}: {issue.message}{code}")
    else:
        print("Valid")


def collect_files(paths: Sequence[str], recursive: bool = False) -> List[Path]:
    files: List[Path] = []
    for path_str in paths:
        path = Path(path_str)
        if path.is_file():
            files.append(path)
        elif path.is_dir():
            files.extend(sorted(path.rglob("*.json") if recursive else path.glob("*.json")))
        else:
            # Probably glob pattern
            for match in glob.glob(path_str):
                candidate = Path(match)
                if candidate.is_file() and candidate.suffix.lower() == ".json":
                    files.append(candidate)
    return files


def main(argv: Optional[Sequence[str]] = None) -> int:
    """main function; returns the process exit code"""
    parser = argparse.ArgumentParser(
        description="App Configuration Validation Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Example:
  %(prog)s config.json
  %(prog)s catalog.json --product-cards
  %(prog)s ./configs/ --recursive --verbose""",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="JSON file or directory to validate",
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Process directories recursively",
    )
    parser.add_argument(
        "--product-cards",
        action="store_true",
        help="Treat each file as a mapping of id -> product card",
    )
    parser.add_argument(
        "--agent-output",
        action="store_true",
        help="Treat each file as raw agent output and extract the JSON object first",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show details",
    )

    args = parser.parse_args(argv)

    # Configuration log
    logger.remove()
    if args.verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="WARNING")

    files = collect_files(args.paths, args.recursive)
    if not files:
        print("JSON file not found")
        return 1

    print(f"{len(files)} files found")

    validator = ConfigValidator()
    total_issues = 0
    invalid_files = 0
    for file_path in files:
        report = validate_file(file_path, validator, args.product_cards, args.agent_output)
        total_issues += len(report.issues)
        if report.has_issues:
            invalid_files += 1
        if args.verbose or report.has_issues:
            print_report(report, args.verbose)

    # Print summary
    print(f"\n{'=' * 60}")
    print("Summary")
    print(f"{'=' * 60}")
    print(f"- Number of files: {len(files)}")
    print(f"- Invalid files: {invalid_files}")
    print(f"- Total issues: {total_issues}")

    return 1 if total_issues > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
