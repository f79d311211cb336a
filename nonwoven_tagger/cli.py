"""
cli.py — Tag a workbook from the command line.

    nonwoven-tagger input.xlsx                  # asks which sheets to process
    nonwoven-tagger input.xlsx --sheets 1,3     # no prompt
    nonwoven-tagger input.xlsx --profile composite -o tagged.xlsx
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from nonwoven_tagger.loader import (
    list_sheets,
    load_rules,
    parse_sheet_selection,
    process_workbook,
    write_workbook,
)
from nonwoven_tagger.profiles import ADD_ON_PROFILES, UnknownProfileError


def _ask_sheets(sheet_names: list[str]) -> list[str]:
    print("\nAvailable sheets:")
    for i, name in enumerate(sheet_names, start=1):
        print(f"{i}. {name}")
    answer = input("\nSheet numbers to process, comma separated (e.g. 1,3,5): ")
    return parse_sheet_selection(answer, sheet_names)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Add GSM, WIDTH, ITEM and ADD ON columns to a product workbook",
    )
    parser.add_argument("input", help="Workbook to tag (.xlsx, .numbers, .csv or .tsv)")
    parser.add_argument(
        "-o", "--output",
        help="Output .xlsx path (default: output_filename from the rules file, next to the input)",
    )
    parser.add_argument(
        "--sheets",
        help="1-based sheet numbers, e.g. 1,3,5 (default: ask when the workbook has several sheets)",
    )
    parser.add_argument(
        "--profile",
        choices=sorted(ADD_ON_PROFILES),
        help="ADD ON profile (default: default_profile from the rules file)",
    )
    parser.add_argument("--rules", help="Path to an alternative extraction_rules.yaml")
    args = parser.parse_args(argv)

    rules = load_rules(args.rules)
    source = Path(args.input)
    if not source.exists():
        parser.error(f"input file not found: {source}")

    sheet_names = list_sheets(source)
    if not sheet_names:
        print(f"No readable sheets in {source.name}", file=sys.stderr)
        return 1

    if args.sheets:
        selected = parse_sheet_selection(args.sheets, sheet_names)
    elif len(sheet_names) == 1:
        selected = sheet_names
    else:
        selected = _ask_sheets(sheet_names)
    if not selected:
        print("No sheet selected.", file=sys.stderr)
        return 1

    try:
        result = process_workbook(source, sheets=selected, profile=args.profile, rules=rules)
    except UnknownProfileError as e:
        print(e, file=sys.stderr)
        return 1

    for w in result.warnings:
        print(f"Warning: {w}", file=sys.stderr)
    if result.is_empty:
        return 1

    target = Path(args.output) if args.output else source.with_name(rules.get("output_filename", "output.xlsx"))
    write_workbook(result, target)
    for info in result.processed_sheets:
        print(f"Sheet '{info['sheet']}': {info['rows']} rows, {info['items_found']} with an ITEM class")
    print(f"Saved {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
