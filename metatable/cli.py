"""
Terminal front-end for the metadata table.

Usage:
    metatable PATH                 every image under PATH's directory
    metatable PATH --file          only PATH itself
    metatable PATH --all-properties

Exit codes:
- 0: table printed (possibly empty)
- 1: bad METATABLE_* setting, path missing/unreadable or selection rejected
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from metatable.config import load_settings
from metatable.logging_setup import configure_logging
from metatable.services.errors import PathError, SelectionError
from metatable.services.extraction import check_root, extract_metadata
from metatable.services.selection import check_selection
from metatable.table import render_table


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="metatable",
		description="Show resolution, DPI, bit depth and compression for image files.",
	)
	parser.add_argument("path", help="Image file or directory")
	parser.add_argument(
		"--file",
		action="store_true",
		help="Only report the selected file instead of its whole directory",
	)
	parser.add_argument(
		"--all-properties",
		action="store_true",
		help="Show every extracted property instead of the summary columns",
	)
	parser.add_argument("--workers", type=int, default=None, help="Decode files on N threads")
	parser.add_argument(
		"--log-level",
		default=None,
		type=str.upper,
		choices=LOG_LEVELS,
		help="Logging level (default from METATABLE_LOG_LEVEL)",
	)
	return parser


def resolve_target(path: Path, single_file: bool) -> Path:
	"""Pick the extraction root: the file itself, or the directory the selection lives in."""
	if path.is_dir():
		if single_file:
			raise SelectionError(path, ["a file, not a directory"])
		return path
	if single_file:
		return path
	return path.parent


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	try:
		settings = load_settings()
	except ValueError as e:
		print(f"error: {e}", file=sys.stderr)
		return 1
	configure_logging(args.log_level or settings.log_level)
	workers = args.workers if args.workers is not None else settings.workers

	path = Path(args.path)
	try:
		check_selection(check_root(path), settings.allowed_extensions)
		result = extract_metadata(resolve_target(path, args.file), workers=workers)
	except (PathError, SelectionError) as e:
		print(f"error: {e}", file=sys.stderr)
		return 1

	print(render_table(result, all_properties=args.all_properties))
	return 0


if __name__ == "__main__":
	sys.exit(main())
