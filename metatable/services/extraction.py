from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Union

from metatable.services.dispatch import decode
from metatable.services.errors import DecodeError, PathError
from metatable.services.records import FileOutcome, ImageRecord, ResultSet


logger = logging.getLogger(__name__)


def extract_file(path: Path) -> FileOutcome:
	"""Decode a single file. Decode failures come back as a skip, never as an exception."""
	try:
		props = decode(path)
	except DecodeError as e:
		logger.warning("Skipping %s: %s", path, e.reason)
		return FileOutcome.skipped(str(path), e.reason)
	return FileOutcome.success(ImageRecord(identity=str(path), properties=props))


def _skip_entry(path: Path, err: OSError) -> FileOutcome:
	reason = f"filesystem error: {err.strerror or err}"
	logger.warning("Skipping %s: %s", path, reason)
	return FileOutcome.skipped(str(path), reason)


def walk_files(root: Path) -> Iterator[Union[Path, FileOutcome]]:
	"""Depth-first walk in name order.

	Yields each regular file as a Path, and a skipped FileOutcome for every
	entry the filesystem refused to list or stat.
	"""
	if not root.is_dir():
		yield root
		return
	try:
		with os.scandir(root) as it:
			entries = sorted(it, key=lambda e: e.name)
	except OSError as e:
		yield _skip_entry(root, e)
		return
	for entry in entries:
		path = Path(entry.path)
		try:
			is_dir = entry.is_dir(follow_symlinks=False)
			is_file = not is_dir and entry.is_file()
		except OSError as e:
			yield _skip_entry(path, e)
			continue
		if is_dir:
			yield from walk_files(path)
		elif is_file:
			yield path
		else:
			logger.debug("Ignoring %s: not a regular file", path)


def collect(root: Union[str, Path], workers: int = 1) -> ResultSet:
	"""Walk ``root`` and aggregate one record per decoded file, in discovery order.

	With ``workers`` > 1 files are decoded on a thread pool; the result order
	still follows the walk.
	"""
	root = Path(root)
	result = ResultSet(root=str(root))
	if workers <= 1:
		for item in walk_files(root):
			result.add(item if isinstance(item, FileOutcome) else extract_file(item))
	else:
		items = list(walk_files(root))
		paths: List[Path] = [i for i in items if isinstance(i, Path)]
		with ThreadPoolExecutor(max_workers=workers) as pool:
			decoded = iter(list(pool.map(extract_file, paths)))
		for item in items:
			result.add(item if isinstance(item, FileOutcome) else next(decoded))
	logger.info(
		"Extracted metadata from %d file(s) under %s, skipped %d",
		len(result.records),
		root,
		len(result.skipped),
	)
	return result


def check_root(root: Union[str, Path]) -> Path:
	root = Path(root)
	if not root.exists():
		raise PathError(root, "no such file or directory")
	mode = os.R_OK | os.X_OK if root.is_dir() else os.R_OK
	if not os.access(root, mode):
		raise PathError(root, "permission denied")
	return root


def extract_metadata(root: Union[str, Path], workers: int = 1) -> ResultSet:
	"""Extract metadata for a file or every file under a directory.

	Only a missing or unreadable root raises (PathError); per-file problems
	end up in ``ResultSet.skipped``.
	"""
	return collect(check_root(root), workers=workers)
