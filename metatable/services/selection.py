from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

from metatable.services.errors import SelectionError


DEFAULT_ALLOWED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".tif", ".tiff", ".bmp", ".pcx")


def is_allowed(path: Union[str, Path], allowed: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS) -> bool:
	return Path(path).suffix.lower() in {a.lower() for a in allowed}


def check_selection(path: Union[str, Path], allowed: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS) -> Path:
	"""Reject a picked file whose extension is not accepted. Directories always pass."""
	path = Path(path)
	allowed = tuple(allowed)
	if path.is_dir() or is_allowed(path, allowed):
		return path
	raise SelectionError(path, allowed)
