from __future__ import annotations

from pathlib import Path
from typing import Union


class MetatableError(Exception):
	"""Base class for every error raised by the extraction pipeline."""


class PathError(MetatableError):
	"""The root path handed to the pipeline does not exist or cannot be read."""

	def __init__(self, path: Union[str, Path], reason: str) -> None:
		self.path = str(path)
		self.reason = reason
		super().__init__(f"{self.path}: {reason}")


class DecodeError(MetatableError):
	"""One file could not be decoded. The walker skips it and moves on."""

	def __init__(self, path: Union[str, Path], reason: str) -> None:
		self.path = str(path)
		self.reason = reason
		super().__init__(f"{self.path}: {reason}")


class FieldError(MetatableError):
	"""A single metadata field could not be turned into a display value."""

	def __init__(self, name: str, reason: str) -> None:
		self.name = name
		self.reason = reason
		super().__init__(f"{name}: {reason}")


class SelectionError(MetatableError):
	"""A selected file has an extension outside the accepted set."""

	def __init__(self, path: Union[str, Path], allowed) -> None:
		self.path = str(path)
		self.allowed = tuple(allowed)
		super().__init__(f"{self.path} is not valid (accepted: {', '.join(self.allowed)})")
