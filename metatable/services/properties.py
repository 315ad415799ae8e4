from __future__ import annotations

import enum
import numbers
from fractions import Fraction
from typing import Any, Optional, Set

import numpy as np


class ValueKind(enum.Enum):
	STRING = "string"
	INTEGER = "integer"
	FLOAT = "float"
	BOOLEAN = "boolean"
	OTHER = "other"


def classify(value: Any) -> ValueKind:
	"""Sort a loosely typed metadata value into one of the display kinds.

	Booleans are checked before integers because ``bool`` subclasses ``int``.
	Rationals with a denominator of one count as integers, the rest as floats.
	"""
	if isinstance(value, (str, bytes, bytearray)):
		return ValueKind.STRING
	if isinstance(value, (bool, np.bool_)):
		return ValueKind.BOOLEAN
	if isinstance(value, numbers.Integral):
		return ValueKind.INTEGER
	if isinstance(value, numbers.Rational):
		return ValueKind.INTEGER if value.denominator == 1 else ValueKind.FLOAT
	if isinstance(value, numbers.Real):
		return ValueKind.FLOAT
	return ValueKind.OTHER


def _bytes_to_str(v: bytes) -> str:
	return bytes(v).rstrip(b"\x00").decode("utf-8", errors="replace")


def _float_to_str(v: float) -> str:
	# shortest round-trip digits at the value's own precision, positional (no exponent)
	if not isinstance(v, np.floating):
		v = float(v)
	return np.format_float_positional(v, unique=True, trim="-")


def _fallback(value: Any) -> str:
	for render in (str, repr):
		try:
			return render(value)
		except Exception:
			continue
	return f"<{type(value).__name__}>"


def normalize(value: Any, _seen: Optional[Set[int]] = None) -> str:
	"""Render any metadata value as its canonical display string. Never raises.

	Sequences that contain themselves fall back to their plain repr.
	"""
	kind = classify(value)
	try:
		if kind is ValueKind.STRING:
			if isinstance(value, str):
				return value
			return _bytes_to_str(value)
		if kind is ValueKind.BOOLEAN:
			return "true" if value else "false"
		if kind is ValueKind.INTEGER:
			if isinstance(value, numbers.Rational) and not isinstance(value, numbers.Integral):
				return str(int(value.numerator))
			return str(int(value))
		if kind is ValueKind.FLOAT:
			return _float_to_str(value)
		if isinstance(value, (tuple, list)):
			seen = set() if _seen is None else _seen
			if id(value) not in seen:
				seen.add(id(value))
				try:
					return ", ".join(normalize(v, seen) for v in value)
				finally:
					seen.discard(id(value))
	except (TypeError, ValueError, OverflowError, RecursionError):
		pass
	return _fallback(value)


def rational(num: int, den: int) -> Fraction:
	"""Build a Fraction from an EXIF (numerator, denominator) pair."""
	return Fraction(int(num), int(den))
