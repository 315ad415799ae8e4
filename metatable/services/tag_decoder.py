from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

import piexif

from metatable.services.errors import DecodeError, FieldError
from metatable.services.header_decoder import MODE_BITS, open_header
from metatable.services.properties import normalize, rational


logger = logging.getLogger(__name__)

# piexif dict key -> piexif.TAGS section; the thumbnail IFD ("1st") is not walked
_IFD_SECTIONS = (("0th", "Image"), ("Exif", "Exif"), ("GPS", "GPS"), ("Interop", "Interop"))

_RATIONAL_TYPES = (piexif.TYPES.Rational, piexif.TYPES.SRational)
_INTEGER_TYPES = (
	piexif.TYPES.Byte,
	piexif.TYPES.Short,
	piexif.TYPES.Long,
	piexif.TYPES.SByte,
	piexif.TYPES.SShort,
	piexif.TYPES.SLong,
)

# UserComment-style character code prefixes
_CHARSET_PREFIXES = {
	b"ASCII\x00\x00\x00": "ascii",
	b"UNICODE\x00": "utf-16",
	b"\x00" * 8: "ascii",
}

TIFF_COMPRESSION = {
	1: "Uncompressed",
	2: "CCITT 1D",
	3: "Group 3 Fax",
	4: "Group 4 Fax",
	5: "LZW",
	6: "JPEG (old-style)",
	7: "JPEG",
	8: "Deflate",
	32773: "PackBits",
	32946: "Deflate",
	34712: "JPEG2000",
}


def _tag_name(section: str, tag: int) -> Tuple[str, Optional[int]]:
	info = piexif.TAGS.get(section, {}).get(tag)
	if info is None:
		return "0x%04x" % tag, None
	return info["name"], info["type"]


def _collapse(values: Tuple[Any, ...]) -> Any:
	return values[0] if len(values) == 1 else values


def _to_rational(name: str, pair: Any):
	try:
		num, den = pair
	except (TypeError, ValueError):
		raise FieldError(name, f"malformed rational {pair!r}")
	if not den:
		raise FieldError(name, "zero denominator")
	return rational(num, den)


def _undefined_to_str(name: str, raw: bytes) -> str:
	prefix = bytes(raw[:8])
	if prefix in _CHARSET_PREFIXES:
		raw = raw[8:]
		encoding = _CHARSET_PREFIXES[prefix]
	else:
		encoding = "ascii"
	text = bytes(raw).rstrip(b"\x00")
	try:
		decoded = text.decode(encoding)
	except UnicodeDecodeError:
		raise FieldError(name, f"{len(raw)} bytes of binary data")
	if not decoded.isprintable():
		raise FieldError(name, f"{len(raw)} bytes of binary data")
	return decoded.strip()


def field_value(name: str, tag_type: Optional[int], raw: Any) -> Any:
	"""Convert a raw piexif value into a plain Python value for the normalizer.

	Raises FieldError when the value has no sensible display form.
	"""
	if tag_type == piexif.TYPES.Ascii:
		if isinstance(raw, (bytes, bytearray)):
			return bytes(raw).rstrip(b"\x00").decode("latin-1").strip()
		return raw
	if tag_type == piexif.TYPES.Undefined:
		if isinstance(raw, (bytes, bytearray)):
			return _undefined_to_str(name, raw)
		return raw
	if tag_type in _RATIONAL_TYPES:
		# a single rational is a (num, den) pair; several are a tuple of pairs
		if isinstance(raw, tuple) and raw and isinstance(raw[0], tuple):
			return _collapse(tuple(_to_rational(name, p) for p in raw))
		return _to_rational(name, raw)
	if tag_type in _INTEGER_TYPES:
		if isinstance(raw, (bytes, bytearray)):
			return _collapse(tuple(raw))
		if isinstance(raw, tuple):
			return _collapse(raw)
		return raw
	if isinstance(raw, (bytes, bytearray)):
		return _undefined_to_str(name, raw)
	return raw


_POINTER_TAGS = (
	piexif.ImageIFD.ExifTag,
	piexif.ImageIFD.GPSTag,
	piexif.ExifIFD.InteroperabilityTag,
)


def walk_tags(exif: Dict[str, Any]) -> Iterator[Tuple[str, Optional[int], Any]]:
	"""Yield (name, type, raw value) for every tag in the main IFDs of a piexif dict."""
	for key, section in _IFD_SECTIONS:
		ifd = exif.get(key) or {}
		for tag in sorted(ifd):
			if key in ("0th", "Exif") and tag in _POINTER_TAGS:
				continue
			name, tag_type = _tag_name(section, tag)
			yield name, tag_type, ifd[tag]


def _canonical(typed: Dict[str, Any]) -> Dict[str, str]:
	out: Dict[str, str] = {}
	for w_key, h_key in (("ImageWidth", "ImageLength"), ("PixelXDimension", "PixelYDimension")):
		if w_key in typed and h_key in typed:
			out["ImageSize"] = "{}x{}".format(normalize(typed[w_key]), normalize(typed[h_key]))
			break
	bits = typed.get("BitsPerSample")
	if bits is not None:
		try:
			out["BitDepth"] = normalize(sum(bits) if isinstance(bits, tuple) else int(bits))
		except (TypeError, ValueError):
			logger.debug("BitsPerSample %r is not numeric", bits)
	compression = typed.get("Compression")
	if isinstance(compression, int):
		out["Compression"] = TIFF_COMPRESSION.get(compression, str(compression))
	return out


def properties_from_exif(exif: Dict[str, Any], source: str = "<exif>") -> Dict[str, str]:
	"""Walk a loaded piexif dict and build the tag-name -> display-string mapping.

	Fields that fail conversion are dropped; an EXIF block with no fields at
	all counts as missing metadata.
	"""
	props: Dict[str, str] = {}
	typed: Dict[str, Any] = {}
	visited = 0
	for name, tag_type, raw in walk_tags(exif):
		visited += 1
		try:
			value = field_value(name, tag_type, raw)
		except FieldError as e:
			logger.debug("%s: dropping field %s", source, e)
			continue
		typed[name] = value
		props[name] = normalize(value)
	if not visited:
		raise DecodeError(source, "no EXIF metadata found")
	props.update(_canonical(typed))
	return props


def _header_fields(data: bytes, source: str) -> Dict[str, str]:
	"""Size, depth and compression from the container's own header (JPEG SOF, TIFF IFD)."""
	try:
		with open_header(io.BytesIO(data)) as img:
			width, height = img.size
			mode = img.mode
			fmt = img.format or ""
			tiff_tags = dict(img.tag_v2) if fmt == "TIFF" else {}
	except Exception as e:
		logger.debug("%s: no header fallback: %s", source, e)
		return {}
	out: Dict[str, str] = {"ImageSize": f"{width}x{height}"}
	bits = MODE_BITS.get(mode)
	if bits is not None:
		out["BitDepth"] = normalize(bits)
	if fmt in ("JPEG", "MPO"):
		out["Compression"] = "JPEG"
	elif isinstance(tiff_tags.get(259), int):
		out["Compression"] = TIFF_COMPRESSION.get(tiff_tags[259], str(tiff_tags[259]))
	return out


def has_exif_container(data: bytes) -> bool:
	"""True for the containers piexif can read: JPEG, TIFF, WebP or a bare Exif block."""
	return (
		data[:2] == b"\xff\xd8"
		or data[:4] in (b"II*\x00", b"MM\x00*")
		or (data[:4] == b"RIFF" and data[8:12] == b"WEBP")
		or data[:4] == b"Exif"
	)


def decode_tags(path: Path) -> Dict[str, str]:
	with path.open("rb") as fh:
		data = fh.read()
	if not has_exif_container(data):
		raise DecodeError(path, "not a JPEG, TIFF or WebP file")
	try:
		exif = piexif.load(data)
	except Exception as e:
		raise DecodeError(path, f"cannot read EXIF block: {e}") from e
	props = properties_from_exif(exif, source=str(path))
	for key, value in _header_fields(data, str(path)).items():
		props.setdefault(key, value)
	return props
