from __future__ import annotations

import logging
import struct
import warnings
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional

from PIL import Image, UnidentifiedImageError

from metatable.services.errors import DecodeError
from metatable.services.properties import normalize


logger = logging.getLogger(__name__)

# bits per pixel for Pillow modes
MODE_BITS = {
	"1": 1,
	"L": 8,
	"P": 8,
	"LA": 16,
	"PA": 16,
	"La": 16,
	"I;16": 16,
	"I;16B": 16,
	"I;16L": 16,
	"I;16N": 16,
	"RGB": 24,
	"YCbCr": 24,
	"LAB": 24,
	"HSV": 24,
	"RGBA": 32,
	"RGBa": 32,
	"RGBX": 32,
	"CMYK": 32,
	"I": 32,
	"F": 32,
}

BMP_COMPRESSION = {
	0: "None",
	1: "RLE8",
	2: "RLE4",
	3: "Bitfields",
	4: "JPEG",
	5: "PNG",
	6: "Alpha Bitfields",
}

# formats whose pixel data is always stored with one scheme
FORMAT_COMPRESSION = {
	"GIF": "LZW",
	"PNG": "Deflate",
}


def _pcx_compression(fh: BinaryIO) -> str:
	fh.seek(2)
	encoding = fh.read(1)
	return "RLE" if encoding == b"\x01" else "None"


def _compression(fmt: str, info: Dict[str, Any], fh: BinaryIO) -> Optional[str]:
	if fmt == "BMP" or fmt == "DIB":
		code = info.get("compression")
		if code is None:
			return None
		return BMP_COMPRESSION.get(code, f"Unknown ({code})")
	if fmt == "PCX":
		return _pcx_compression(fh)
	return FORMAT_COMPRESSION.get(fmt)


def _identify(fh: BinaryIO) -> Image.Image:
	Image.init()
	fh.seek(0)
	prefix = fh.read(16)
	for fmt in Image.ID:
		factory, accept = Image.OPEN[fmt]
		if accept is not None:
			result = accept(prefix)
			if not result or isinstance(result, str):
				continue
		fh.seek(0)
		try:
			return factory(fh, "")
		except (SyntaxError, IndexError, TypeError, struct.error):
			continue
	raise UnidentifiedImageError("cannot identify image file")


def open_header(fh: BinaryIO) -> Image.Image:
	"""Open an image for its header only.

	Pillow's pixel-count limit guards pixel decoding, which never happens here,
	so an oversized image is identified again without that check.
	"""
	try:
		with warnings.catch_warnings():
			warnings.simplefilter("error", Image.DecompressionBombWarning)
			return Image.open(fh)
	except (Image.DecompressionBombError, Image.DecompressionBombWarning):
		logger.debug("re-reading oversized header without the pixel limit")
	return _identify(fh)


def decode_header(path: Path) -> Dict[str, str]:
	"""Read only the image header and report its pixel bounds.

	``resolution x`` and ``resolution y`` always come from the pixel grid.
	Bit depth, DPI and compression are added when the header carries them.
	"""
	with path.open("rb") as fh:
		try:
			with open_header(fh) as img:
				width, height = img.size
				mode = img.mode
				fmt = img.format or ""
				info = dict(img.info)
		except Exception as e:
			raise DecodeError(path, f"cannot read image header: {e}") from e
		if width <= 0 or height <= 0:
			raise DecodeError(path, f"invalid pixel bounds {width}x{height}")

		props: Dict[str, str] = {
			"resolution x": normalize(width),
			"resolution y": normalize(height),
			"ImageSize": f"{width}x{height}",
		}
		bits = MODE_BITS.get(mode)
		if bits is not None:
			props["BitDepth"] = normalize(bits)
		else:
			logger.debug("%s: no bit depth known for mode %s", path, mode)
		dpi = info.get("dpi")
		if isinstance(dpi, tuple) and len(dpi) == 2:
			props["XResolution"] = normalize(dpi[0])
			props["YResolution"] = normalize(dpi[1])
		compression = _compression(fmt, info, fh)
		if compression is not None:
			props["Compression"] = compression
	return props
