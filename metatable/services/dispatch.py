from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Callable, Dict, Tuple, Union

from metatable.services.errors import DecodeError
from metatable.services.header_decoder import decode_header
from metatable.services.tag_decoder import decode_tags


logger = logging.getLogger(__name__)


class DecoderKind(enum.Enum):
	TAG = "tag"
	HEADER = "header"


class ImageFormat(enum.Enum):
	"""Known image formats, keyed by extension, each bound to one decoder kind."""

	JPEG = ((".jpg", ".jpeg", ".jpe"), DecoderKind.TAG)
	TIFF = ((".tif", ".tiff"), DecoderKind.TAG)
	WEBP = ((".webp",), DecoderKind.TAG)
	BMP = ((".bmp", ".dib"), DecoderKind.HEADER)
	PCX = ((".pcx",), DecoderKind.HEADER)
	GIF = ((".gif",), DecoderKind.HEADER)
	PNG = ((".png",), DecoderKind.HEADER)
	# anything else is handed to the tag decoder, which fails cleanly on non-EXIF data
	UNKNOWN = ((), DecoderKind.TAG)

	def __init__(self, extensions: Tuple[str, ...], decoder: DecoderKind) -> None:
		self.extensions = extensions
		self.decoder = decoder

	@classmethod
	def from_path(cls, path: Union[str, Path]) -> "ImageFormat":
		ext = Path(path).suffix.lower()
		for fmt in cls:
			if ext in fmt.extensions:
				return fmt
		return cls.UNKNOWN


DECODERS: Dict[DecoderKind, Callable[[Path], Dict[str, str]]] = {
	DecoderKind.TAG: decode_tags,
	DecoderKind.HEADER: decode_header,
}


def decode(path: Union[str, Path]) -> Dict[str, str]:
	"""Decode one file into its canonical property mapping.

	Raises DecodeError when the file cannot be opened or its content is rejected.
	"""
	path = Path(path)
	fmt = ImageFormat.from_path(path)
	logger.debug("decoding %s as %s via %s decoder", path, fmt.name, fmt.decoder.value)
	try:
		props = DECODERS[fmt.decoder](path)
	except OSError as e:
		raise DecodeError(path, f"cannot open file: {e.strerror or e}") from e
	out = {"FileName": path.name}
	out.update(props)
	return out
