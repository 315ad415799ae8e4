"""
Shared fixtures: real image files generated with Pillow, EXIF blocks with piexif.
"""

import struct
import zlib
from pathlib import Path
from typing import Optional, Tuple

import piexif
import pytest
from PIL import Image


def exif_bytes(
	size: Tuple[int, int] = (320, 240),
	resolution: Tuple[int, int] = (300, 1),
	make: str = "Canon",
) -> bytes:
	exif_dict = {
		"0th": {
			piexif.ImageIFD.Make: make.encode("ascii"),
			piexif.ImageIFD.XResolution: resolution,
			piexif.ImageIFD.YResolution: resolution,
			piexif.ImageIFD.ResolutionUnit: 2,
			piexif.ImageIFD.ImageWidth: size[0],
			piexif.ImageIFD.ImageLength: size[1],
			piexif.ImageIFD.BitsPerSample: (8, 8, 8),
			piexif.ImageIFD.Compression: 6,
		},
		"Exif": {
			piexif.ExifIFD.PixelXDimension: size[0],
			piexif.ExifIFD.PixelYDimension: size[1],
			piexif.ExifIFD.ExifVersion: b"0230",
		},
		"GPS": {},
		"1st": {},
		"thumbnail": None,
	}
	return piexif.dump(exif_dict)


def write_exif_jpeg(path: Path, size: Tuple[int, int] = (320, 240), exif: Optional[bytes] = None) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	img = Image.new("RGB", size, (200, 120, 40))
	img.save(path, format="JPEG", exif=exif if exif is not None else exif_bytes(size=size))
	return path


def write_plain_jpeg(path: Path, size: Tuple[int, int] = (32, 32)) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	Image.new("RGB", size, (10, 20, 30)).save(path, format="JPEG")
	return path


def write_image(path: Path, fmt: str, size: Tuple[int, int] = (640, 480), mode: str = "RGB", **params) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	Image.new(mode, size).save(path, format=fmt, **params)
	return path


def _png_chunk(kind: bytes, body: bytes) -> bytes:
	return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))


def write_large_png_header(path: Path, size: Tuple[int, int] = (20000, 10000)) -> Path:
	"""Write a valid 1-bit grayscale PNG header for a huge image without allocating its pixels."""
	path.parent.mkdir(parents=True, exist_ok=True)
	ihdr = struct.pack(">IIBBBBB", size[0], size[1], 1, 0, 0, 0, 0)
	idat = zlib.compress(b"\x00" * 64)
	path.write_bytes(
		b"\x89PNG\r\n\x1a\n"
		+ _png_chunk(b"IHDR", ihdr)
		+ _png_chunk(b"IDAT", idat)
		+ _png_chunk(b"IEND", b"")
	)
	return path


def write_corrupt(path: Path, head: bytes = b"BM") -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_bytes(head + b"\x00" * 10)
	return path


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
	"""Directory with one EXIF JPEG at the top and one BMP in a subfolder."""
	root = tmp_path / "shots"
	write_exif_jpeg(root / "a_photo.jpg")
	write_image(root / "nested" / "b_scan.bmp", "BMP", size=(640, 480))
	return root
