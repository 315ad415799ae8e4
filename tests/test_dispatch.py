"""
Tests for format dispatch by extension.
"""

from pathlib import Path

import pytest

from conftest import write_exif_jpeg, write_image
from metatable.services.dispatch import DecoderKind, ImageFormat, decode
from metatable.services.errors import DecodeError


class TestImageFormat:
	@pytest.mark.parametrize(
		"name, expected",
		[
			("a.jpg", ImageFormat.JPEG),
			("a.JPEG", ImageFormat.JPEG),
			("a.Tif", ImageFormat.TIFF),
			("a.BMP", ImageFormat.BMP),
			("a.pcx", ImageFormat.PCX),
			("a.gif", ImageFormat.GIF),
			("a.png", ImageFormat.PNG),
			("a.heic", ImageFormat.UNKNOWN),
			("noext", ImageFormat.UNKNOWN),
		],
	)
	def test_extension_lookup_is_case_insensitive(self, name, expected):
		assert ImageFormat.from_path(name) is expected

	def test_unknown_falls_back_to_tag_decoder(self):
		assert ImageFormat.UNKNOWN.decoder is DecoderKind.TAG

	def test_header_formats(self):
		header = {f for f in ImageFormat if f.decoder is DecoderKind.HEADER}
		assert header == {ImageFormat.BMP, ImageFormat.PCX, ImageFormat.GIF, ImageFormat.PNG}


class TestDecode:
	def test_file_name_is_added(self, tmp_path: Path):
		props = decode(write_image(tmp_path / "x.bmp", "BMP", size=(2, 3)))
		assert props["FileName"] == "x.bmp"
		assert props["resolution y"] == "3"

	def test_uppercase_extension_routes_to_header_decoder(self, tmp_path: Path):
		props = decode(write_image(tmp_path / "X.BMP", "BMP", size=(5, 5)))
		assert props["resolution x"] == "5"

	def test_jpeg_goes_through_tags(self, tmp_path: Path):
		props = decode(write_exif_jpeg(tmp_path / "p.JPG"))
		assert props["FileName"] == "p.JPG"
		assert props["Make"] == "Canon"
		assert "resolution x" not in props

	def test_unknown_extension_with_exif_data_still_decodes(self, tmp_path: Path):
		src = write_exif_jpeg(tmp_path / "p.jpg")
		odd = tmp_path / "p.bin"
		odd.write_bytes(src.read_bytes())
		assert decode(odd)["Make"] == "Canon"

	def test_missing_file_is_a_decode_error(self, tmp_path: Path):
		with pytest.raises(DecodeError) as excinfo:
			decode(tmp_path / "gone.jpg")
		assert "cannot open file" in excinfo.value.reason
