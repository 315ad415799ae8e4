"""
Tests for the terminal table (pandas) and the HTML report.
"""

from pathlib import Path

from metatable.report import render_report
from metatable.services.extraction import extract_metadata
from metatable.services.records import ImageRecord, ResultSet, SkippedFile
from metatable.table import SUMMARY_COLUMNS, render_table, summary_row, to_frame


def _result() -> ResultSet:
	return ResultSet(
		root="/data",
		records=[
			ImageRecord(
				"/data/a.jpg",
				{
					"FileName": "a.jpg",
					"ImageSize": "320x240",
					"XResolution": "300",
					"YResolution": "300",
					"BitDepth": "24",
					"Compression": "JPEG",
				},
			),
			ImageRecord("/data/sub/b.bmp", {"FileName": "b.bmp", "resolution x": "640", "resolution y": "480"}),
		],
		skipped=[SkippedFile("/data/c.bmp", "cannot read image header")],
	)


class TestTable:
	def test_summary_row(self):
		jpeg, bmp = _result()
		assert summary_row(jpeg) == {
			"Name": "a.jpg",
			"Res": "320x240",
			"DPI": "300x300",
			"Depth": "24",
			"Compression": "JPEG",
		}
		assert summary_row(bmp) == {"Name": "b.bmp", "Res": "640x480", "DPI": "", "Depth": "", "Compression": ""}

	def test_frame_columns(self):
		frame = to_frame(_result())
		assert list(frame.columns) == SUMMARY_COLUMNS
		assert list(frame["Name"]) == ["a.jpg", "b.bmp"]

	def test_all_properties_frame_blanks_missing(self):
		frame = to_frame(_result(), all_properties=True)
		assert frame.loc[1, "XResolution"] == ""
		assert frame.loc[0, "File"] == "/data/a.jpg"

	def test_empty(self):
		assert render_table(ResultSet(root="/x")) == "No images found."
		assert render_table(ResultSet(root="/x"), all_properties=True) == "No images found."

	def test_render_contains_values(self, image_dir: Path):
		text = render_table(extract_metadata(image_dir))
		assert "a_photo.jpg" in text
		assert "640x480" in text


class TestReport:
	def test_nested_table_and_escaping(self):
		result = _result()
		result.records.append(ImageRecord("/data/<x>.gif", {"FileName": "<x>.gif"}))
		html = render_report(result)
		assert "<td>sub/b.bmp</td>" in html
		assert "<td>resolution x</td><td>640</td>" in html
		assert "&lt;x&gt;.gif" in html
		assert 'action="/upload"' in html

	def test_skipped_files_are_not_rows(self):
		html = render_report(_result())
		assert "c.bmp" not in html
		assert "1 file(s) could not be read" in html
