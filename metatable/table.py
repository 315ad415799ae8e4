from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pandas as pd

from metatable.services.records import ImageRecord, ResultSet


SUMMARY_COLUMNS = ["Name", "Res", "DPI", "Depth", "Compression"]


def _dpi(record: ImageRecord) -> str:
	x = record.get("XResolution")
	y = record.get("YResolution")
	if x is None or y is None:
		return ""
	return f"{x}x{y}"


def _res(record: ImageRecord) -> str:
	size = record.get("ImageSize")
	if size is not None:
		return size
	x = record.get("resolution x")
	y = record.get("resolution y")
	return f"{x}x{y}" if x is not None and y is not None else ""


def summary_row(record: ImageRecord) -> Dict[str, str]:
	"""One display row; unknown fields are left blank."""
	return {
		"Name": record.get("FileName") or Path(record.identity).name,
		"Res": _res(record),
		"DPI": _dpi(record),
		"Depth": record.get("BitDepth", ""),
		"Compression": record.get("Compression", ""),
	}


def to_frame(result: ResultSet, all_properties: bool = False) -> pd.DataFrame:
	if all_properties:
		rows: List[Dict[str, str]] = [{"File": r.identity, **dict(r.properties)} for r in result]
		frame = pd.DataFrame(rows)
		if frame.empty:
			return pd.DataFrame(columns=["File"])
		return frame.fillna("")
	return pd.DataFrame([summary_row(r) for r in result], columns=SUMMARY_COLUMNS)


def render_table(result: ResultSet, all_properties: bool = False) -> str:
	frame = to_frame(result, all_properties=all_properties)
	if frame.empty:
		return "No images found."
	return frame.to_string(index=False)
