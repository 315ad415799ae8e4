from __future__ import annotations

from html import escape
from pathlib import Path
from typing import List

from metatable.services.records import ResultSet


_PAGE_HEAD = """<!DOCTYPE html>
<html lang="en">
<head>
	<meta charset="UTF-8">
	<meta name="viewport" content="width=device-width, initial-scale=1.0">
	<title>{title}</title>
	<style>
		table {{ width: 100%; border-collapse: collapse; }}
		th, td {{ border: 1px solid black; padding: 8px; text-align: left; }}
		th {{ background-color: #f2f2f2; }}
		.note {{ color: #666; }}
	</style>
</head>
<body>
	<h1>Select a Folder</h1>
	<form id="folderForm" action="/upload" method="post" enctype="multipart/form-data">
		<input type="file" id="folderInput" name="folder" webkitdirectory directory multiple>
		<button type="submit">Upload</button>
	</form>
	<h1>Data</h1>
"""

_PAGE_TAIL = """</body>
</html>
"""


def _properties_table(properties) -> List[str]:
	lines = ["<table>"]
	for key in sorted(properties):
		lines.append(
			"<tr><td>{}</td><td>{}</td></tr>".format(escape(key), escape(properties[key]))
		)
	lines.append("</table>")
	return lines


def _display_name(identity: str, root: str) -> str:
	try:
		rel = Path(identity).relative_to(root)
	except ValueError:
		return identity
	return str(rel) if rel.parts else Path(identity).name


def render_report(result: ResultSet, title: str = "Image Data") -> str:
	"""Render a ResultSet as the upload page with a nested file/property table."""
	parts = [_PAGE_HEAD.format(title=escape(title))]
	if result.skipped:
		parts.append(
			'\t<p class="note">{} file(s) could not be read and are not listed.</p>\n'.format(
				len(result.skipped)
			)
		)
	parts.append("\t<table>\n\t\t<tr><th>File Name</th><th>Data</th></tr>\n")
	for record in result:
		parts.append("\t\t<tr>\n\t\t\t<td>{}</td>\n\t\t\t<td>\n".format(escape(_display_name(record.identity, result.root))))
		parts.extend("\t\t\t\t" + line + "\n" for line in _properties_table(record.properties))
		parts.append("\t\t\t</td>\n\t\t</tr>\n")
	parts.append("\t</table>\n")
	parts.append(_PAGE_TAIL)
	return "".join(parts)
