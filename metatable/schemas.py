from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict

from metatable.services.records import ResultSet


class ImageRecordModel(BaseModel):
	model_config = ConfigDict(extra="forbid")

	identity: str
	properties: Dict[str, str]


class SkippedFileModel(BaseModel):
	model_config = ConfigDict(extra="forbid")

	identity: str
	reason: str


class ResultSetModel(BaseModel):
	"""JSON view of one extraction run."""

	model_config = ConfigDict(extra="forbid")

	root: str
	records: List[ImageRecordModel]
	skipped: List[SkippedFileModel]

	@classmethod
	def from_result(cls, result: ResultSet) -> "ResultSetModel":
		return cls(
			root=result.root,
			records=[ImageRecordModel(identity=r.identity, properties=dict(r.properties)) for r in result],
			skipped=[SkippedFileModel(identity=s.identity, reason=s.reason) for s in result.skipped],
		)
