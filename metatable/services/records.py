from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional


@dataclass(frozen=True)
class ImageRecord:
	identity: str
	properties: Mapping[str, str]

	def __post_init__(self) -> None:
		# read-only view over a private copy
		object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

	def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
		return self.properties.get(name, default)

	def to_dict(self) -> Dict[str, object]:
		return {"identity": self.identity, "properties": dict(self.properties)}


@dataclass(frozen=True)
class SkippedFile:
	identity: str
	reason: str


@dataclass(frozen=True)
class FileOutcome:
	"""Result of processing one walked entry: a record or a skip reason, never both."""

	identity: str
	record: Optional[ImageRecord] = None
	skip_reason: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.record is not None

	@classmethod
	def success(cls, record: ImageRecord) -> "FileOutcome":
		return cls(identity=record.identity, record=record)

	@classmethod
	def skipped(cls, identity: str, reason: str) -> "FileOutcome":
		return cls(identity=identity, skip_reason=reason)


@dataclass
class ResultSet:
	"""Ordered records from one extraction run, plus the entries that were skipped.

	Iteration, ``len`` and indexing only see successfully decoded records.
	"""

	root: str
	records: List[ImageRecord] = field(default_factory=list)
	skipped: List[SkippedFile] = field(default_factory=list)

	def add(self, outcome: FileOutcome) -> None:
		if outcome.record is not None:
			self.records.append(outcome.record)
		else:
			self.skipped.append(SkippedFile(outcome.identity, outcome.skip_reason or "unknown error"))

	def __iter__(self) -> Iterator[ImageRecord]:
		return iter(self.records)

	def __len__(self) -> int:
		return len(self.records)

	def __getitem__(self, index: int) -> ImageRecord:
		return self.records[index]

	def identities(self) -> List[str]:
		return [r.identity for r in self.records]
