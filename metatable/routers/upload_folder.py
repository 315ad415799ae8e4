from __future__ import annotations

import logging
import uuid
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple

from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import HTMLResponse

from metatable.config import Settings
from metatable.report import render_report
from metatable.schemas import ResultSetModel
from metatable.services.errors import PathError
from metatable.services.extraction import extract_metadata
from metatable.services.records import ResultSet
from metatable.services.selection import is_allowed


logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


def _settings(request: Request) -> Settings:
	return request.app.state.settings


def _slugify(text: str) -> str:
	return "".join(ch if (ch.isalnum() or ch in ("-", "_")) else "-" for ch in text).strip("-_").lower()


def safe_relative(filename: str) -> Optional[Path]:
	"""Client-supplied relative path with root, '.' and '..' parts removed."""
	parts = [p for p in PurePosixPath(filename.replace("\\", "/")).parts if p not in ("/", ".", "..")]
	return Path(*parts) if parts else None


def _batch_id(first: Path) -> str:
	# "<top folder or file stem>_<ddmmyyyy>_<short id>"
	head = first.parts[0] if len(first.parts) > 1 else first.stem
	stem = _slugify(head) or "batch"
	return f"{stem}_{datetime.now().strftime('%d%m%Y')}_{uuid.uuid4().hex[:6]}"


def _extract(root: Path, settings: Settings) -> ResultSet:
	try:
		return extract_metadata(root, workers=settings.workers)
	except PathError as e:
		raise HTTPException(status_code=404, detail=str(e))


def _extract_upload_root(settings: Settings) -> ResultSet:
	# the upload root only appears once the first batch is stored
	if not settings.upload_dir.exists():
		return ResultSet(root=str(settings.upload_dir))
	return _extract(settings.upload_dir, settings)


@router.get("/", response_class=HTMLResponse, summary="Upload form and report of all uploaded images")
def index(request: Request):
	settings = _settings(request)
	return HTMLResponse(render_report(_extract_upload_root(settings)))


@router.post("/upload", response_class=HTMLResponse, summary="Upload a folder of images and report their metadata")
async def upload(request: Request, folder: List[UploadFile] = File(...)):
	settings = _settings(request)
	accepted: List[Tuple[Path, bytes]] = []
	for f in folder:
		rel = safe_relative(f.filename or "")
		if rel is None or not is_allowed(rel, settings.allowed_extensions):
			logger.info("Ignoring upload %r: extension not accepted", f.filename)
			continue
		accepted.append((rel, await f.read()))
	if not accepted:
		raise HTTPException(status_code=400, detail="No files uploaded")

	batch_dir = settings.upload_dir / _batch_id(accepted[0][0])
	for rel, data in accepted:
		target = batch_dir / rel
		target.parent.mkdir(parents=True, exist_ok=True)
		with target.open("wb") as fh:
			fh.write(data)
	logger.info("Stored %d uploaded file(s) in %s", len(accepted), batch_dir)

	result = _extract(batch_dir, settings)
	return HTMLResponse(render_report(result, title=f"Image Data - {batch_dir.name}"))


@router.get("/api/records", response_model=ResultSetModel, summary="Extracted metadata as JSON")
def records(request: Request, folder: Optional[str] = Query(None)):
	settings = _settings(request)
	if not folder:
		return ResultSetModel.from_result(_extract_upload_root(settings))
	rel = safe_relative(folder)
	if rel is None:
		raise HTTPException(status_code=400, detail="Invalid folder")
	return ResultSetModel.from_result(_extract(settings.upload_dir / rel, settings))
