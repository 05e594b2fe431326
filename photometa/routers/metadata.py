from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse

from photometa import config
from photometa.services.export import exif_notice, export_filename, to_document, to_text
from photometa.services.image_utils import UnreadableImageError
from photometa.services.metadata import ImageMetadata, build_metadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/metadata", tags=["metadata"])


async def _extract(file: UploadFile, last_modified: Optional[int]) -> ImageMetadata:
	size = getattr(file, "size", None)
	if size is not None and size > config.MAX_UPLOAD_BYTES:
		raise HTTPException(status_code=413, detail=f"Upload exceeds {config.MAX_UPLOAD_BYTES} bytes")
	data = await file.read()
	if not data:
		raise HTTPException(status_code=400, detail="Empty upload")
	if len(data) > config.MAX_UPLOAD_BYTES:
		raise HTTPException(status_code=413, detail=f"Upload exceeds {config.MAX_UPLOAD_BYTES} bytes")
	try:
		meta = build_metadata(
			data,
			file_name=file.filename or "image",
			file_type=file.content_type,
			last_modified=last_modified,
			follow_exif_ifd=config.FOLLOW_EXIF_IFD,
		)
	except UnreadableImageError as e:
		raise HTTPException(status_code=422, detail=str(e))
	logger.info("Extracted %s (%dx%d, %d EXIF tags)", meta.file_name, meta.width, meta.height, len(meta.exif))
	return meta


@router.post("", summary="Extract dimensions and EXIF metadata from an image")
async def extract(
	file: UploadFile = File(...),
	last_modified: Optional[int] = Form(None),
) -> Dict[str, Any]:
	meta = await _extract(file, last_modified)
	return {"metadata": to_document(meta), "notice": exif_notice(meta)}


@router.post("/text", summary="Metadata as a copyable 'Label: value' block", response_class=PlainTextResponse)
async def extract_text(
	file: UploadFile = File(...),
	last_modified: Optional[int] = Form(None),
):
	meta = await _extract(file, last_modified)
	return PlainTextResponse(to_text(meta))


@router.post("/export", summary="Download metadata as a JSON document")
async def export(
	file: UploadFile = File(...),
	last_modified: Optional[int] = Form(None),
):
	meta = await _extract(file, last_modified)
	headers = {"Content-Disposition": f'attachment; filename="{export_filename(meta)}"'}
	return JSONResponse(to_document(meta), headers=headers)
