from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from photometa.services.metadata import ImageMetadata

NO_EXIF_NOTICE = "No EXIF metadata found in this JPEG. The image may have had its metadata stripped."
NOT_JPEG_NOTICE = "EXIF metadata extraction is available for JPEG/JPG files only."


def format_bytes(size: int) -> str:
	if size < 1024:
		return f"{size} B"
	if size < 1024 * 1024:
		return f"{size / 1024:.1f} KB"
	return f"{size / (1024 * 1024):.2f} MB"


def _format_megapixels(value: float) -> str:
	text = str(value)
	return text[:-2] if text.endswith(".0") else text


def to_lines(meta: ImageMetadata) -> List[str]:
	lines = [
		f"File: {meta.file_name}",
		f"Size: {format_bytes(meta.file_size)}",
		f"Type: {meta.file_type}",
		f"Dimensions: {meta.width} × {meta.height} px",
		f"Aspect Ratio: {meta.aspect_ratio}",
		f"Megapixels: {_format_megapixels(meta.megapixels)}",
		f"Orientation: {meta.orientation}",
		f"Modified: {meta.last_modified or 'unknown'}",
	]
	lines.extend(f"{name}: {value}" for name, value in meta.exif.items())
	return lines


def to_text(meta: ImageMetadata) -> str:
	return "\n".join(to_lines(meta))


def exif_notice(meta: ImageMetadata) -> Optional[str]:
	if not meta.is_jpeg:
		return NOT_JPEG_NOTICE
	if not meta.exif:
		return NO_EXIF_NOTICE
	return None


def to_document(meta: ImageMetadata) -> Dict[str, Any]:
	return meta.to_dict()


def export_filename(meta: ImageMetadata) -> str:
	return f"{meta.file_name}-metadata.json"


def write_metadata_json(document: Dict[str, Any], out_path: Path) -> str:
	out_path.parent.mkdir(parents=True, exist_ok=True)
	with out_path.open("w", encoding="utf-8") as f:
		json.dump(document, f, indent=2, ensure_ascii=False)
	return str(out_path)
