from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from photometa.services.byte_reader import Buffer
from photometa.services.image_utils import aspect_ratio, image_size, megapixels, orientation_label
from photometa.services.jpeg_segments import is_jpeg, read_exif

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ImageMetadata:
	file_name: str
	file_size: int
	file_type: str
	last_modified: Optional[str]
	width: int
	height: int
	aspect_ratio: str
	megapixels: float
	orientation: str
	is_jpeg: bool
	exif: Mapping[str, str]

	# the EXIF mapping is a read-only view and cannot be hashed
	__hash__ = None  # type: ignore[assignment]

	@property
	def total_pixels(self) -> int:
		return self.width * self.height

	def to_dict(self) -> Dict[str, Any]:
		return {
			"file_name": self.file_name,
			"file_size": self.file_size,
			"file_type": self.file_type,
			"last_modified": self.last_modified,
			"width": self.width,
			"height": self.height,
			"aspect_ratio": self.aspect_ratio,
			"megapixels": self.megapixels,
			"orientation": self.orientation,
			"total_pixels": self.total_pixels,
			"exif": dict(self.exif),
		}


def _format_last_modified(value: Union[datetime, int, float, None]) -> Optional[str]:
	if value is None:
		return None
	if isinstance(value, datetime):
		dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
	else:
		# epoch milliseconds, as File.lastModified
		try:
			dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
		except (ValueError, OverflowError, OSError):
			logger.debug("Ignoring out of range modification time %r", value)
			return None
	try:
		return dt.astimezone(timezone.utc).isoformat()
	except (ValueError, OverflowError):
		logger.debug("Ignoring out of range modification time %r", value)
		return None


def guess_mime_type(file_name: str) -> str:
	guessed, _ = mimetypes.guess_type(file_name)
	return guessed or DEFAULT_MIME_TYPE


def build_metadata(
	data: Buffer,
	file_name: str,
	file_type: Optional[str] = None,
	last_modified: Union[datetime, int, float, None] = None,
	file_size: Optional[int] = None,
	follow_exif_ifd: bool = True,
) -> ImageMetadata:
	width, height = image_size(data)
	exif = read_exif(data, follow_exif_ifd=follow_exif_ifd)
	jpeg = is_jpeg(data)
	if jpeg and not exif:
		logger.debug("No EXIF metadata in %s", file_name)
	return ImageMetadata(
		file_name=file_name,
		file_size=len(data) if file_size is None else file_size,
		file_type=file_type or guess_mime_type(file_name),
		last_modified=_format_last_modified(last_modified),
		width=width,
		height=height,
		aspect_ratio=aspect_ratio(width, height),
		megapixels=megapixels(width, height),
		orientation=orientation_label(width, height),
		is_jpeg=jpeg,
		exif=MappingProxyType(exif),
	)
