from __future__ import annotations

import os
from typing import List


def _flag(name: str, default: bool) -> bool:
	value = os.environ.get(name)
	if value is None:
		return default
	return value.strip().lower() not in ("0", "false", "no", "off", "")


def _origins(value: str) -> List[str]:
	return [o.strip() for o in value.split(",") if o.strip()]


LOG_LEVEL = os.environ.get("PHOTOMETA_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# CORS (adjust origins in production)
CORS_ORIGINS = _origins(os.environ.get("PHOTOMETA_CORS_ORIGINS", "*"))

MAX_UPLOAD_BYTES = int(os.environ.get("PHOTOMETA_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))

# Also decode the Exif sub-IFD (DateTimeOriginal, ExposureTime, ...)
FOLLOW_EXIF_IFD = _flag("PHOTOMETA_FOLLOW_EXIF_IFD", True)
