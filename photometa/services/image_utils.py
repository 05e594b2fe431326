from __future__ import annotations

from io import BytesIO
from math import gcd
from typing import Tuple

from PIL import ExifTags, Image, UnidentifiedImageError

from photometa.services.byte_reader import Buffer

# EXIF orientations that rotate the image by 90 degrees one way or the other
TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}


class UnreadableImageError(ValueError):
	pass


def exif_orientation(exif) -> int:
	orientation = None
	if exif:
		tmp = {}
		for tag_id, value in exif.items():
			tag = ExifTags.TAGS.get(tag_id, tag_id)
			tmp[str(tag)] = value
		orientation = tmp.get("Orientation")
	try:
		return int(orientation) if orientation is not None else 1
	except (TypeError, ValueError):
		return 1


def display_size(width: int, height: int, orientation: int) -> Tuple[int, int]:
	if orientation in TRANSPOSED_ORIENTATIONS:
		return (height, width)
	return (width, height)


def image_size(data: Buffer) -> Tuple[int, int]:
	"""
	Natural (width, height) of an encoded image, as a browser would display it.
	Only the header is parsed; pixels are never decoded.
	"""
	try:
		with Image.open(BytesIO(bytes(data))) as img:
			return display_size(img.width, img.height, exif_orientation(img.getexif()))
	except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
		raise UnreadableImageError(f"Cannot identify image: {e}") from e


def aspect_ratio(width: int, height: int) -> str:
	d = gcd(width, height)
	if d == 0:
		return "0:0"
	return f"{width // d}:{height // d}"


def megapixels(width: int, height: int) -> float:
	# two decimals, halves rounded up
	return int(width * height / 10000 + 0.5) / 100


def orientation_label(width: int, height: int) -> str:
	if width > height:
		return "Landscape"
	if height > width:
		return "Portrait"
	return "Square"
