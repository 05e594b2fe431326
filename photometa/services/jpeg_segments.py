from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Union

from photometa.services.byte_reader import Buffer, ByteOrder, ByteReader, OutOfBounds
from photometa.services.tiff_decoder import decode_tiff

logger = logging.getLogger(__name__)

SOI = 0xFFD8
SOS = 0xFFDA
APP1 = 0xFFE1
EXIF_SIGNATURE = b"Exif\x00\x00"


@dataclass(frozen=True)
class JpegSegment:
	marker: int
	payload_offset: int
	payload_length: int


def _as_reader(data: Union[Buffer, ByteReader]) -> ByteReader:
	return data if isinstance(data, ByteReader) else ByteReader(data)


def is_jpeg(data: Union[Buffer, ByteReader]) -> bool:
	reader = _as_reader(data)
	return reader.startswith(b"\xff\xd8")


def iter_segments(data: Union[Buffer, ByteReader]) -> Iterator[JpegSegment]:
	"""
	Walk the marker segments of a JPEG up to and including start-of-scan.
	Yields nothing for buffers that are not JPEG.
	"""
	reader = _as_reader(data)
	if not is_jpeg(reader):
		return
	offset = 2
	size = len(reader)
	while offset < size:
		try:
			marker = reader.u16(offset, ByteOrder.BIG)
		except OutOfBounds:
			logger.debug("Truncated marker at 0x%x", offset)
			return
		if marker >> 8 != 0xFF:
			logger.debug("Malformed marker 0x%04x at 0x%x, stopping", marker, offset)
			return
		if marker == SOS:
			yield JpegSegment(marker=marker, payload_offset=offset + 2, payload_length=0)
			return
		try:
			length = reader.u16(offset + 2, ByteOrder.BIG)
		except OutOfBounds:
			logger.debug("Truncated length for marker 0x%04x at 0x%x", marker, offset)
			return
		if length < 2:
			logger.debug("Invalid segment length %d for marker 0x%04x", length, marker)
			return
		payload_offset = offset + 4
		payload_length = min(length - 2, size - payload_offset)
		yield JpegSegment(marker=marker, payload_offset=payload_offset, payload_length=payload_length)
		offset += 2 + length


def find_exif_block(data: Union[Buffer, ByteReader]) -> Optional[ByteReader]:
	"""Return a window over the TIFF block of the first Exif APP1 segment."""
	reader = _as_reader(data)
	for segment in iter_segments(reader):
		if segment.marker != APP1:
			continue
		if segment.payload_length < len(EXIF_SIGNATURE) or not reader.startswith(EXIF_SIGNATURE, segment.payload_offset):
			# XMP and other APP1 payloads
			continue
		start = segment.payload_offset + len(EXIF_SIGNATURE)
		return reader.window(start, segment.payload_offset + segment.payload_length)
	return None


def read_exif(data: Union[Buffer, ByteReader], follow_exif_ifd: bool = True) -> Dict[str, str]:
	block = find_exif_block(data)
	if block is None:
		return {}
	exif: Dict[str, str] = {}
	for tag in decode_tiff(block, follow_exif_ifd=follow_exif_ifd):
		exif[tag.name] = tag.value
	return exif
