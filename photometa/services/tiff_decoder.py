from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from photometa.services.byte_reader import ByteOrder, ByteReader, OutOfBounds
from photometa.services.exif_tags import EXIF_IFD_POINTER, tag_name

logger = logging.getLogger(__name__)

TYPE_ASCII = 2
TYPE_SHORT = 3
TYPE_LONG = 4
TYPE_RATIONAL = 5

# Bytes per value for every TIFF 6.0 field type
TYPE_SIZES: Dict[int, int] = {
	1: 1,  # BYTE
	2: 1,  # ASCII
	3: 2,  # SHORT
	4: 4,  # LONG
	5: 8,  # RATIONAL
	6: 1,  # SBYTE
	7: 1,  # UNDEFINED
	8: 2,  # SSHORT
	9: 4,  # SLONG
	10: 8,  # SRATIONAL
	11: 4,  # FLOAT
	12: 8,  # DOUBLE
}

ENTRY_SIZE = 12
INLINE_SIZE = 4
TIFF_MAGIC = 42


@dataclass(frozen=True)
class TiffHeader:
	byte_order: ByteOrder
	first_ifd_offset: int


@dataclass(frozen=True)
class IfdEntry:
	tag: int
	type: int
	count: int
	value_or_offset: int
	# position of the 4-byte value field, relative to the TIFF header
	field_offset: int


@dataclass(frozen=True)
class DecodedTag:
	name: str
	value: str


@dataclass(frozen=True)
class EntryResult:
	decoded: Optional[DecodedTag] = None
	skipped: Optional[str] = None


def value_byte_length(type_: int, count: int) -> Optional[int]:
	size = TYPE_SIZES.get(type_)
	if size is None:
		return None
	return size * count


def _value_location(entry: IfdEntry) -> Tuple[int, int]:
	length = value_byte_length(entry.type, entry.count) or 0
	if length <= INLINE_SIZE:
		return entry.field_offset, length
	return entry.value_or_offset, length


def read_header(reader: ByteReader) -> Optional[TiffHeader]:
	if reader.startswith(b"II"):
		order = ByteOrder.LITTLE
	elif reader.startswith(b"MM"):
		order = ByteOrder.BIG
	else:
		logger.debug("Unknown TIFF byte order marker, skipping directory")
		return None
	try:
		magic = reader.u16(2, order)
		first_ifd = reader.u32(4, order)
	except OutOfBounds:
		logger.debug("TIFF header truncated (%d bytes)", len(reader))
		return None
	if magic != TIFF_MAGIC:
		logger.debug("Unexpected TIFF magic %d", magic)
	return TiffHeader(byte_order=order, first_ifd_offset=first_ifd)


def read_ifd(reader: ByteReader, order: ByteOrder, offset: int) -> List[IfdEntry]:
	try:
		count = reader.u16(offset, order)
	except OutOfBounds:
		logger.debug("IFD offset 0x%x outside TIFF block", offset)
		return []
	entries: List[IfdEntry] = []
	for i in range(count):
		pos = offset + 2 + i * ENTRY_SIZE
		try:
			entries.append(IfdEntry(
				tag=reader.u16(pos, order),
				type=reader.u16(pos + 2, order),
				count=reader.u32(pos + 4, order),
				value_or_offset=reader.u32(pos + 8, order),
				field_offset=pos + 8,
			))
		except OutOfBounds:
			logger.debug("IFD at 0x%x truncated after %d of %d entries", offset, i, count)
			break
	return entries


def _decode_ascii(reader: ByteReader, order: ByteOrder, entry: IfdEntry) -> str:
	start, _ = _value_location(entry)
	# the last byte is reserved for the terminator
	wanted = entry.count - 1
	available = min(wanted, len(reader) - start)
	raw = reader.read(start, max(available, 0))
	end = raw.find(b"\x00")
	if end >= 0:
		return raw[:end].decode("latin-1")
	if available < wanted:
		raise OutOfBounds(start, wanted, len(reader))
	return raw.decode("latin-1")


def _decode_short(reader: ByteReader, order: ByteOrder, entry: IfdEntry) -> str:
	return str(reader.u16(entry.field_offset, order))


def _decode_long(reader: ByteReader, order: ByteOrder, entry: IfdEntry) -> str:
	return str(reader.u32(entry.field_offset, order))


def _decode_rational(reader: ByteReader, order: ByteOrder, entry: IfdEntry) -> str:
	num = reader.u32(entry.value_or_offset, order)
	den = reader.u32(entry.value_or_offset + 4, order)
	if den == 1:
		return str(num)
	return f"{num}/{den}"


_DECODERS: Dict[int, Callable[[ByteReader, ByteOrder, IfdEntry], str]] = {
	TYPE_ASCII: _decode_ascii,
	TYPE_SHORT: _decode_short,
	TYPE_LONG: _decode_long,
	TYPE_RATIONAL: _decode_rational,
}


def decode_entry(reader: ByteReader, order: ByteOrder, entry: IfdEntry) -> EntryResult:
	name = tag_name(entry.tag)
	if name is None:
		return EntryResult(skipped="unregistered tag")
	decoder = _DECODERS.get(entry.type)
	if decoder is None:
		return EntryResult(skipped=f"unsupported type {entry.type}")
	if entry.count == 0:
		return EntryResult(skipped="empty value")
	try:
		value = decoder(reader, order, entry)
	except OutOfBounds as e:
		return EntryResult(skipped=f"out of bounds: {e}")
	if not value:
		return EntryResult(skipped="empty string")
	return EntryResult(decoded=DecodedTag(name=name, value=value))


def decode_tiff(reader: ByteReader, follow_exif_ifd: bool = True) -> List[DecodedTag]:
	"""
	Decode IFD0 of the TIFF block in `reader` (offset 0 = TIFF header).
	With `follow_exif_ifd`, entries of the Exif sub-IFD are appended after IFD0's.
	"""
	header = read_header(reader)
	if header is None:
		return []
	tags: List[DecodedTag] = []
	pending = [header.first_ifd_offset]
	visited = set()
	while pending:
		offset = pending.pop(0)
		if offset in visited:
			continue
		visited.add(offset)
		for entry in read_ifd(reader, header.byte_order, offset):
			result = decode_entry(reader, header.byte_order, entry)
			if result.decoded is None:
				logger.debug("Skipping tag 0x%04x: %s", entry.tag, result.skipped)
				continue
			tags.append(result.decoded)
			if follow_exif_ifd and entry.tag == EXIF_IFD_POINTER and entry.type == TYPE_LONG and entry.count == 1:
				pending.append(entry.value_or_offset)
	return tags
