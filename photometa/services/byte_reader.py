from __future__ import annotations

import struct
from enum import Enum
from typing import Optional, Union

Buffer = Union[bytes, bytearray, memoryview]


class ByteOrder(Enum):
	BIG = ">"
	LITTLE = "<"


class OutOfBounds(IndexError):
	def __init__(self, offset: int, width: int, size: int):
		self.offset = offset
		self.width = width
		self.size = size
		super().__init__(f"read of {width} byte(s) at 0x{offset:08x} outside buffer of {size} byte(s)")


class ByteReader:
	"""
	Bounds-checked, read-only window over a byte buffer.
	Offsets are relative to the start of the window.
	"""

	def __init__(self, data: Union[Buffer, "ByteReader"], start: int = 0, end: Optional[int] = None):
		view = data._view if isinstance(data, ByteReader) else memoryview(data).cast("B")
		if end is None:
			end = len(view)
		if start < 0 or end < start or end > len(view):
			raise OutOfBounds(start, max(end - start, 0), len(view))
		self._view = view[start:end].toreadonly()

	def __len__(self) -> int:
		return len(self._view)

	def _check(self, offset: int, width: int) -> None:
		if offset < 0 or width < 0 or offset + width > len(self._view):
			raise OutOfBounds(offset, width, len(self._view))

	def read(self, offset: int, length: int) -> bytes:
		self._check(offset, length)
		return self._view[offset:offset + length].tobytes()

	def u8(self, offset: int) -> int:
		self._check(offset, 1)
		return self._view[offset]

	def u16(self, offset: int, order: ByteOrder) -> int:
		self._check(offset, 2)
		return struct.unpack_from(order.value + "H", self._view, offset)[0]

	def u32(self, offset: int, order: ByteOrder) -> int:
		self._check(offset, 4)
		return struct.unpack_from(order.value + "I", self._view, offset)[0]

	def startswith(self, prefix: bytes, offset: int = 0) -> bool:
		if offset < 0 or offset + len(prefix) > len(self._view):
			return False
		return self._view[offset:offset + len(prefix)] == prefix

	def window(self, start: int, end: Optional[int] = None) -> "ByteReader":
		return ByteReader(self, start, end)
