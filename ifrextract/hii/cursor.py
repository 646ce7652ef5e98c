# IFREXTRACT: HII/IFR Extraction Framework
# Copyright (c) 2024, IFREXTRACT Contributors
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; Version 2.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301, USA.
#

"""
Bounds-checked access to a firmware image

All HII parsing reads the image through a ByteCursor. Every read checks
the requested range against the cursor limit before touching the buffer
and raises OutOfBoundsError when it does not fit.

usage:
    >>> cur = ByteCursor(image)
    >>> cur.read_u32(0x100)
    >>> cur.seek(0x100)
    >>> cur.next_u16()
"""

import struct
from typing import Optional, Tuple, Union
from uuid import UUID

from ifrextract.library.exceptions import OutOfBoundsError

UINT8 = struct.Struct('<B')
UINT16 = struct.Struct('<H')
UINT32 = struct.Struct('<I')
UINT64 = struct.Struct('<Q')
EFI_GUID_SIZE = 16

Image = Union[bytes, bytearray, memoryview]


class ByteCursor:

    def __init__(self, image: Image, offset: int = 0, limit: int = -1) -> None:
        self._data = memoryview(image).cast('B')
        self.size = len(self._data)
        if limit < 0 or limit > self.size:
            limit = self.size
        self.limit = limit
        self.position = 0
        self.seek(offset)

    def _check(self, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > self.limit:
            raise OutOfBoundsError(offset, length, self.limit)

    def fits(self, offset: int, length: int) -> bool:
        return offset >= 0 and length >= 0 and offset + length <= self.limit

    #
    # Random access
    #
    def read_u8(self, offset: int) -> int:
        self._check(offset, 1)
        return self._data[offset]

    def read_u16(self, offset: int) -> int:
        self._check(offset, 2)
        return UINT16.unpack_from(self._data, offset)[0]

    def read_u32(self, offset: int) -> int:
        self._check(offset, 4)
        return UINT32.unpack_from(self._data, offset)[0]

    def read_u64(self, offset: int) -> int:
        self._check(offset, 8)
        return UINT64.unpack_from(self._data, offset)[0]

    def read_uint(self, offset: int, size: int) -> int:
        self._check(offset, size)
        return int.from_bytes(self._data[offset:offset + size], 'little')

    def read_bytes(self, offset: int, length: int) -> bytes:
        self._check(offset, length)
        return self._data[offset:offset + length].tobytes()

    def read_struct(self, fmt: str, offset: int) -> Tuple:
        self._check(offset, struct.calcsize(fmt))
        return struct.unpack_from(fmt, self._data, offset)

    def read_guid(self, offset: int) -> UUID:
        return UUID(bytes_le=self.read_bytes(offset, EFI_GUID_SIZE))

    def read_utf16le_cstring(self, offset: int, max_len: Optional[int] = None) -> Tuple[str, int]:
        """
        Reads a null-terminated UTF-16LE string.

        ``max_len`` is the number of bytes the string (terminator included)
        may span, None for no limit; it is capped at the cursor limit and a
        negative value allows no bytes at all. Returns the decoded
        text and the number of bytes consumed including the terminator.
        Invalid code units are replaced, a missing terminator raises
        OutOfBoundsError.
        """
        end = self.limit if max_len is None else min(self.limit, offset + max(max_len, 0))
        self._check(offset, 0)
        pos = offset
        while pos + 2 <= end:
            if self._data[pos] == 0 and self._data[pos + 1] == 0:
                text = self._data[offset:pos].tobytes().decode('utf-16-le', errors='replace')
                return text, pos + 2 - offset
            pos += 2
        raise OutOfBoundsError(offset, pos + 2 - offset, end)

    def read_ascii_cstring(self, offset: int, max_len: Optional[int] = None) -> Tuple[bytes, int]:
        """Reads a null-terminated byte string, returns (raw bytes, consumed bytes)."""
        end = self.limit if max_len is None else min(self.limit, offset + max(max_len, 0))
        self._check(offset, 0)
        pos = offset
        while pos < end:
            if self._data[pos] == 0:
                return self._data[offset:pos].tobytes(), pos + 1 - offset
            pos += 1
        raise OutOfBoundsError(offset, pos + 1 - offset, end)

    #
    # Sequential access
    #
    def seek(self, offset: int) -> None:
        self._check(offset, 0)
        self.position = offset

    def skip(self, length: int) -> None:
        self._check(self.position, length)
        self.position += length

    def remaining(self) -> int:
        return self.limit - self.position

    def next_u8(self) -> int:
        value = self.read_u8(self.position)
        self.position += 1
        return value

    def next_u16(self) -> int:
        value = self.read_u16(self.position)
        self.position += 2
        return value

    def next_u32(self) -> int:
        value = self.read_u32(self.position)
        self.position += 4
        return value

    def next_u64(self) -> int:
        value = self.read_u64(self.position)
        self.position += 8
        return value

    def next_uint(self, size: int) -> int:
        value = self.read_uint(self.position, size)
        self.position += size
        return value

    def next_bytes(self, length: int) -> bytes:
        value = self.read_bytes(self.position, length)
        self.position += length
        return value

    def next_guid(self) -> UUID:
        value = self.read_guid(self.position)
        self.position += EFI_GUID_SIZE
        return value

    def next_utf16le_cstring(self, max_len: Optional[int] = None) -> str:
        text, consumed = self.read_utf16le_cstring(self.position, max_len)
        self.position += consumed
        return text

    def next_ascii_cstring(self, max_len: Optional[int] = None) -> bytes:
        raw, consumed = self.read_ascii_cstring(self.position, max_len)
        self.position += consumed
        return raw

    def sub_cursor(self, offset: int, length: int) -> 'ByteCursor':
        """Returns a cursor over the same image limited to [offset, offset + length)."""
        self._check(offset, length)
        return ByteCursor(self._data, offset, offset + length)
