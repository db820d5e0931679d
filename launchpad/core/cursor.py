"""
Byte cursor over an immutable event buffer.

Every read checks bounds first and raises OutOfBounds instead of
returning a short slice, so a truncated buffer can never be mistaken for
a shorter field.
"""

import struct

from solders.pubkey import Pubkey

from ..errors import OutOfBounds


class ByteCursor:
    """Sequential little-endian reader with a single mutable offset."""

    __slots__ = ('_data', 'offset')

    def __init__(self, data: bytes, offset: int = 0):
        self._data = bytes(data)
        self.offset = offset

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def has(self, n: int) -> bool:
        return self.remaining >= n

    def read_fixed(self, n: int) -> bytes:
        if n < 0 or self.offset + n > len(self._data):
            raise OutOfBounds(self.offset, n, len(self._data))
        chunk = self._data[self.offset:self.offset + n]
        self.offset += n
        return chunk

    def read_u8(self) -> int:
        return self.read_fixed(1)[0]

    def read_u64(self) -> int:
        # Stays an int; callers convert to float only for display
        return struct.unpack('<Q', self.read_fixed(8))[0]

    def read_string(self) -> str:
        length = self.read_u8()
        return self.read_fixed(length).decode('utf-8')

    def read_pubkey(self) -> str:
        return str(Pubkey.from_bytes(self.read_fixed(32)))
