"""
cpihex.reader - sequential reader over a seekable binary stream

(c) 2019--2024 Rob Hagemans
licence: https://opensource.org/licenses/MIT
"""

import io
import logging

from .struct import little_endian as le
from .errors import TruncatedInput


class BinaryReader:
    """Cursor over a seekable binary stream, reading little-endian fields."""

    def __init__(self, stream, name=''):
        self._stream = stream
        self.name = name or getattr(stream, 'name', '') or '<stream>'

    @classmethod
    def from_bytes(cls, data, name=''):
        """Reader over an in-memory buffer."""
        return cls(io.BytesIO(data), name=name)

    def __repr__(self):
        return f"<{type(self).__name__} name='{self.name}' at {self.tell()}>"

    def read(self, size):
        """Read exactly `size` bytes."""
        where = self.tell()
        data = self._stream.read(size)
        if len(data) < size:
            raise TruncatedInput(
                f'{self.name}: expected {size} bytes at offset {where}, '
                f'found {len(data)}.'
            )
        return data

    def read_struct(self, struct_type):
        """Read a structure or array value at the current position."""
        return struct_type.from_bytes(self.read(struct_type.size))

    def _read_scalar(self, scalar_type):
        return int(self.read_struct(scalar_type))

    def read_uint8(self):
        return self._read_scalar(le.uint8)

    def read_int8(self):
        return self._read_scalar(le.int8)

    def read_uint16(self):
        return self._read_scalar(le.uint16)

    def read_int16(self):
        return self._read_scalar(le.int16)

    def read_uint32(self):
        return self._read_scalar(le.uint32)

    def read_int32(self):
        return self._read_scalar(le.int32)

    def seek(self, offset):
        """Move to an absolute offset from the start of the stream."""
        if offset < 0:
            raise TruncatedInput(
                f'{self.name}: cannot seek to negative offset {offset}.'
            )
        logging.debug('Seeking to offset 0x%X', offset)
        self._stream.seek(offset, io.SEEK_SET)

    def skip(self, count):
        """Move by `count` bytes relative to the current position."""
        self.seek(self.tell() + count)

    def tell(self):
        """Current absolute offset."""
        return self._stream.tell()
