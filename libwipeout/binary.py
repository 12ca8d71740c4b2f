"""libwipeout.binary

Big-endian byte cursor shared by every reader.

All PlayStation geometry files are big-endian, have no magic and no
version field, so the cursor only does fixed-width reads that advance an explicit
position and refuse to run past the end.
"""

from __future__ import annotations

import struct

from .errors import TruncatedDataError
from .model import Rgba

_S16 = struct.Struct(">h")
_U16 = struct.Struct(">H")
_S32 = struct.Struct(">i")
_U32 = struct.Struct(">I")


class Bin:
    __slots__ = ("data", "ofs")

    def __init__(self, data: bytes, ofs: int = 0):
        self.data = data
        self.ofs = ofs

    def __len__(self) -> int:
        return len(self.data)

    def tell(self) -> int:
        return self.ofs

    def seek(self, ofs: int) -> None:
        if ofs < 0 or ofs > len(self.data):
            raise TruncatedDataError(f"Seek to {ofs} outside buffer of {len(self.data)} bytes")
        self.ofs = ofs

    def remaining(self) -> int:
        return len(self.data) - self.ofs

    def _need(self, n: int) -> None:
        if n < 0 or self.ofs + n > len(self.data):
            raise TruncatedDataError(f"Unexpected EOF at {self.ofs}, need {n}")

    def read(self, n: int) -> bytes:
        self._need(n)
        b = self.data[self.ofs:self.ofs + n]
        self.ofs += n
        return b

    def skip(self, n: int) -> None:
        self._need(n)
        self.ofs += n

    def u8(self) -> int:
        self._need(1)
        v = self.data[self.ofs]
        self.ofs += 1
        return v

    def s8(self) -> int:
        v = self.u8()
        return v - 0x100 if v & 0x80 else v

    def _unpack(self, st: struct.Struct) -> int:
        self._need(st.size)
        v = st.unpack_from(self.data, self.ofs)[0]
        self.ofs += st.size
        return v

    def u16(self) -> int:
        return self._unpack(_U16)

    def s16(self) -> int:
        return self._unpack(_S16)

    def u32(self) -> int:
        return self._unpack(_U32)

    def s32(self) -> int:
        return self._unpack(_S32)

    def fixed_str(self, n: int) -> str:
        """Consume exactly ``n`` bytes, keep everything before the first NUL."""
        raw = self.read(n)
        return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def rgba_from_u32(v: int) -> Rgba:
    # Top byte is red; the low byte is ignored and alpha is always opaque.
    return ((v >> 24) & 0xFF, (v >> 16) & 0xFF, (v >> 8) & 0xFF, 255)
