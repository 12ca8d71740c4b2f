"""libwipeout.primitives

PRM primitive record decoder.

Every record starts with a common 4-byte header:
    int16 type
    int16 flags
which the caller reads before dispatching here. The payload that follows
has a fixed length per type (see PRIMITIVE_SIZES). Textured payloads carry
two PlayStation GPU words (cba/tsb) between the texture id and the UVs;
we consume them and do not keep them.

A GT4 quad is the only record that expands: it becomes two GT3 triangles,
(i0, i1, i2) and (i1, i3, i2). Light-source quads, sprites, splines and
lights are consumed and contribute nothing.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .binary import Bin, rgba_from_u32
from .errors import TruncatedDataError, UnknownPrimitiveError, WipeoutReadError
from .model import F3, F4, FT3, FT4, G3, G4, GT3, Polygon, PrimitiveType as T, Rgba, Uv
from .session import DecodeSession

_log = logging.getLogger(__name__)

# Payload bytes after the 4-byte type/flags header.
PRIMITIVE_SIZES: Dict[int, int] = {
    T.F3: 12,       # 3*i16 + pad + u32
    T.FT3: 24,      # 3*i16 + tex + cba/tsb + 6*u8 + pad + u32
    T.F4: 12,       # 4*i16 + u32
    T.FT4: 28,      # 4*i16 + tex + cba/tsb + 8*u8 + pad + u32
    T.G3: 20,       # 3*i16 + pad + 3*u32
    T.GT3: 32,      # 3*i16 + tex + cba/tsb + 6*u8 + pad + 3*u32
    T.G4: 24,       # 4*i16 + 4*u32
    T.GT4: 40,      # 4*i16 + tex + cba/tsb + 8*u8 + pad + 4*u32
    T.TSPR: 14,
    T.BSPR: 14,
    T.LSF3: 12,     # 3*i16 + normal + u32
    T.LSFT3: 24,    # 3*i16 + normal + tex + cba/tsb + 6*u8 + u32
    T.LSF4: 16,
    T.LSFT4: 30,
    T.LSG3: 24,
    T.LSGT3: 36,
    T.LSG4: 32,
    T.LSGT4: 46,
    T.SPLINE: 52,          # (vec3 + pad) * 3 + rgba
    T.INFINITE_LIGHT: 12,  # i16*3 + pad + rgba
    T.POINT_LIGHT: 24,     # vec3 + pad + rgba + i16*2
    T.SPOT_LIGHT: 36,      # vec3 + pad + i16*3 + pad + rgba + i16*4
}


def primitive_size(tag: int) -> Optional[int]:
    return PRIMITIVE_SIZES.get(tag)


# -----------------------------
# Field helpers
# -----------------------------

def _indices(b: Bin, n: int) -> tuple:
    return tuple(b.s16() for _ in range(n))


def _uvs(b: Bin, n: int) -> List[Uv]:
    return [(b.u8(), b.u8()) for _ in range(n)]


def _colors(b: Bin, n: int) -> List[Rgba]:
    return [rgba_from_u32(b.u32()) for _ in range(n)]


def _texture_and_uvs(b: Bin, n: int) -> Tuple[int, List[Uv]]:
    tex = b.s16()
    b.skip(4)  # cba, tsb
    return tex, _uvs(b, n)


# -----------------------------
# Per-type parsers
# -----------------------------

def _parse_f3(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 3)
    b.skip(2)
    return [F3(idx, rgba_from_u32(b.u32()), flags)]


def _parse_f4(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 4)
    return [F4(idx, rgba_from_u32(b.u32()), flags)]


def _parse_ft3(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 3)
    tex, uvs = _texture_and_uvs(b, 3)
    b.skip(2)
    return [FT3(idx, tex, uvs, rgba_from_u32(b.u32()), flags)]


def _parse_ft4(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 4)
    tex, uvs = _texture_and_uvs(b, 4)
    b.skip(2)
    return [FT4(idx, tex, uvs, rgba_from_u32(b.u32()), flags)]


def _parse_g3(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 3)
    b.skip(2)
    return [G3(idx, _colors(b, 3), flags)]


def _parse_g4(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 4)
    return [G4(idx, _colors(b, 4), flags)]


def _parse_gt3(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 3)
    tex, uvs = _texture_and_uvs(b, 3)
    b.skip(2)
    return [GT3(idx, tex, uvs, _colors(b, 3), flags)]


def _parse_gt4(b: Bin, flags: int) -> List[Polygon]:
    i0, i1, i2, i3 = _indices(b, 4)
    tex, (uv0, uv1, uv2, uv3) = _texture_and_uvs(b, 4)
    b.skip(2)
    c0, c1, c2, c3 = _colors(b, 4)
    # Second half uses the (i1, i3, i2) diagonal; attributes follow their vertex.
    return [
        GT3((i0, i1, i2), tex, [uv0, uv1, uv2], [c0, c1, c2], flags, T.GT4),
        GT3((i1, i3, i2), tex, [uv1, uv3, uv2], [c1, c3, c2], flags, T.GT4),
    ]


def _parse_lsf3(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 3)
    b.s16()  # normal index, unused until lighting exists
    return [F3(idx, rgba_from_u32(b.u32()), flags, T.LSF3)]


def _parse_lsft3(b: Bin, flags: int) -> List[Polygon]:
    idx = _indices(b, 3)
    b.s16()  # normal index
    tex, uvs = _texture_and_uvs(b, 3)
    return [FT3(idx, tex, uvs, rgba_from_u32(b.u32()), flags, T.LSFT3)]


_PARSERS: Dict[int, Callable[[Bin, int], List[Polygon]]] = {
    T.F3: _parse_f3,
    T.FT3: _parse_ft3,
    T.F4: _parse_f4,
    T.FT4: _parse_ft4,
    T.G3: _parse_g3,
    T.GT3: _parse_gt3,
    T.G4: _parse_g4,
    T.GT4: _parse_gt4,
    T.LSF3: _parse_lsf3,
    T.LSFT3: _parse_lsft3,
}


# -----------------------------
# Public entry points
# -----------------------------

def _payload_size(b: Bin, tag: int) -> int:
    size = PRIMITIVE_SIZES.get(tag)
    if size is None:
        raise UnknownPrimitiveError(tag, b.tell())
    if b.remaining() < size:
        raise TruncatedDataError(
            f"Primitive type {tag} needs {size} bytes at {b.tell()}, {b.remaining()} left"
        )
    return size


def decode_primitive(
    b: Bin, tag: int, flags: int, session: Optional[DecodeSession] = None
) -> Tuple[List[Polygon], int]:
    """Decode one record payload at the cursor.

    Returns the polygons it produced (zero, one or two) and the number of
    bytes consumed. The cursor is left untouched if the record is unknown
    or does not fit in the buffer.
    """
    if session is not None:
        session.note_tag(tag)
    size = _payload_size(b, tag)
    start = b.tell()

    parser = _PARSERS.get(tag)
    if parser is None:
        _log.debug("Skipping %d-byte primitive of type %d (no geometry)", size, tag)
        b.skip(size)
        return [], size

    polys = parser(b, flags)
    consumed = b.tell() - start
    if consumed != size:
        raise WipeoutReadError(f"Primitive type {tag} consumed {consumed} bytes, expected {size}")
    return polys, consumed


def skip_primitive(b: Bin, tag: int, session: Optional[DecodeSession] = None) -> int:
    """Advance past one record payload without building anything."""
    if session is not None:
        session.note_tag(tag)
    size = _payload_size(b, tag)
    b.skip(size)
    return size
