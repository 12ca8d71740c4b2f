"""Synthetic big-endian PRM / TRV / TRF / TRS buffers for the tests."""

from __future__ import annotations

import struct
from typing import Iterable, Sequence, Tuple

_HEADER = struct.Struct(">16sh2xih2xih2xiiiiih2xi9h2x3i9h2x3ih2x3i")
assert _HEADER.size == 144


def header(name: str, nverts: int, nnormals: int, nprims: int,
           flags: int = 0, origin: Tuple[int, int, int] = (0, 0, 0)) -> bytes:
    return _HEADER.pack(
        name.encode("ascii"),
        nverts, 0x1000,       # pointers are junk on purpose
        nnormals, 0x2000,
        nprims, 0x3000,
        0, 0, 0,              # unused ptrs, skeleton ref
        0,                    # extent
        flags,
        0x7FFFFFFF,           # next ptr
        *([4096, 0, 0, 0, 4096, 0, 0, 0, 4096]),
        *origin,
        *([4096, 0, 0, 0, 4096, 0, 0, 0, 4096]),
        0, 0, 0,
        0,
        0, 0, 0,
    )


def vec3s(points: Iterable[Tuple[int, int, int]]) -> bytes:
    return b"".join(struct.pack(">3h2x", *p) for p in points)


def prim(tag: int, payload: bytes, flags: int = 0) -> bytes:
    return struct.pack(">hh", tag, flags) + payload


def f3(i: Sequence[int], color: int) -> bytes:
    return struct.pack(">3h2xI", *i, color)


def f4(i: Sequence[int], color: int) -> bytes:
    return struct.pack(">4hI", *i, color)


def ft3(i: Sequence[int], tex: int, uvs: Sequence[Tuple[int, int]], color: int) -> bytes:
    flat_uvs = [c for uv in uvs for c in uv]
    return struct.pack(">3hh4x6B2xI", *i, tex, *flat_uvs, color)


def g3(i: Sequence[int], colors: Sequence[int]) -> bytes:
    return struct.pack(">3h2x3I", *i, *colors)


def gt4(i: Sequence[int], tex: int, uvs: Sequence[Tuple[int, int]], colors: Sequence[int]) -> bytes:
    flat_uvs = [c for uv in uvs for c in uv]
    return struct.pack(">4hh4x8B2x4I", *i, tex, *flat_uvs, *colors)


def lsf3(i: Sequence[int], normal: int, color: int) -> bytes:
    return struct.pack(">3hhI", *i, normal, color)


def prm_object(name: str, verts, prims: Sequence[bytes], normals=(), **kw) -> bytes:
    return header(name, len(verts), len(normals), len(prims), **kw) + vec3s(verts) + vec3s(normals) + b"".join(prims)


QUAD = [(0, 0, 0), (100, 0, 0), (100, 0, 100), (0, 0, 100)]


def trv(points: Iterable[Tuple[int, int, int]]) -> bytes:
    return b"".join(struct.pack(">3i4x", *p) for p in points)


def trf_face(i: Sequence[int], normal=(0, 4096, 0), tex: int = 0, flags: int = 0, color: int = 0x808080FF) -> bytes:
    return struct.pack(">4h3hBBI", *i, *normal, tex, flags, color)


def trs_section(next_junction: int, previous: int, nxt: int, x: int, y: int, z: int,
                first_face: int, face_count: int, flags: int = 0) -> bytes:
    return (
        struct.pack(">6i", next_junction, previous, nxt, x, y, z)
        + bytes(116)
        + struct.pack(">IH4xH", first_face, face_count, flags)
    )
