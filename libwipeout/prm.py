"""libwipeout.prm

PRM object container reader.

A PRM file is zero or more objects laid out back to back:

    header      144 bytes (see read_object_header)
    vertices    vertex_count    * (i16 x, y, z + pad)
    normals     normal_count    * (i16 x, y, z + pad)
    primitives  primitive_count * (i16 type + i16 flags + payload)

The header also stores pointers to each of those arrays. They are offsets
into the game's own loader memory, so we never follow them and walk the
file strictly in order instead. Zero-vertex objects (markers, lights) still
carry normals and primitives, which must be consumed to stay in sync.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from .binary import Bin
from .errors import (
    ObjectNotFoundError,
    TruncatedDataError,
    UnknownPrimitiveError,
    WipeoutReadError,
)
from .model import DecodeResult, Mesh, ObjectHeader, ObjectInfo, Polygon, Vec3, max_abs_radius
from .mock import create_mock_mesh
from .primitives import decode_primitive, skip_primitive
from .session import DecodeSession

_log = logging.getLogger(__name__)

OBJECT_HEADER_SIZE = 144
MAX_OBJECT_COUNT = 10000
VERTEX_RECORD_SIZE = 8
NORMAL_RECORD_SIZE = 8


# -----------------------------
# Header
# -----------------------------

def read_object_header(b: Bin) -> ObjectHeader:
    start = b.tell()
    name = b.fixed_str(16)

    vertex_count = b.s16(); b.skip(2)
    _ = b.s32()  # vertices ptr
    normal_count = b.s16(); b.skip(2)
    _ = b.s32()  # normals ptr
    primitive_count = b.s16(); b.skip(2)
    _ = b.s32()  # primitives ptr

    b.skip(4)  # unused ptr
    b.skip(4)  # unused ptr
    b.skip(4)  # skeleton ref
    _ = b.s32()  # extent
    flags = b.s16(); b.skip(2)
    _ = b.s32()  # next ptr

    b.skip(3 * 3 * 2 + 2)  # relative rotation matrix + pad
    origin = (b.s32(), b.s32(), b.s32())

    b.skip(3 * 3 * 2 + 2)  # absolute rotation matrix + pad
    b.skip(3 * 4)  # absolute translation
    b.skip(2 + 2)  # skeleton update flag + pad
    b.skip(3 * 4)  # skeleton super / sub / next

    return ObjectHeader(
        name=name,
        vertex_count=vertex_count,
        normal_count=normal_count,
        primitive_count=primitive_count,
        flags=flags,
        origin=origin,
        offset=start,
    )


def _counts_invalid(h: ObjectHeader) -> bool:
    counts = (h.vertex_count, h.normal_count, h.primitive_count)
    return any(c < 0 or c > MAX_OBJECT_COUNT for c in counts)


# -----------------------------
# Body
# -----------------------------

def _read_vec3_array(b: Bin, count: int) -> List[Vec3]:
    out: List[Vec3] = []
    for _ in range(count):
        x = b.s16(); y = b.s16(); z = b.s16()
        b.skip(2)
        out.append((float(x), float(y), float(z)))
    return out


def _indices_valid(poly: Polygon, vertex_count: int) -> bool:
    return all(0 <= i < vertex_count for i in poly.indices)


def _read_primitives(
    b: Bin, h: ObjectHeader, vertex_count: int, session: Optional[DecodeSession]
) -> Tuple[List[Polygon], Optional[str]]:
    """Decode the primitive array. Returns (polygons, stop reason or None)."""
    polys: List[Polygon] = []
    for i in range(h.primitive_count):
        if b.remaining() < 4:
            reason = f"Truncated primitive data at {b.tell()} in '{h.name}'"
            _log.warning(reason)
            return polys, reason
        tag = b.s16()
        flags = b.s16()
        try:
            parsed, _ = decode_primitive(b, tag, flags, session)
        except UnknownPrimitiveError as e:
            reason = f"Unknown primitive type {e.tag} (record {i}) in '{h.name}', stopping parse"
            _log.warning(reason)
            return polys, reason
        except TruncatedDataError as e:
            reason = f"Failed to parse primitive {i} type {tag} in '{h.name}': {e}"
            _log.warning(reason)
            return polys, reason

        for poly in parsed:
            if _indices_valid(poly, vertex_count):
                polys.append(poly)
            else:
                _log.warning(
                    "Primitive %d type %d in '%s' references %s with %d vertices, skipping",
                    i, tag, h.name, poly.indices, vertex_count,
                )
    return polys, None


def _read_mesh(
    b: Bin, h: ObjectHeader, session: Optional[DecodeSession]
) -> Tuple[Mesh, Optional[str]]:
    vertices = _read_vec3_array(b, h.vertex_count)
    normals = _read_vec3_array(b, h.normal_count)
    polys, reason = _read_primitives(b, h, len(vertices), session)

    mesh = Mesh(
        name=h.name,
        radius=max_abs_radius(vertices),
        origin=(float(h.origin[0]), float(h.origin[1]), float(h.origin[2])),
        flags=h.flags,
        vertices=vertices,
        normals=normals,
        primitives=polys,
    )
    return mesh, reason


def _skip_body(b: Bin, h: ObjectHeader, session: Optional[DecodeSession]) -> None:
    b.skip(h.vertex_count * VERTEX_RECORD_SIZE)
    b.skip(h.normal_count * NORMAL_RECORD_SIZE)
    for _ in range(h.primitive_count):
        tag = b.s16()
        _ = b.s16()  # flags
        skip_primitive(b, tag, session)


# -----------------------------
# Object walk
# -----------------------------

def _iter_headers(b: Bin, result: DecodeResult) -> Iterator[Tuple[int, ObjectHeader]]:
    """Yield (index, header) while a full header fits; the caller consumes the body."""
    index = 0
    while b.remaining() >= OBJECT_HEADER_SIZE:
        h = read_object_header(b)
        if _counts_invalid(h):
            reason = (
                f"Invalid counts for object {index} '{h.name}' "
                f"({h.vertex_count}/{h.normal_count}/{h.primitive_count}), stopping parse"
            )
            _log.warning(reason)
            result.stop(reason)
            return
        yield index, h
        index += 1


def decode_objects(
    data: bytes, index: Optional[int] = None, session: Optional[DecodeSession] = None
) -> DecodeResult:
    """Decode vertex-bearing objects from a PRM buffer.

    With ``index=None`` every vertex-bearing object is decoded. With an
    integer only the object at that container position is, and only if it
    has vertices; everything before it is still walked to stay in sync.
    Decoding stops at the first corrupt header, truncated body or unknown
    primitive type; meshes completed before that are kept.
    """
    b = Bin(data)
    result = DecodeResult()

    for i, h in _iter_headers(b, result):
        if index is not None and i > index:
            break
        wanted = index is None or i == index
        if h.vertex_count == 0 or not wanted:
            try:
                _skip_body(b, h, session)
            except WipeoutReadError as e:
                reason = f"Could not skip object {i} '{h.name}': {e}"
                _log.warning(reason)
                result.stop(reason)
                break
            continue

        try:
            mesh, reason = _read_mesh(b, h, session)
        except TruncatedDataError as e:
            reason = f"Truncated vertex/normal data in object {i} '{h.name}': {e}"
            _log.warning(reason)
            result.stop(reason)
            break

        _log.info(
            "Loaded object '%s' (index %d): %d vertices, %d primitives",
            mesh.name, i, len(mesh.vertices), len(mesh.primitives),
        )
        result.items.append(mesh)
        if reason is not None:
            # Stream position is unknown past this point.
            result.stop(reason)
            break
        if index is not None:
            break

    return result


def decode_object(data: bytes, index: int = 0, session: Optional[DecodeSession] = None) -> Mesh:
    result = decode_objects(data, index, session)
    if not result.items:
        detail = f": {result.reason}" if result.reason else ""
        raise ObjectNotFoundError(f"No valid mesh at object index {index}{detail}")
    return result.items[0]


def describe_objects(data: bytes, session: Optional[DecodeSession] = None) -> List[ObjectInfo]:
    """Every object header in the buffer, including zero-vertex ones."""
    b = Bin(data)
    result = DecodeResult()
    infos: List[ObjectInfo] = []
    for i, h in _iter_headers(b, result):
        infos.append(ObjectInfo(
            index=i,
            name=h.name,
            vertex_count=h.vertex_count,
            normal_count=h.normal_count,
            primitive_count=h.primitive_count,
            flags=h.flags,
            origin=h.origin,
        ))
        try:
            _skip_body(b, h, session)
        except WipeoutReadError as e:
            _log.warning("Could not skip object %d '%s': %s, stopping scan", i, h.name, e)
            break
    return infos


def scan_objects(data: bytes, session: Optional[DecodeSession] = None) -> List[Tuple[int, str]]:
    """(index, name) for every vertex-bearing object, without building meshes."""
    return [(o.index, o.name) for o in describe_objects(data, session) if o.vertex_count > 0]


# -----------------------------
# File front ends
# -----------------------------

def read_prm_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        data = f.read()
    _log.info("Loading PRM: %s (%d bytes)", path, len(data))
    return data


def load_object(path: str, index: int = 0, session: Optional[DecodeSession] = None) -> Mesh:
    return decode_object(read_prm_bytes(path), index, session)


def load_all_objects(path: str, session: Optional[DecodeSession] = None) -> List[Mesh]:
    result = decode_objects(read_prm_bytes(path), None, session)
    if not result.items:
        detail = f": {result.reason}" if result.reason else ""
        raise ObjectNotFoundError(f"No valid mesh in {path}{detail}")
    _log.info("Loaded %d total objects from %s", len(result.items), path)
    return result.items


def scan_prm(path: str, session: Optional[DecodeSession] = None) -> List[Tuple[int, str]]:
    objects = scan_objects(read_prm_bytes(path), session)
    _log.info("Scan complete: %d objects found in %s", len(objects), path)
    return objects


def load_object_or_mock(
    path: str, index: int = 0, name: Optional[str] = None, session: Optional[DecodeSession] = None
) -> Mesh:
    """Decode an object, falling back to the procedural stand-in mesh."""
    try:
        return load_object(path, index, session)
    except (OSError, WipeoutReadError) as e:
        _log.warning("Falling back to mock mesh for %s[%d]: %s", path, index, e)
        return create_mock_mesh(name or f"mock_{index}")
